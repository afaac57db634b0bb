"""One-way directory mirror engine.

Public API for reconciling a destination directory tree so that it
exactly mirrors a source tree.

Architecture
------------
Each run rebuilds both snapshots from scratch; there is no persisted
state between runs.  Files are compared by relative path, size and
modification time -- contents are never read.

Modules:

- ``scanner``    -- ``TreeScanner``: capture a ``Snapshot`` of one tree.
- ``mapper``     -- ``PathMapper``: relative keys <-> absolute paths.
- ``diff``       -- ``classify``: set-difference classification.
- ``reconciler`` -- ``Reconciler``: apply operations in safe order.
- ``reporter``   -- ``summarize`` and report formatting.
- ``engine``     -- ``MirrorEngine``: orchestrates a full run.
- ``models``     -- pydantic data contracts.
- ``errors``     -- ``MirrorError``, ``ScanError``.

Usage example
-------------
::

    from pathlib import Path
    from dirmirror.sync import (
        MirrorEngine,
        format_dry_run_preview,
        format_sync_report,
    )

    engine = MirrorEngine(
        source_root=Path("/data/photos"),
        destination_root=Path("/mnt/backup/photos"),
    )

    # Preview first
    preview = engine.run(dry_run=True)
    print(format_dry_run_preview(preview))

    report = engine.run()
    print(format_sync_report(report))
"""

from .diff import classify, directory_key, file_key
from .engine import MirrorEngine
from .errors import MirrorError, ScanError
from .mapper import PathMapper
from .models import (
    Classification,
    DirectoryEntry,
    FileEntry,
    OperationKind,
    OperationRecord,
    Outcome,
    ScanIssue,
    Snapshot,
    SyncReport,
    SyncSummary,
)
from .reconciler import Reconciler
from .reporter import (
    format_dry_run_preview,
    format_record,
    format_summary,
    format_sync_report,
    report_to_json,
    summarize,
)
from .scanner import TreeScanner

__all__ = [
    "Classification",
    "DirectoryEntry",
    "FileEntry",
    "MirrorEngine",
    "MirrorError",
    "OperationKind",
    "OperationRecord",
    "Outcome",
    "PathMapper",
    "Reconciler",
    "ScanError",
    "ScanIssue",
    "Snapshot",
    "SyncReport",
    "SyncSummary",
    "TreeScanner",
    "classify",
    "directory_key",
    "file_key",
    "format_dry_run_preview",
    "format_record",
    "format_summary",
    "format_sync_report",
    "report_to_json",
    "summarize",
]
