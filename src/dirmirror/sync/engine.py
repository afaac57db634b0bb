"""Mirror engine that orchestrates one full reconciliation run.

The ``MirrorEngine`` ties together scanner, mapper, diff, reconciler and
reporter.  It:

1. Scans the source tree, then the destination tree.
2. Classifies both snapshots into delete/create/copy lists.
3. Applies the lists in their safe order (skipped on dry runs).
4. Reduces the resulting records into a ``SyncSummary``.
5. Builds and returns a ``SyncReport``.

Only scanning a root can fail the run (``ScanError``); every operation
failure is isolated to its own record.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable

from dirmirror.sync.diff import classify
from dirmirror.sync.mapper import PathMapper
from dirmirror.sync.models import ScanIssue, Snapshot, SyncReport
from dirmirror.sync.reconciler import Reconciler, RecordCallback
from dirmirror.sync.reporter import summarize
from dirmirror.sync.scanner import TreeScanner

logger = logging.getLogger(__name__)


class MirrorEngine:
    """Make a destination tree mirror a source tree.

    Args:
        source_root: Absolute path of the existing source directory.
        destination_root: Absolute path of the existing destination
            directory.
        exclude: Glob patterns skipped in both trees.
        on_record: Optional callback invoked with each operation record.
    """

    def __init__(
        self,
        source_root: Path,
        destination_root: Path,
        exclude: Iterable[str] = (),
        on_record: RecordCallback | None = None,
    ) -> None:
        self.source_root = Path(source_root)
        self.destination_root = Path(destination_root)

        self.mapper = PathMapper(self.source_root, self.destination_root)
        self.scanner = TreeScanner(exclude=exclude)
        self.reconciler = Reconciler(self.mapper, on_record=on_record)

    # ------------------------------------------------------------------
    # Main entry point
    # ------------------------------------------------------------------

    def run(self, dry_run: bool = False) -> SyncReport:
        """Execute a full mirror cycle.

        Args:
            dry_run: If ``True``, compute operations but do not apply them.

        Returns:
            A ``SyncReport`` describing what was (or would be) done.

        Raises:
            ScanError: If either root cannot be scanned.
        """
        started_at = datetime.now(timezone.utc).isoformat()
        logger.info(
            "Mirroring %s -> %s%s",
            self.source_root,
            self.destination_root,
            " (dry run)" if dry_run else "",
        )

        source = self.scanner.scan(self.source_root)
        destination = self.scanner.scan(self.destination_root)
        logger.info(
            "Source: %d directories, %d files; destination: %d directories, %d files",
            len(source.directories),
            len(source.files),
            len(destination.directories),
            len(destination.files),
        )

        classification = classify(source, destination)
        logger.info(
            "Planned: %d file deletions, %d directory deletions, "
            "%d directory creations, %d file copies",
            len(classification.files_to_delete),
            len(classification.dirs_to_delete),
            len(classification.dirs_to_create),
            len(classification.files_to_copy),
        )

        records = [] if dry_run else self.reconciler.apply(classification)
        summary = summarize(records)

        report = SyncReport(
            source=str(self.source_root),
            destination=str(self.destination_root),
            dry_run=dry_run,
            started_at=started_at,
            completed_at=datetime.now(timezone.utc).isoformat(),
            classification=classification,
            records=records,
            summary=summary,
            scan_issues=self._collect_issues(source, destination),
        )

        if summary.has_failures:
            logger.warning(
                "Mirror finished with %d failed operations",
                summary.total_failures,
            )
        else:
            logger.info("Mirror finished: %d operations applied", len(records))
        return report

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _collect_issues(
        source: Snapshot, destination: Snapshot
    ) -> list[ScanIssue]:
        """Merge scan issues of both snapshots, tagged with their tree."""
        issues: list[ScanIssue] = []
        for tree, snapshot in (("source", source), ("destination", destination)):
            for issue in snapshot.issues:
                issues.append(
                    ScanIssue(
                        relative_path=f"{tree}:{issue.relative_path}",
                        error=issue.error,
                    )
                )
        return issues
