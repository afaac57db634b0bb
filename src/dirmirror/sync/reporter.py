"""Result reduction and report formatting.

- ``summarize`` -- reduce operation records into a ``SyncSummary``.
- ``format_record`` -- one line per operation outcome.
- ``format_summary`` -- counter block for a summary.
- ``format_sync_report`` -- full post-run report.
- ``format_dry_run_preview`` -- planned operations grouped by kind.
- ``report_to_json`` -- structured dict for JSON output.

Nothing in this module performs I/O.
"""

from __future__ import annotations

from collections import Counter
from typing import TYPE_CHECKING, Iterable

from .models import OperationKind, SyncSummary

if TYPE_CHECKING:
    from .models import OperationRecord, SyncReport

_KIND_LABELS: dict[OperationKind, str] = {
    OperationKind.DELETE_FILE: "DELETE FILE",
    OperationKind.DELETE_DIRECTORY: "DELETE DIR",
    OperationKind.CREATE_DIRECTORY: "CREATE DIR",
    OperationKind.COPY_FILE: "COPY FILE",
}

# ------------------------------------------------------------------
# Reduction
# ------------------------------------------------------------------


def summarize(records: Iterable[OperationRecord]) -> SyncSummary:
    """Count successes and failures per operation kind.

    Bytes are summed over successful copies only.

    Args:
        records: Records produced by a reconciler run.

    Returns:
        The derived ``SyncSummary``.
    """
    succeeded: Counter[OperationKind] = Counter()
    failed: Counter[OperationKind] = Counter()
    bytes_copied = 0

    for record in records:
        if record.success:
            succeeded[record.kind] += 1
            if record.kind == OperationKind.COPY_FILE:
                bytes_copied += record.bytes_transferred or 0
        else:
            failed[record.kind] += 1

    return SyncSummary(
        directories_created=succeeded[OperationKind.CREATE_DIRECTORY],
        files_copied=succeeded[OperationKind.COPY_FILE],
        bytes_copied=bytes_copied,
        directories_deleted=succeeded[OperationKind.DELETE_DIRECTORY],
        files_deleted=succeeded[OperationKind.DELETE_FILE],
        failed_directory_deletions=failed[OperationKind.DELETE_DIRECTORY],
        failed_file_deletions=failed[OperationKind.DELETE_FILE],
        failed_directory_creations=failed[OperationKind.CREATE_DIRECTORY],
        failed_file_copies=failed[OperationKind.COPY_FILE],
    )


# ------------------------------------------------------------------
# Human-readable output
# ------------------------------------------------------------------


def format_record(record: OperationRecord) -> str:
    """Format one operation outcome as a single line.

    Examples::

        [COPY FILE] OK a/x.txt (10 bytes)
        [DELETE FILE] FAILED old.txt: Permission denied
    """
    label = _KIND_LABELS[record.kind]
    if record.success:
        line = f"[{label}] OK {record.target_path}"
        if record.bytes_transferred is not None:
            line += f" ({record.bytes_transferred} bytes)"
        return line
    return f"[{label}] FAILED {record.target_path}: {record.error}"


def format_summary(summary: SyncSummary) -> str:
    """Format the counters of a summary as an aligned block."""
    lines = [
        f"  Directories created: {summary.directories_created}",
        f"  Files copied:        {summary.files_copied}",
        f"  Bytes copied:        {summary.bytes_copied}",
        f"  Directories deleted: {summary.directories_deleted}",
        f"  Files deleted:       {summary.files_deleted}",
        f"  Failed directory deletions: {summary.failed_directory_deletions}",
        f"  Failed file deletions:      {summary.failed_file_deletions}",
        f"  Failed directory creations: {summary.failed_directory_creations}",
        f"  Failed file copies:         {summary.failed_file_copies}",
    ]
    return "\n".join(lines)


def format_sync_report(report: SyncReport) -> str:
    """Format a completed run as human-readable text.

    The failure section is only included when at least one operation
    failed; scan issues likewise.

    Args:
        report: The completed sync report.

    Returns:
        Multi-line formatted string.
    """
    lines: list[str] = []

    header = f"Mirror report: {report.source} -> {report.destination}"
    if report.dry_run:
        header += " (DRY RUN)"
    lines.append(header)
    lines.append(f"Started: {report.started_at}")
    if report.completed_at:
        lines.append(f"Completed: {report.completed_at}")
    lines.append("")

    summary = report.summary
    lines.append(
        f"Applied {len(report.records)} operations: "
        f"{summary.total_failures} failed"
    )
    lines.append(format_summary(summary))
    lines.append("")

    if report.failures:
        lines.append("Failures:")
        for r in report.failures:
            lines.append(f"  {format_record(r)}")
        lines.append("")

    if report.scan_issues:
        lines.append("Scan issues (left untouched):")
        for issue in report.scan_issues:
            lines.append(f"  {issue.relative_path}: {issue.error}")
        lines.append("")

    return "\n".join(lines).rstrip()


def format_dry_run_preview(report: SyncReport) -> str:
    """Format the planned operations of a dry run, in execution order.

    Args:
        report: A dry-run report (``dry_run=True``).

    Returns:
        Multi-line formatted string.
    """
    lines: list[str] = []
    lines.append("DRY RUN -- No changes will be made")
    lines.append(f"Source: {report.source}")
    lines.append(f"Destination: {report.destination}")
    lines.append("")

    plan = report.classification
    groups = [
        (OperationKind.DELETE_FILE, plan.files_to_delete),
        (OperationKind.DELETE_DIRECTORY, plan.dirs_to_delete),
        (OperationKind.CREATE_DIRECTORY, plan.dirs_to_create),
        (OperationKind.COPY_FILE, plan.files_to_copy),
    ]
    for kind, entries in groups:
        if not entries:
            continue
        lines.append(f"[{_KIND_LABELS[kind]}]")
        for entry in entries:
            lines.append(f"  {entry.relative_path}")
        lines.append("")

    if plan.is_empty:
        lines.append("No changes needed.")
        lines.append("")

    return "\n".join(lines).rstrip()


# ------------------------------------------------------------------
# JSON output
# ------------------------------------------------------------------


def report_to_json(report: SyncReport) -> dict:
    """Convert a sync report to a dict ready for ``json.dumps``.

    Args:
        report: The sync report.

    Returns:
        Dict with roots, planned counts, summary counters and per-record
        details.
    """
    records_list = []
    for r in report.records:
        entry: dict = {
            "kind": r.kind.value,
            "target_path": r.target_path,
            "outcome": r.outcome.value,
        }
        if r.error:
            entry["error"] = r.error
        if r.bytes_transferred is not None:
            entry["bytes_transferred"] = r.bytes_transferred
        records_list.append(entry)

    plan = report.classification
    return {
        "source": report.source,
        "destination": report.destination,
        "dry_run": report.dry_run,
        "started_at": report.started_at,
        "completed_at": report.completed_at,
        "planned": {
            "files_to_delete": len(plan.files_to_delete),
            "dirs_to_delete": len(plan.dirs_to_delete),
            "dirs_to_create": len(plan.dirs_to_create),
            "files_to_copy": len(plan.files_to_copy),
        },
        "summary": report.summary.model_dump(),
        "records": records_list,
        "scan_issues": [issue.model_dump() for issue in report.scan_issues],
    }
