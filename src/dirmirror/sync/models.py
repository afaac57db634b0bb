"""Pydantic models for the mirror engine.

Defines the data contracts shared by the sync modules:

- ``DirectoryEntry`` / ``FileEntry``: one scanned tree entity.
- ``ScanIssue``: a traversal failure below a scanned root.
- ``Snapshot``: everything captured under one root.
- ``Classification``: the four operation lists computed by the diff.
- ``OperationKind`` / ``Outcome`` / ``OperationRecord``: what the
  reconciler attempted and how it went.
- ``SyncSummary``: counters reduced from the records.
- ``SyncReport``: aggregate result of one engine run.

All models are frozen (immutable).
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class DirectoryEntry(BaseModel):
    """A directory inside a scanned tree.

    Attributes:
        relative_path: POSIX-style path relative to the tree root.
    """

    relative_path: str

    model_config = {"frozen": True}


class FileEntry(BaseModel):
    """A regular file inside a scanned tree.

    Attributes:
        relative_path: POSIX-style path relative to the tree root.
        size: File size in bytes at scan time.
        modified_time: Last modification time in nanoseconds since the
            epoch (``st_mtime_ns``) at scan time.
    """

    relative_path: str
    size: int = Field(ge=0)
    modified_time: int

    model_config = {"frozen": True}


class ScanIssue(BaseModel):
    """A child of a scanned root that could not be read.

    Attributes:
        relative_path: Path of the unreadable entry (``""`` for the root).
        error: Error message reported by the filesystem.
    """

    relative_path: str
    error: str

    model_config = {"frozen": True}


class Snapshot(BaseModel):
    """Point-in-time capture of one directory tree.

    Attributes:
        root: Absolute path of the scanned root.
        directories: Every directory below the root (root excluded).
        files: Every regular file below the root.
        special_entries: Symlinks and special files (FIFOs, sockets,
            devices).  They are never mirrored; in a destination they are
            removed.
        issues: Traversal failures encountered while scanning.
    """

    root: str
    directories: tuple[DirectoryEntry, ...] = ()
    files: tuple[FileEntry, ...] = ()
    special_entries: tuple[FileEntry, ...] = ()
    issues: tuple[ScanIssue, ...] = ()

    model_config = {"frozen": True}

    @property
    def directory_paths(self) -> set[str]:
        return {d.relative_path for d in self.directories}

    @property
    def file_paths(self) -> set[str]:
        return {f.relative_path for f in self.files}


class Classification(BaseModel):
    """Operations needed to make a destination match its source.

    Attributes:
        files_to_delete: Destination files with no source counterpart.
        dirs_to_delete: Destination directories with no source counterpart.
        dirs_to_create: Source directories missing from the destination.
        files_to_copy: Source files missing from the destination or
            differing in size or modification time.
    """

    files_to_delete: list[FileEntry] = []
    dirs_to_delete: list[DirectoryEntry] = []
    dirs_to_create: list[DirectoryEntry] = []
    files_to_copy: list[FileEntry] = []

    model_config = {"frozen": True}

    @property
    def total(self) -> int:
        """Number of operations across all four lists."""
        return (
            len(self.files_to_delete)
            + len(self.dirs_to_delete)
            + len(self.dirs_to_create)
            + len(self.files_to_copy)
        )

    @property
    def is_empty(self) -> bool:
        return self.total == 0


class OperationKind(str, Enum):
    """Filesystem operations the reconciler performs."""

    DELETE_FILE = "delete_file"
    DELETE_DIRECTORY = "delete_directory"
    CREATE_DIRECTORY = "create_directory"
    COPY_FILE = "copy_file"


class Outcome(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"


class OperationRecord(BaseModel):
    """Result of one attempted operation.

    Attributes:
        kind: Operation that was attempted.
        target_path: Relative path the operation acted on.
        outcome: Whether the operation succeeded.
        error: Error message if the operation failed.
        bytes_transferred: Bytes written by a successful copy.
    """

    kind: OperationKind
    target_path: str
    outcome: Outcome
    error: str | None = None
    bytes_transferred: int | None = None

    model_config = {"frozen": True}

    @property
    def success(self) -> bool:
        return self.outcome == Outcome.SUCCESS


class SyncSummary(BaseModel):
    """Counters for a completed run, derived from its records."""

    directories_created: int = 0
    files_copied: int = 0
    bytes_copied: int = 0
    directories_deleted: int = 0
    files_deleted: int = 0
    failed_directory_deletions: int = 0
    failed_file_deletions: int = 0
    failed_directory_creations: int = 0
    failed_file_copies: int = 0

    model_config = {"frozen": True}

    @property
    def total_failures(self) -> int:
        return (
            self.failed_directory_deletions
            + self.failed_file_deletions
            + self.failed_directory_creations
            + self.failed_file_copies
        )

    @property
    def has_failures(self) -> bool:
        return self.total_failures > 0


class SyncReport(BaseModel):
    """Aggregate report for one mirror run.

    Attributes:
        source: Absolute source root.
        destination: Absolute destination root.
        dry_run: Whether operations were only planned, not applied.
        started_at: ISO 8601 timestamp when the run started.
        completed_at: ISO 8601 timestamp when the run finished.
        classification: Operations computed by the diff.
        records: One record per applied operation (empty on dry runs).
        summary: Counters reduced from ``records``.
        scan_issues: Traversal failures from both snapshots, with the
            tree (``"source"`` or ``"destination"``) prefixed to the path.
    """

    source: str
    destination: str
    dry_run: bool = False
    started_at: str
    completed_at: str | None = None
    classification: Classification = Field(default_factory=Classification)
    records: list[OperationRecord] = []
    summary: SyncSummary = Field(default_factory=SyncSummary)
    scan_issues: list[ScanIssue] = []

    model_config = {"frozen": True}

    @property
    def failures(self) -> list[OperationRecord]:
        """Records whose outcome is FAILURE."""
        return [r for r in self.records if not r.success]
