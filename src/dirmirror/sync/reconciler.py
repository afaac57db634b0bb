"""Apply a classification to the live filesystem.

Operations run in a fixed order so that no step trips over another:

1. Delete stale files.
2. Delete stale directories, deepest first.
3. Create missing directories, parents first.
4. Copy new and changed files.

All deletions therefore finish before any creation starts, which lets a
path change type between runs (file -> directory or the reverse).

Directories are created and files copied only through real directories
of the destination; a symlinked parent fails the item.

Error handling is per item: every attempted operation yields exactly one
``OperationRecord``, and an ``OSError`` from the filesystem becomes a
failed record instead of aborting the batch.  Nothing is retried.
"""

from __future__ import annotations

import logging
from typing import Callable

from dirmirror.file_handler import (
    copy_file,
    create_directory,
    delete_file,
    delete_tree,
    reject_symlinked_parents,
)
from dirmirror.sync.mapper import PathMapper, path_depth
from dirmirror.sync.models import (
    Classification,
    DirectoryEntry,
    FileEntry,
    OperationKind,
    OperationRecord,
    Outcome,
)
from dirmirror.sync.reporter import format_record

logger = logging.getLogger(__name__)

RecordCallback = Callable[[OperationRecord], None]


class Reconciler:
    """Execute mirror operations between two roots.

    Args:
        mapper: Path mapper for the source and destination roots.
        on_record: Optional callback invoked with each record as soon as
            it is produced.
    """

    def __init__(
        self,
        mapper: PathMapper,
        on_record: RecordCallback | None = None,
    ) -> None:
        self.mapper = mapper
        self.on_record = on_record

    # ------------------------------------------------------------------
    # Main entry point
    # ------------------------------------------------------------------

    def apply(self, classification: Classification) -> list[OperationRecord]:
        """Apply every operation in *classification*.

        Returns:
            One record per operation, in execution order.
        """
        records: list[OperationRecord] = []

        for file_entry in classification.files_to_delete:
            records.append(self._delete_file(file_entry))

        for dir_entry in sorted(
            classification.dirs_to_delete,
            key=lambda d: path_depth(d.relative_path),
            reverse=True,
        ):
            records.append(self._delete_directory(dir_entry))

        for dir_entry in sorted(
            classification.dirs_to_create,
            key=lambda d: (path_depth(d.relative_path), d.relative_path),
        ):
            records.append(self._create_directory(dir_entry))

        for file_entry in classification.files_to_copy:
            records.append(self._copy_file(file_entry))

        return records

    # ------------------------------------------------------------------
    # Per-item operations
    # ------------------------------------------------------------------

    def _delete_file(self, entry: FileEntry) -> OperationRecord:
        target = self.mapper.destination_path(entry.relative_path)
        try:
            delete_file(target)
        except OSError as exc:
            return self._failed(OperationKind.DELETE_FILE, entry, exc)
        return self._succeeded(OperationKind.DELETE_FILE, entry)

    def _delete_directory(self, entry: DirectoryEntry) -> OperationRecord:
        target = self.mapper.destination_path(entry.relative_path)
        try:
            delete_tree(target)
        except OSError as exc:
            return self._failed(OperationKind.DELETE_DIRECTORY, entry, exc)
        return self._succeeded(OperationKind.DELETE_DIRECTORY, entry)

    def _create_directory(self, entry: DirectoryEntry) -> OperationRecord:
        target = self.mapper.destination_path(entry.relative_path)
        try:
            reject_symlinked_parents(target, self.mapper.destination_root)
            create_directory(target)
        except OSError as exc:
            return self._failed(OperationKind.CREATE_DIRECTORY, entry, exc)
        return self._succeeded(OperationKind.CREATE_DIRECTORY, entry)

    def _copy_file(self, entry: FileEntry) -> OperationRecord:
        source = self.mapper.source_path(entry.relative_path)
        target = self.mapper.to_destination(source)
        try:
            reject_symlinked_parents(target, self.mapper.destination_root)
            copied = copy_file(source, target)
        except OSError as exc:
            return self._failed(OperationKind.COPY_FILE, entry, exc)
        return self._succeeded(
            OperationKind.COPY_FILE, entry, bytes_transferred=copied
        )

    # ------------------------------------------------------------------
    # Record helpers
    # ------------------------------------------------------------------

    def _succeeded(
        self,
        kind: OperationKind,
        entry: DirectoryEntry | FileEntry,
        bytes_transferred: int | None = None,
    ) -> OperationRecord:
        record = OperationRecord(
            kind=kind,
            target_path=entry.relative_path,
            outcome=Outcome.SUCCESS,
            bytes_transferred=bytes_transferred,
        )
        logger.info("%s", format_record(record))
        return self._emit(record)

    def _failed(
        self,
        kind: OperationKind,
        entry: DirectoryEntry | FileEntry,
        exc: OSError,
    ) -> OperationRecord:
        record = OperationRecord(
            kind=kind,
            target_path=entry.relative_path,
            outcome=Outcome.FAILURE,
            error=exc.strerror or str(exc),
        )
        logger.error("%s", format_record(record))
        return self._emit(record)

    def _emit(self, record: OperationRecord) -> OperationRecord:
        if self.on_record is not None:
            self.on_record(record)
        return record
