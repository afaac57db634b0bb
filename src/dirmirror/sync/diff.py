"""Classification of two snapshots into mirror operations.

``classify()`` compares a source and a destination snapshot by set
difference.  The equality policy is explicit and differs per entity
variant:

* Directories are identified by ``directory_key`` -- the relative path
  only.  Directory metadata never causes an update.
* Files are identified by ``file_key`` for copying -- relative path,
  size and modification time together -- but only by relative path for
  deletion.  A destination file whose path exists in the source is never
  deleted; a size or mtime mismatch makes it an overwrite candidate.

Destination symlinks and special files are deleted whatever the source
holds at the same path, so nothing is ever copied through a link.

File contents are never read.  Two files that agree on path, size and
mtime are treated as identical even if their bytes differ.
"""

from __future__ import annotations

import logging

from dirmirror.sync.mapper import is_within
from dirmirror.sync.models import (
    Classification,
    DirectoryEntry,
    FileEntry,
    Snapshot,
)

logger = logging.getLogger(__name__)


def directory_key(entry: DirectoryEntry) -> str:
    """Identity of a directory: its relative path."""
    return entry.relative_path


def file_key(entry: FileEntry) -> tuple[str, int, int]:
    """Identity of a file for change detection: path, size and mtime."""
    return (entry.relative_path, entry.size, entry.modified_time)


def classify(source: Snapshot, destination: Snapshot) -> Classification:
    """Compute the operations that make *destination* mirror *source*.

    Destination entries under a source path that could not be scanned are
    kept: their absence from the source snapshot is not evidence that
    they were removed.

    Args:
        source: Snapshot of the source tree.
        destination: Snapshot of the destination tree.

    Returns:
        A ``Classification`` whose lists are sorted by relative path.
    """
    protected = [issue.relative_path for issue in source.issues]

    def deletable(relative_path: str) -> bool:
        for prefix in protected:
            if is_within(relative_path, prefix):
                logger.debug(
                    "Keeping %s: source subtree %r was not readable",
                    relative_path,
                    prefix,
                )
                return False
        return True

    # Deletions: keyed on relative path only
    source_file_paths = {f.relative_path for f in source.files}
    files_to_delete = [
        f
        for f in destination.files
        if f.relative_path not in source_file_paths
        and deletable(f.relative_path)
    ]
    # Symlinks and special files are never mirrored: always remove them
    files_to_delete.extend(
        e
        for e in destination.special_entries
        if deletable(e.relative_path)
    )

    source_dir_keys = {directory_key(d) for d in source.directories}
    dirs_to_delete = [
        d
        for d in destination.directories
        if directory_key(d) not in source_dir_keys
        and deletable(d.relative_path)
    ]

    # Directory creation: existence only
    if not destination.directories:
        dirs_to_create = list(source.directories)
    else:
        dest_dir_keys = {directory_key(d) for d in destination.directories}
        dirs_to_create = [
            d
            for d in source.directories
            if directory_key(d) not in dest_dir_keys
        ]

    # File copies: path + size + mtime must all match to be skipped
    if not destination.files:
        files_to_copy = list(source.files)
    else:
        dest_file_keys = {file_key(f) for f in destination.files}
        files_to_copy = [
            f for f in source.files if file_key(f) not in dest_file_keys
        ]

    def by_path(entry: DirectoryEntry | FileEntry) -> str:
        return entry.relative_path

    return Classification(
        files_to_delete=sorted(files_to_delete, key=by_path),
        dirs_to_delete=sorted(dirs_to_delete, key=by_path),
        dirs_to_create=sorted(dirs_to_create, key=by_path),
        files_to_copy=sorted(files_to_copy, key=by_path),
    )
