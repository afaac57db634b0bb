"""Tree scanner producing immutable snapshots.

``TreeScanner.scan()`` walks a root depth-first with ``os.scandir`` and
records every directory and regular file below it, keyed by its path
relative to the root.  Per file it captures the size and the
modification time in nanoseconds.

Error handling:

* A root that is missing, is not a directory, or cannot be listed raises
  ``ScanError`` -- the run cannot proceed without the snapshot.
* A child that cannot be listed or stat'ed is recorded as a
  ``ScanIssue`` on the snapshot and logged; the rest of the tree is still
  scanned.

Symbolic links and special files are never followed or mirrored.  They
are listed in ``Snapshot.special_entries`` so a destination can be
cleaned of them.
"""

from __future__ import annotations

import fnmatch
import logging
import os
from pathlib import Path
from typing import Iterable

from dirmirror.sync.errors import ScanError
from dirmirror.sync.mapper import PathMapper
from dirmirror.sync.models import (
    DirectoryEntry,
    FileEntry,
    ScanIssue,
    Snapshot,
)

logger = logging.getLogger(__name__)


class TreeScanner:
    """Capture snapshots of directory trees.

    Args:
        exclude: Glob patterns; an entry is skipped when its relative
            path or its name matches one.  Excluded directories are not
            descended into.
    """

    def __init__(self, exclude: Iterable[str] = ()) -> None:
        self.exclude = tuple(exclude)

    def scan(self, root: Path | str) -> Snapshot:
        """Scan *root* recursively.

        Args:
            root: Absolute path of the tree to scan.

        Returns:
            A ``Snapshot`` with entries sorted by relative path.

        Raises:
            ScanError: If the root does not exist, is not a directory, or
                cannot be listed.
        """
        root_path = Path(root)
        if not root_path.exists():
            raise ScanError(str(root_path), "path does not exist")
        if not root_path.is_dir():
            raise ScanError(str(root_path), "path is not a directory")

        try:
            root_listing = self._list_dir(root_path)
        except OSError as exc:
            raise ScanError(
                str(root_path), exc.strerror or str(exc)
            ) from exc

        directories: list[DirectoryEntry] = []
        files: list[FileEntry] = []
        special: list[FileEntry] = []
        issues: list[ScanIssue] = []

        pending: list[list[os.DirEntry]] = [root_listing]
        while pending:
            listing = pending.pop()
            for entry in listing:
                rel = PathMapper.to_relative(entry.path, root_path)
                if self._is_excluded(rel, entry.name):
                    logger.debug("Excluded: %s", rel)
                    continue

                try:
                    if entry.is_dir(follow_symlinks=False):
                        directories.append(DirectoryEntry(relative_path=rel))
                        try:
                            pending.append(self._list_dir(entry.path))
                        except OSError as exc:
                            self._record_issue(issues, root_path, rel, exc)
                    elif entry.is_file(follow_symlinks=False):
                        files.append(self._file_entry(rel, entry))
                    else:
                        # symlink, FIFO, socket or device
                        logger.debug("Not mirrored: %s", rel)
                        special.append(self._file_entry(rel, entry))
                except OSError as exc:
                    self._record_issue(issues, root_path, rel, exc)

        directories.sort(key=lambda d: d.relative_path)
        files.sort(key=lambda f: f.relative_path)
        special.sort(key=lambda f: f.relative_path)
        issues.sort(key=lambda i: i.relative_path)

        logger.debug(
            "Scanned %s: %d directories, %d files, %d not mirrored, %d issues",
            root_path,
            len(directories),
            len(files),
            len(special),
            len(issues),
        )
        return Snapshot(
            root=str(root_path),
            directories=tuple(directories),
            files=tuple(files),
            special_entries=tuple(special),
            issues=tuple(issues),
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _list_dir(path: Path | str) -> list[os.DirEntry]:
        with os.scandir(path) as it:
            return sorted(it, key=lambda e: e.name)

    @staticmethod
    def _file_entry(rel: str, entry: os.DirEntry) -> FileEntry:
        st = entry.stat(follow_symlinks=False)
        return FileEntry(
            relative_path=rel,
            size=st.st_size,
            modified_time=st.st_mtime_ns,
        )

    def _is_excluded(self, relative_path: str, name: str) -> bool:
        for pattern in self.exclude:
            if fnmatch.fnmatch(relative_path, pattern) or fnmatch.fnmatch(
                name, pattern
            ):
                return True
        return False

    @staticmethod
    def _record_issue(
        issues: list[ScanIssue], root: Path, rel: str, exc: OSError
    ) -> None:
        message = exc.strerror or str(exc)
        logger.warning("Cannot read %s under %s: %s", rel, root, message)
        issues.append(ScanIssue(relative_path=rel, error=message))
