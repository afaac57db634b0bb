"""Path mapper between the source and destination trees.

Entities are keyed by their path relative to the tree root, so the same
key identifies "the same path" in both trees.  The mapper owns that
normalisation and translates keys back into absolute paths:

1. **Relative keys** -- ``to_relative`` strips a root prefix and
   normalises separators to ``/``.
2. **Absolute paths** -- ``source_path`` / ``destination_path`` join a
   key onto the corresponding root.
3. **Cross-tree remapping** -- ``remap_path`` swaps the root prefix of an
   absolute path; ``remap`` is a no-op for relative entities.

No filesystem access happens here.
"""

from __future__ import annotations

from pathlib import Path, PurePath, PurePosixPath
from typing import TypeVar

from dirmirror.sync.models import DirectoryEntry, FileEntry

EntryT = TypeVar("EntryT", DirectoryEntry, FileEntry)


class PathMapper:
    """Translate between relative keys and absolute paths of two trees.

    Args:
        source_root: Absolute path of the source tree.
        destination_root: Absolute path of the destination tree.
    """

    def __init__(self, source_root: Path, destination_root: Path) -> None:
        self.source_root = Path(source_root)
        self.destination_root = Path(destination_root)

    # ------------------------------------------------------------------
    # Relative keys
    # ------------------------------------------------------------------

    @staticmethod
    def to_relative(path: PurePath | str, root: PurePath | str) -> str:
        """Return *path* relative to *root* as a normalised key.

        Raises:
            ValueError: If *path* is not below *root*.
        """
        rel = PurePath(path).relative_to(PurePath(root))
        return rel.as_posix()

    @staticmethod
    def validate_relative(relative_path: str) -> str:
        """Check that *relative_path* is a well-formed key.

        Raises:
            ValueError: If the path is empty, absolute, uses backslashes,
                or contains ``.``/``..`` segments.
        """
        if not relative_path:
            raise ValueError("Relative path cannot be empty")
        if "\\" in relative_path:
            raise ValueError(
                f"Relative path must use '/' separators: {relative_path}"
            )
        p = PurePosixPath(relative_path)
        if p.is_absolute():
            raise ValueError(f"Path is not relative: {relative_path}")
        if any(part in (".", "..") for part in relative_path.split("/")):
            raise ValueError(
                f"Relative path cannot contain '.' or '..': {relative_path}"
            )
        return relative_path

    # ------------------------------------------------------------------
    # Key -> absolute path
    # ------------------------------------------------------------------

    def source_path(self, relative_path: str) -> Path:
        """Absolute source path for a relative key."""
        return self.source_root.joinpath(*relative_path.split("/"))

    def destination_path(self, relative_path: str) -> Path:
        """Absolute destination path for a relative key."""
        return self.destination_root.joinpath(*relative_path.split("/"))

    # ------------------------------------------------------------------
    # Cross-tree remapping
    # ------------------------------------------------------------------

    def remap(
        self, entity: EntryT, from_root: PurePath | str, to_root: PurePath | str
    ) -> EntryT:
        """Return *entity* in the coordinate space of *to_root*.

        Entities carry root-independent relative keys, so this only
        validates the key and hands the same entity back.
        """
        self.validate_relative(entity.relative_path)
        return entity

    @staticmethod
    def remap_path(
        path: PurePath | str, from_root: PurePath | str, to_root: PurePath | str
    ) -> Path:
        """Replace the *from_root* prefix of an absolute *path* with *to_root*.

        Raises:
            ValueError: If *path* is not below *from_root*.
        """
        rel = PurePath(path).relative_to(PurePath(from_root))
        return Path(to_root) / rel

    def to_destination(self, source_path: PurePath | str) -> Path:
        """Map an absolute source path onto the destination tree."""
        return self.remap_path(
            source_path, self.source_root, self.destination_root
        )


def is_within(relative_path: str, prefix: str) -> bool:
    """Return True if *relative_path* equals or lies below *prefix*.

    An empty *prefix* stands for the tree root and contains everything.
    """
    if not prefix:
        return True
    return relative_path == prefix or relative_path.startswith(prefix + "/")


def path_depth(relative_path: str) -> int:
    """Number of segments in a relative key."""
    return relative_path.count("/") + 1
