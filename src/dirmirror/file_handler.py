"""Filesystem primitives used by the reconciler.

Each function performs one operation and lets ``OSError`` propagate;
the caller decides how failures are recorded.

None of them writes through a symbolic link inside the destination tree.
"""

import errno
import shutil
from pathlib import Path

# =============================================================================
# Guards
# =============================================================================


def reject_symlinked_parents(path: Path, root: Path) -> None:
    """Refuse a *path* whose parents below *root* include a symlink.

    Writing below such a parent would land outside the tree.  *root*
    itself is trusted.

    Raises:
        NotADirectoryError: If a parent between *root* and *path* is a
            symbolic link.
    """
    for relative_parent in path.relative_to(root).parents:
        if relative_parent == Path("."):
            continue
        parent = root / relative_parent
        if parent.is_symlink():
            raise NotADirectoryError(
                errno.ENOTDIR, "Parent directory is a symlink", str(parent)
            )


# =============================================================================
# Files
# =============================================================================


def copy_file(source: Path, destination: Path) -> int:
    """Copy a file with its metadata, overwriting *destination*.

    Content, permission bits and timestamps are copied, so a later scan
    of the destination sees the source's modification time.  A symlink
    at *destination* is removed first rather than followed.

    Args:
        source: File to copy.
        destination: Target path; its parent directory must exist.

    Returns:
        Size in bytes of the written file.
    """
    if destination.is_symlink():
        destination.unlink()
    elif destination.is_dir():
        raise IsADirectoryError(
            f"Destination is a directory: {destination}"
        )
    shutil.copy2(source, destination)
    return destination.stat().st_size


def delete_file(path: Path) -> None:
    """Remove a single file, symlink or special file."""
    path.unlink()


# =============================================================================
# Directories
# =============================================================================


def create_directory(path: Path) -> None:
    """Create *path* and any missing parents.  Existing directories are fine.

    Raises:
        FileExistsError: If *path* is a symlink, even one pointing at a
            directory.
    """
    if path.is_symlink():
        raise FileExistsError(
            errno.EEXIST, "Path is a symlink, not a directory", str(path)
        )
    path.mkdir(parents=True, exist_ok=True)


def delete_tree(path: Path) -> None:
    """Remove a directory together with everything below it."""
    if path.is_symlink():
        raise NotADirectoryError(f"Refusing to remove symlink as tree: {path}")
    shutil.rmtree(path)
