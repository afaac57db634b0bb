"""Tests for the tree scanner.

Covers:
- Root validation (missing, not a directory, unlistable)
- Relative POSIX keys, sizes and nanosecond mtimes
- Exclude patterns by name and by relative path
- Symlinks and special files are listed separately, never followed
- Unreadable subdirectories become scan issues, not silent gaps
"""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from dirmirror.sync.errors import ScanError
from dirmirror.sync.models import DirectoryEntry, FileEntry
from dirmirror.sync.scanner import TreeScanner

BASE_MTIME_NS = 1_700_000_000_000_000_000


def _fail_listing(monkeypatch, name: str) -> None:
    """Make ``os.scandir`` raise PermissionError for directories named *name*."""
    real_scandir = os.scandir

    def fake_scandir(path):
        if Path(path).name == name:
            raise PermissionError(13, "Permission denied", str(path))
        return real_scandir(path)

    monkeypatch.setattr(os, "scandir", fake_scandir)


class TestRootValidation:
    def test_missing_root_raises(self, tmp_path):
        with pytest.raises(ScanError, match="does not exist"):
            TreeScanner().scan(tmp_path / "nope")

    def test_file_root_raises(self, tmp_path):
        target = tmp_path / "file.txt"
        target.write_text("x", encoding="utf-8")
        with pytest.raises(ScanError, match="not a directory"):
            TreeScanner().scan(target)

    def test_unlistable_root_raises(self, tmp_path, monkeypatch):
        root = tmp_path / "locked"
        root.mkdir()
        _fail_listing(monkeypatch, "locked")
        with pytest.raises(ScanError, match="Permission denied") as excinfo:
            TreeScanner().scan(root)
        assert excinfo.value.root == str(root)


class TestSnapshotContents:
    def test_empty_root(self, source_dir):
        snapshot = TreeScanner().scan(source_dir)
        assert snapshot.root == str(source_dir)
        assert snapshot.directories == ()
        assert snapshot.files == ()
        assert snapshot.issues == ()

    def test_nested_tree(self, source_dir, write_file):
        write_file(source_dir, "a/x.txt", "0123456789")
        write_file(source_dir, "a/b/y.txt", "yy", mtime_ns=BASE_MTIME_NS + 5)
        write_file(source_dir, "top.txt", "")
        (source_dir / "empty").mkdir()

        snapshot = TreeScanner().scan(source_dir)

        assert snapshot.directories == (
            DirectoryEntry(relative_path="a"),
            DirectoryEntry(relative_path="a/b"),
            DirectoryEntry(relative_path="empty"),
        )
        assert snapshot.files == (
            FileEntry(relative_path="a/b/y.txt", size=2, modified_time=BASE_MTIME_NS + 5),
            FileEntry(relative_path="a/x.txt", size=10, modified_time=BASE_MTIME_NS),
            FileEntry(relative_path="top.txt", size=0, modified_time=BASE_MTIME_NS),
        )

    def test_root_itself_not_listed(self, source_dir, write_file):
        write_file(source_dir, "f.txt", "x")
        snapshot = TreeScanner().scan(source_dir)
        assert "" not in snapshot.directory_paths
        assert snapshot.file_paths == {"f.txt"}

    def test_paths_use_forward_slashes(self, source_dir, write_file):
        write_file(source_dir, "one/two/three/deep.txt")
        snapshot = TreeScanner().scan(source_dir)
        assert snapshot.file_paths == {"one/two/three/deep.txt"}
        assert all("\\" not in p for p in snapshot.directory_paths)

    def test_symlinks_listed_as_special_entries(self, source_dir, write_file):
        target = write_file(source_dir, "real.txt", "data")
        os.symlink(target, source_dir / "link.txt")
        os.symlink(source_dir, source_dir / "loop", target_is_directory=True)

        snapshot = TreeScanner().scan(source_dir)

        assert snapshot.file_paths == {"real.txt"}
        assert snapshot.directory_paths == set()
        assert [e.relative_path for e in snapshot.special_entries] == [
            "link.txt",
            "loop",
        ]

    def test_symlinked_directory_not_descended(self, tmp_path, source_dir, write_file):
        outside = tmp_path / "outside"
        write_file(outside, "hidden.txt", "x")
        os.symlink(outside, source_dir / "elsewhere", target_is_directory=True)

        snapshot = TreeScanner().scan(source_dir)

        assert snapshot.file_paths == set()
        assert [e.relative_path for e in snapshot.special_entries] == ["elsewhere"]

    @pytest.mark.skipif(not hasattr(os, "mkfifo"), reason="needs FIFOs")
    def test_fifo_listed_as_special_entry(self, source_dir):
        os.mkfifo(source_dir / "pipe")

        snapshot = TreeScanner().scan(source_dir)

        assert snapshot.files == ()
        assert [e.relative_path for e in snapshot.special_entries] == ["pipe"]


class TestExclude:
    def test_exclude_by_name(self, source_dir, write_file):
        write_file(source_dir, "keep.txt")
        write_file(source_dir, "skip.tmp")
        write_file(source_dir, "sub/also.tmp")

        snapshot = TreeScanner(exclude=["*.tmp"]).scan(source_dir)

        assert snapshot.file_paths == {"keep.txt"}
        assert snapshot.directory_paths == {"sub"}

    def test_excluded_directory_not_descended(self, source_dir, write_file):
        write_file(source_dir, ".cache/blob.bin", "x")
        write_file(source_dir, "src/main.py", "x")

        snapshot = TreeScanner(exclude=[".cache"]).scan(source_dir)

        assert snapshot.directory_paths == {"src"}
        assert snapshot.file_paths == {"src/main.py"}

    def test_exclude_by_relative_path(self, source_dir, write_file):
        write_file(source_dir, "build/out.txt")
        write_file(source_dir, "docs/build/page.txt")

        snapshot = TreeScanner(exclude=["docs/build"]).scan(source_dir)

        assert "docs/build/page.txt" not in snapshot.file_paths
        assert "build/out.txt" in snapshot.file_paths


class TestScanIssues:
    def test_unreadable_subdirectory_recorded(
        self, source_dir, write_file, monkeypatch
    ):
        write_file(source_dir, "locked/secret.txt", "s")
        write_file(source_dir, "open/visible.txt", "v")
        _fail_listing(monkeypatch, "locked")

        snapshot = TreeScanner().scan(source_dir)

        assert len(snapshot.issues) == 1
        issue = snapshot.issues[0]
        assert issue.relative_path == "locked"
        assert "Permission denied" in issue.error
        # The directory itself exists; only its contents are unknown
        assert "locked" in snapshot.directory_paths
        assert snapshot.file_paths == {"open/visible.txt"}

    def test_issue_is_logged(self, source_dir, write_file, monkeypatch, caplog):
        write_file(source_dir, "locked/secret.txt")
        _fail_listing(monkeypatch, "locked")

        TreeScanner().scan(source_dir)

        assert any(
            "locked" in r.getMessage() and r.levelname == "WARNING"
            for r in caplog.records
        )
