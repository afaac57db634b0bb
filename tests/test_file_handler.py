"""Tests for filesystem primitives.

Covers:
- copy_file copies content and mtime, overwrites, returns the size
- copy_file refuses a directory target
- delete_file / create_directory / delete_tree basics and errors
- Nothing is ever written through a symlink: copy_file replaces a link,
  create_directory and reject_symlinked_parents refuse one
"""

import os

import pytest

from dirmirror.file_handler import (
    copy_file,
    create_directory,
    delete_file,
    delete_tree,
    reject_symlinked_parents,
)


class TestCopyFile:
    def test_copies_content_and_mtime(self, tmp_path):
        source = tmp_path / "in.bin"
        source.write_bytes(b"\x00\x01\x02")
        os.utime(source, ns=(1_600_000_000_000_000_000, 1_600_000_000_000_000_000))
        target = tmp_path / "out.bin"

        written = copy_file(source, target)

        assert written == 3
        assert target.read_bytes() == b"\x00\x01\x02"
        assert target.stat().st_mtime_ns == 1_600_000_000_000_000_000

    def test_overwrites_existing(self, tmp_path):
        source = tmp_path / "a.txt"
        source.write_text("fresh", encoding="utf-8")
        target = tmp_path / "b.txt"
        target.write_text("stale and longer", encoding="utf-8")

        assert copy_file(source, target) == 5
        assert target.read_text(encoding="utf-8") == "fresh"

    def test_directory_target_rejected(self, tmp_path):
        source = tmp_path / "a.txt"
        source.write_text("x", encoding="utf-8")
        target = tmp_path / "dir"
        target.mkdir()

        with pytest.raises(IsADirectoryError):
            copy_file(source, target)
        assert not (target / "a.txt").exists()

    def test_missing_parent_raises(self, tmp_path):
        source = tmp_path / "a.txt"
        source.write_text("x", encoding="utf-8")
        with pytest.raises(FileNotFoundError):
            copy_file(source, tmp_path / "no" / "such" / "a.txt")

    def test_symlink_target_replaced_not_followed(self, tmp_path):
        source = tmp_path / "a.txt"
        source.write_text("mirrored", encoding="utf-8")
        outside = tmp_path / "outside.txt"
        outside.write_text("untouched", encoding="utf-8")
        target = tmp_path / "link.txt"
        os.symlink(outside, target)

        assert copy_file(source, target) == 8

        assert not target.is_symlink()
        assert target.read_text(encoding="utf-8") == "mirrored"
        assert outside.read_text(encoding="utf-8") == "untouched"

    def test_dangling_symlink_target_replaced(self, tmp_path):
        source = tmp_path / "a.txt"
        source.write_text("x", encoding="utf-8")
        target = tmp_path / "link.txt"
        os.symlink(tmp_path / "nowhere", target)

        copy_file(source, target)

        assert target.is_file() and not target.is_symlink()
        assert not (tmp_path / "nowhere").exists()


class TestDeleteFile:
    def test_removes_file(self, tmp_path):
        target = tmp_path / "f"
        target.write_text("x", encoding="utf-8")
        delete_file(target)
        assert not target.exists()

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            delete_file(tmp_path / "ghost")

    def test_removes_symlink_only(self, tmp_path):
        real = tmp_path / "real"
        real.mkdir()
        link = tmp_path / "link"
        os.symlink(real, link, target_is_directory=True)

        delete_file(link)

        assert not link.is_symlink()
        assert real.is_dir()


class TestDirectories:
    def test_create_nested(self, tmp_path):
        create_directory(tmp_path / "a" / "b")
        assert (tmp_path / "a" / "b").is_dir()

    def test_create_existing_ok(self, tmp_path):
        create_directory(tmp_path)
        assert tmp_path.is_dir()

    def test_create_over_file_raises(self, tmp_path):
        (tmp_path / "f").write_text("x", encoding="utf-8")
        with pytest.raises(FileExistsError):
            create_directory(tmp_path / "f")

    def test_create_over_symlink_raises(self, tmp_path):
        outside = tmp_path / "outside"
        outside.mkdir()
        link = tmp_path / "a"
        os.symlink(outside, link, target_is_directory=True)

        with pytest.raises(FileExistsError):
            create_directory(link)
        assert link.is_symlink()

    def test_delete_tree_removes_contents(self, tmp_path):
        root = tmp_path / "gone"
        (root / "sub").mkdir(parents=True)
        (root / "sub" / "f.txt").write_text("x", encoding="utf-8")

        delete_tree(root)

        assert not root.exists()

    def test_delete_tree_refuses_symlink(self, tmp_path):
        real = tmp_path / "real"
        real.mkdir()
        link = tmp_path / "link"
        os.symlink(real, link, target_is_directory=True)

        with pytest.raises(NotADirectoryError):
            delete_tree(link)
        assert real.is_dir()

    def test_delete_missing_tree_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            delete_tree(tmp_path / "ghost")


class TestRejectSymlinkedParents:
    def test_real_parents_pass(self, tmp_path):
        (tmp_path / "a" / "b").mkdir(parents=True)
        reject_symlinked_parents(tmp_path / "a" / "b" / "f.txt", tmp_path)

    def test_missing_parents_pass(self, tmp_path):
        reject_symlinked_parents(tmp_path / "new" / "f.txt", tmp_path)

    def test_top_level_entry_passes(self, tmp_path):
        reject_symlinked_parents(tmp_path / "f.txt", tmp_path)

    def test_symlinked_parent_rejected(self, tmp_path):
        outside = tmp_path / "outside"
        outside.mkdir()
        root = tmp_path / "root"
        root.mkdir()
        os.symlink(outside, root / "a", target_is_directory=True)

        with pytest.raises(NotADirectoryError):
            reject_symlinked_parents(root / "a" / "sub" / "f.txt", root)

    def test_symlink_above_root_ignored(self, tmp_path):
        real = tmp_path / "real"
        (real / "a").mkdir(parents=True)
        linked_root = tmp_path / "linked"
        os.symlink(real, linked_root, target_is_directory=True)

        reject_symlinked_parents(linked_root / "a" / "f.txt", linked_root)
