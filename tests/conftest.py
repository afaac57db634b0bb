"""Shared pytest fixtures for dirmirror tests."""

import logging
import os
from pathlib import Path

import pytest

# Default mtime for files written by ``write_file`` (2023-11-14)
BASE_MTIME_NS = 1_700_000_000_000_000_000


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Keep tests away from the user's config, .env and environment."""
    for key in list(os.environ):
        if key.startswith("DIRMIRROR_") or key == "LOG_LEVEL":
            monkeypatch.delenv(key, raising=False)
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def restore_root_logging():
    """Undo handler changes made by code that configures logging."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)


@pytest.fixture
def source_dir(tmp_path) -> Path:
    path = tmp_path / "source"
    path.mkdir()
    return path


@pytest.fixture
def destination_dir(tmp_path) -> Path:
    path = tmp_path / "destination"
    path.mkdir()
    return path


@pytest.fixture
def write_file():
    """Factory fixture: create a file with fixed content and mtime."""

    def _write(
        root: Path,
        relative_path: str,
        content: str = "",
        mtime_ns: int = BASE_MTIME_NS,
    ) -> Path:
        path = root / relative_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        os.utime(path, ns=(mtime_ns, mtime_ns))
        return path

    return _write
