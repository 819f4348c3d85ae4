"""Shared test fixtures and utilities."""

from pathlib import Path

import pytest

from codesync.store import FileSnapshotStore, MemorySnapshotStore


@pytest.fixture(autouse=True)
def cache_dir(tmp_path, monkeypatch):
    """Point the snapshot cache at tmp_path so tests never touch the real cache."""
    cache = tmp_path / "cache"
    monkeypatch.setenv("CODESYNC_CACHE_DIR", str(cache))
    monkeypatch.delenv("CODESYNC_MAX_WORKERS", raising=False)
    return cache


@pytest.fixture
def project(tmp_path):
    """Empty project root, kept apart from the cache directory."""
    root = tmp_path / "project"
    root.mkdir()
    return root


@pytest.fixture
def write_file(project):
    """Factory fixture to write files relative to the project root."""
    def _write(path: str, content: str = "test content"):
        file_path = project / path
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(content)
        return file_path
    return _write


@pytest.fixture
def file_store(cache_dir):
    """File-backed snapshot store in the isolated cache."""
    return FileSnapshotStore(cache_dir)


@pytest.fixture
def memory_store():
    """In-memory snapshot store."""
    return MemorySnapshotStore()
