"""Pytest configuration and shared fixtures."""

from pathlib import Path

import pytest

from gitplumb.config import Identity
from gitplumb.core.repository import ensure_store_exists
from gitplumb.storage.database import ObjectDatabase
from gitplumb.storage.object_store import ObjectStore


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Create a workspace root with an initialized .git directory."""
    root = tmp_path / "workspace"
    root.mkdir()
    ensure_store_exists(root)
    return root


@pytest.fixture
def git_dir(workspace: Path) -> Path:
    return workspace / ".git"


@pytest.fixture
def store(git_dir: Path) -> ObjectStore:
    """Create an ObjectStore instance."""
    return ObjectStore(git_dir)


@pytest.fixture
def database(store: ObjectStore) -> ObjectDatabase:
    """Create an ObjectDatabase over the temporary store."""
    return ObjectDatabase(store)


@pytest.fixture
def identity() -> Identity:
    return Identity("Test User", "test@example.com")


@pytest.fixture
def sample_tree_dir(tmp_path: Path) -> Path:
    """Create a small directory tree with files and a subdirectory."""
    root = tmp_path / "sample"
    root.mkdir()
    (root / "b.txt").write_bytes(b"bravo\n")
    (root / "a.txt").write_bytes(b"alpha\n")
    (root / "c.txt").write_bytes(b"charlie\n")
    sub = root / "sub"
    sub.mkdir()
    (sub / "nested.bin").write_bytes(b"\x00\x01\x02\xff")
    return root
