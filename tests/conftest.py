"""
Pytest configuration and fixtures
"""
from pathlib import Path
import sys

import pytest


# Define paths
PROJECT_ROOT = Path(__file__).resolve().parent.parent
BACKEND_ROOT = PROJECT_ROOT / "backend"

# Make the dupscan package importable without an install.
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Fixture providing path to project root"""
    return PROJECT_ROOT


@pytest.fixture
def sample_tree(tmp_path: Path) -> Path:
    """a.txt and b.txt share content, c.txt is unique."""
    root = tmp_path / "tree"
    root.mkdir()
    (root / "a.txt").write_bytes(b"hello")
    (root / "b.txt").write_bytes(b"hello")
    (root / "c.txt").write_bytes(b"world")
    return root


@pytest.fixture
def nested_tree(tmp_path: Path) -> Path:
    """Three copies of one payload spread over subdirectories plus singletons."""
    root = tmp_path / "nested"
    (root / "src").mkdir(parents=True)
    (root / "backup" / "old").mkdir(parents=True)
    (root / "docs").mkdir()

    shared = b"def main():\n    return 42\n"
    (root / "src" / "main.py").write_bytes(shared)
    (root / "backup" / "main.py").write_bytes(shared)
    (root / "backup" / "old" / "main_copy.py").write_bytes(shared)
    (root / "docs" / "README.md").write_bytes(b"# Docs\n")
    (root / "docs" / "notes.md").write_bytes(b"# Notes\n")
    (root / "empty1.txt").write_bytes(b"")
    (root / "empty2.txt").write_bytes(b"")
    return root


@pytest.fixture
def env_clean(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Drop any DUPSCAN_* variables inherited from the developer shell."""
    for name in ("DUPSCAN_WORKERS", "DUPSCAN_CHUNK_SIZE", "DUPSCAN_LOG_LEVEL", "DUPSCAN_ORDER"):
        # setenv first so teardown also removes values a .env file adds later.
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    return monkeypatch
