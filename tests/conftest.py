from __future__ import annotations

from pathlib import Path
import sys


import pytest


# Ensure the repository root (parent of ./tests) is importable during pytest collection.
# This avoids ModuleNotFoundError for imports like `import persistence...` under pytest import modes
# that don't automatically prepend the cwd/rootdir to sys.path.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from doubles import CallRecorder  # noqa: E402
from persistence.documents import DocumentStore  # noqa: E402
from persistence.filesystem import MemoryFileSystem  # noqa: E402
from persistence.preferences import Preferences  # noqa: E402


@pytest.fixture
def sandbox_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    """
    Point every APP_* setting at a temp directory so tests never touch real ./data.
    """
    for name in ("APP_PREFERENCES_FILE", "APP_DOCUMENTS_FILE", "APP_LOG_LEVEL", "APP_PERSIST_TO_DISK"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("APP_DATA_DIR", str(tmp_path / "data"))
    return tmp_path


@pytest.fixture
def preferences() -> Preferences:
    return Preferences.in_memory()


@pytest.fixture
def document_store() -> DocumentStore:
    return DocumentStore.in_memory()


@pytest.fixture
def memory_fs() -> MemoryFileSystem:
    return MemoryFileSystem()


@pytest.fixture
def callback() -> CallRecorder:
    return CallRecorder()
