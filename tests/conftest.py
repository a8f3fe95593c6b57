"""Pytest configuration and fixtures."""

import json
import tempfile
from pathlib import Path

import pytest

from pr_tracker.config import get_settings
from pr_tracker.services import SyncEngine
from pr_tracker.storage import LocalFileSystem, MemoryKeyValueStore


class FailingFileSystem(LocalFileSystem):
    """Local filesystem whose writes can be switched to fail."""

    def __init__(self):
        self.fail_writes = False
        self.writes: list[str] = []

    async def write_text(self, path: str, text: str) -> None:
        if self.fail_writes:
            raise PermissionError(f"Permission denied: {path}")
        self.writes.append(path)
        await super().write_text(path, text)


@pytest.fixture
def temp_dir():
    """Create a temporary directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_db_path(temp_dir):
    """Create a temporary database path."""
    return temp_dir / "test.db"


@pytest.fixture
def document_dir(temp_dir):
    """App-private document directory."""
    path = temp_dir / "documents"
    path.mkdir()
    return path


@pytest.fixture
def outside_dir(temp_dir):
    """A directory outside the app's documents, like a cloud drive folder."""
    path = temp_dir / "cloud"
    path.mkdir()
    return path


@pytest.fixture
def store():
    """In-memory key-value store."""
    return MemoryKeyValueStore()


@pytest.fixture
def files():
    """Filesystem with switchable write failures."""
    return FailingFileSystem()


@pytest.fixture
async def engine(store, files, document_dir):
    """A loaded engine on empty storage."""
    engine = SyncEngine(store, files, document_dir)
    await engine.load()
    yield engine
    await engine.close()


@pytest.fixture
def sample_snapshot():
    """A valid snapshot document as a dictionary."""
    return {
        "version": "1.0.0",
        "lastSync": "2024-03-01T10:00:00.000Z",
        "exercises": [
            {
                "id": "ex-bench",
                "name": "Bench Press",
                "category": "barbell",
                "barType": "standard",
                "currentPR": 225,
                "currentPRPlates": 180,
                "unit": "lbs",
            },
            {
                "id": "ex-pullup",
                "name": "Pull Up",
                "category": "bodyweight",
                "unit": "reps",
            },
        ],
        "prRecords": [
            {
                "id": "pr-1",
                "exerciseId": "ex-bench",
                "value": 205,
                "platesWeight": 160,
                "barType": "standard",
                "date": "2024-01-15T09:00:00.000Z",
            },
            {
                "id": "pr-2",
                "exerciseId": "ex-bench",
                "value": 225,
                "platesWeight": 180,
                "barType": "standard",
                "date": "2024-02-20T09:00:00.000Z",
            },
        ],
        "preferences": {
            "defaultUnit": "kg",
            "defaultBarType": "women",
            "themeColor": "blue",
            "themeMode": "light",
            "syncFilePath": "/someone/else/sync.json",
            "lastSyncDate": "2024-03-01T10:00:00.000Z",
        },
        "stats": {"totalPRs": 2, "lastPRDate": "2024-02-20T09:00:00.000Z"},
    }


@pytest.fixture
def sample_snapshot_json(sample_snapshot):
    return json.dumps(sample_snapshot)


@pytest.fixture
def cli_env(temp_dir, monkeypatch):
    """Point the CLI settings at a temporary data directory."""
    monkeypatch.setenv("PR_TRACKER_DATA_DIR", str(temp_dir / "data"))
    monkeypatch.delenv("PR_TRACKER_DOCUMENT_DIR", raising=False)
    get_settings.cache_clear()
    yield temp_dir / "data"
    get_settings.cache_clear()
