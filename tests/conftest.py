from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from smart_backup.configuration.backup_config import get_backup_settings
from smart_backup.services.version_store import VersionStore
from smart_backup.storage.snapshot_storage import LocalSnapshotStorage

SETTINGS_ENV_VARS = (
    "BACKUP_ROOT",
    "FINGERPRINT_ALGORITHM",
    "FINGERPRINT_CHUNK_SIZE",
    "RESTORE_DIR",
    "INDEX_FILE_NAME",
    "PERSIST_INDEX",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_settings_env(monkeypatch):
    """Isolate every test from ambient backup settings."""
    for name in SETTINGS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    get_backup_settings.cache_clear()
    yield
    get_backup_settings.cache_clear()


@pytest.fixture
def workdir(tmp_path: Path, monkeypatch) -> Path:
    """Empty current working directory for the test."""
    wd = tmp_path / "work"
    wd.mkdir()
    monkeypatch.chdir(wd)
    return wd


@pytest.fixture
def backup_root(tmp_path: Path) -> Path:
    return tmp_path / "backup_storage"


@pytest.fixture
def storage(backup_root: Path) -> LocalSnapshotStorage:
    return LocalSnapshotStorage(backup_root)


@pytest.fixture
def clock():
    """Deterministic clock advancing one minute per call."""
    state = {"now": datetime(2024, 3, 1, 9, 30, tzinfo=timezone.utc)}

    def tick() -> datetime:
        current = state["now"]
        state["now"] = current + timedelta(minutes=1)
        return current

    return tick


@pytest.fixture
def store(storage: LocalSnapshotStorage, workdir: Path, clock) -> VersionStore:
    return VersionStore(storage, clock=clock)
