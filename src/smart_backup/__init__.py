"""
Smart file backup: per-file version history with content-hash change detection.
"""

from .core.errors import (
    BackupError,
    HistoryNotFoundError,
    OrphanedRecordError,
    SnapshotNotFoundError,
    SourceNotFoundError,
    StorageIOError,
    UnsafeSnapshotKeyError,
    VersionNotFoundError,
)
from .core.fingerprint import ContentFingerprinter
from .models.version import BackupResult, BackupStatus, DeleteResult, RestoreResult, Version, VersionHistory
from .services.version_store import VersionStore
from .storage.snapshot_storage import LocalSnapshotStorage, SnapshotStorage

__version__ = "0.1.0"

__all__ = [
    "BackupError",
    "BackupResult",
    "BackupStatus",
    "ContentFingerprinter",
    "DeleteResult",
    "HistoryNotFoundError",
    "LocalSnapshotStorage",
    "OrphanedRecordError",
    "RestoreResult",
    "SnapshotNotFoundError",
    "SnapshotStorage",
    "SourceNotFoundError",
    "StorageIOError",
    "UnsafeSnapshotKeyError",
    "Version",
    "VersionHistory",
    "VersionNotFoundError",
    "VersionStore",
]
