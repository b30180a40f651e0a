"""
Version history models.
"""

from .version import (
    BackupResult,
    BackupStatus,
    DeleteResult,
    RestoreResult,
    Version,
    VersionHistory,
    storage_key_for,
)

__all__ = [
    "BackupResult",
    "BackupStatus",
    "DeleteResult",
    "RestoreResult",
    "Version",
    "VersionHistory",
    "storage_key_for",
]
