"""Failure taxonomy for version store operations.

`NoChangeDetected` is deliberately absent: an unchanged backup is an outcome
(`BackupStatus.NO_CHANGE`), not an error.
"""

from __future__ import annotations


class BackupError(Exception):
    """Base class for every expected failure of the version store."""


class SourceNotFoundError(BackupError):
    """Raised when the file to back up does not exist or is not a regular file."""

    def __init__(self, source_path: str) -> None:
        super().__init__(f"File does not exist: {source_path}")
        self.source_path = source_path


class VersionNotFoundError(BackupError):
    """Raised when a version id is absent from a file's history."""

    def __init__(self, file_name: str, version_id: str, message: str | None = None) -> None:
        super().__init__(message or f"Version {version_id!r} not found for file {file_name!r}")
        self.file_name = file_name
        self.version_id = version_id


class HistoryNotFoundError(VersionNotFoundError):
    """Raised when a file name has never been backed up."""

    def __init__(self, file_name: str, version_id: str) -> None:
        super().__init__(file_name, version_id, f"No versions found for file {file_name!r}")


class StorageIOError(BackupError):
    """Raised when the snapshot backend fails to read, write or delete."""


class UnsafeSnapshotKeyError(StorageIOError, ValueError):
    """Raised when a key cannot be mapped to a location inside the backup root."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Unsafe snapshot key: {key!r}")
        self.key = key


class SnapshotNotFoundError(StorageIOError):
    """Raised by a backend when no bytes are stored under a key."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Snapshot not found: {key}")
        self.key = key


class OrphanedRecordError(BackupError):
    """Raised when a version record references snapshot bytes that are gone."""

    def __init__(self, file_name: str, version_id: str, storage_location: str) -> None:
        super().__init__(
            f"Snapshot for {file_name!r} {version_id} is missing from {storage_location}"
        )
        self.file_name = file_name
        self.version_id = version_id
        self.storage_location = storage_location
