"""
Per-file version history on top of a snapshot storage backend.

The store owns the mapping from logical file name (the base name of the
backed-up path) to its `VersionHistory`. Snapshot bytes are delegated to a
`SnapshotStorage` backend under the key `<file_name>_<version_id>`.

Ordering rules:
  - backup: fingerprint, write bytes, and only then append the record
  - delete: remove the record, then best-effort delete of the bytes
  - an index store, when configured, is saved after every mutation

Not thread-safe: one logical actor at a time.
"""

from __future__ import annotations

import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Optional

import structlog

from smart_backup.configuration.backup_config import BackupSettings, get_backup_settings
from smart_backup.core.errors import (
    HistoryNotFoundError,
    OrphanedRecordError,
    SnapshotNotFoundError,
    SourceNotFoundError,
    StorageIOError,
    VersionNotFoundError,
)
from smart_backup.core.fingerprint import ContentFingerprinter
from smart_backup.models.version import (
    BackupResult,
    BackupStatus,
    DeleteResult,
    RestoreResult,
    Version,
    VersionHistory,
    storage_key_for,
)
from smart_backup.persistence.index_store import JsonIndexStore
from smart_backup.storage.snapshot_storage import LocalSnapshotStorage, SnapshotStorage

logger = structlog.get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class VersionStore:
    """
    Tracks, stores, restores and deletes versions of individual files.
    """

    def __init__(
        self,
        storage: SnapshotStorage,
        fingerprinter: Optional[ContentFingerprinter] = None,
        *,
        index_store: Optional[JsonIndexStore] = None,
        restore_dir: Optional[Path] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        """
        Initialize the version store.

        Args:
            storage: Backend holding snapshot bytes; its root is created eagerly
            fingerprinter: Anything exposing `fingerprint_bytes(data) -> str`
            index_store: Optional durable index; histories are loaded from it now
                and saved to it after every mutation
            restore_dir: Default directory for restores; the current working
                directory at call time when None
            clock: Source of version timestamps
        """
        self.storage = storage
        self.fingerprinter = fingerprinter or ContentFingerprinter()
        self.index_store = index_store
        self.restore_dir = Path(restore_dir) if restore_dir is not None else None
        self._clock = clock

        self.storage.ensure_root()
        self._histories: dict[str, VersionHistory] = (
            index_store.load() if index_store is not None else {}
        )
        logger.info(
            "version_store.initialized",
            files=len(self._histories),
            persistent=index_store is not None,
        )

    @classmethod
    def from_settings(
        cls,
        settings: Optional[BackupSettings] = None,
        *,
        persist_index: Optional[bool] = None,
    ) -> "VersionStore":
        """Build a store backed by the local filesystem from configuration."""
        settings = settings or get_backup_settings()
        if persist_index is None:
            persist_index = settings.PERSIST_INDEX

        return cls(
            LocalSnapshotStorage(settings.BACKUP_ROOT),
            ContentFingerprinter.from_settings(settings),
            index_store=JsonIndexStore(settings.index_path) if persist_index else None,
            restore_dir=settings.RESTORE_DIR,
        )

    # ---------------- queries ---------------- #
    def file_names(self) -> list[str]:
        return sorted(self._histories)

    def has_history(self, file_name: str) -> bool:
        """True once `file_name` has been backed up, even if all its versions were deleted."""
        return file_name in self._histories

    def list_versions(self, file_name: str) -> tuple[Version, ...]:
        """
        Return the versions of `file_name`, oldest first.

        Unknown names and empty histories both yield an empty tuple.
        """
        history = self._histories.get(file_name)
        if history is None:
            return ()
        return history.snapshot()

    # ---------------- mutations ---------------- #
    def backup(self, source_path: str | os.PathLike) -> BackupResult:
        """
        Snapshot `source_path` if its content differs from the latest version.

        Returns:
            BackupResult: status CREATED with the new version, or NO_CHANGE with
                the unchanged latest version

        Raises:
            SourceNotFoundError: If the path is missing or not a regular file
            StorageIOError: If the source cannot be read or the snapshot written
        """
        source = Path(source_path)
        if not source.is_file():
            logger.warning("backup.source_not_found", source_path=str(source))
            raise SourceNotFoundError(str(source))

        file_name = source.name
        # Read once: the stored bytes are exactly the fingerprinted bytes.
        try:
            data = source.read_bytes()
        except OSError as e:
            logger.error("backup.read_failed", source_path=str(source), error=str(e))
            raise StorageIOError(f"Cannot read {source}: {e}") from e
        fingerprint = self.fingerprinter.fingerprint_bytes(data)

        history = self._histories.get(file_name)
        latest = history.latest() if history is not None else None
        if latest is not None and latest.content_fingerprint == fingerprint:
            logger.info("backup.no_change", file_name=file_name, version_id=latest.version_id)
            return BackupResult(status=BackupStatus.NO_CHANGE, file_name=file_name, version=latest)

        if history is None:
            history = VersionHistory(file_name=file_name)

        version_id = history.next_version_id()
        if history.find(version_id) is not None:
            logger.error("backup.id_conflict", file_name=file_name, version_id=version_id)
            raise StorageIOError(f"Version {version_id} of {file_name} already exists; refusing to overwrite it")
        key = storage_key_for(file_name, version_id)
        location = self.storage.write_snapshot(key, data)

        version = Version(
            file_name=file_name,
            version_id=version_id,
            timestamp=self._clock(),
            content_fingerprint=fingerprint,
            storage_location=location,
        )
        history.append(version)
        self._histories[file_name] = history
        self._persist()

        logger.info(
            "backup.created",
            file_name=file_name,
            version_id=version_id,
            fingerprint=fingerprint,
            storage_location=location,
        )
        return BackupResult(status=BackupStatus.CREATED, file_name=file_name, version=version)

    def restore_version(
        self,
        file_name: str,
        version_id: str,
        destination: Optional[str | os.PathLike] = None,
    ) -> RestoreResult:
        """
        Overwrite a working file with the bytes of a stored version.

        The target is `destination` when given, else `<restore_dir>/<file_name>`.

        Raises:
            HistoryNotFoundError: If `file_name` was never backed up
            VersionNotFoundError: If `version_id` is not in the history
            OrphanedRecordError: If the record's snapshot bytes are missing
            StorageIOError: If the snapshot cannot be read or the target written
        """
        version = self._find(file_name, version_id)

        try:
            data = self.storage.read_snapshot(version.storage_key)
        except SnapshotNotFoundError as e:
            logger.error(
                "restore.orphaned_record",
                file_name=file_name,
                version_id=version_id,
                storage_location=version.storage_location,
            )
            raise OrphanedRecordError(file_name, version_id, version.storage_location) from e

        target = self._restore_target(file_name, destination)
        try:
            target.write_bytes(data)
        except OSError as e:
            logger.error("restore.write_failed", target=str(target), error=str(e))
            raise StorageIOError(f"Cannot write {target}: {e}") from e

        logger.info("restore.done", file_name=file_name, version_id=version_id, target=str(target))
        return RestoreResult(version=version, target_path=str(target), bytes_written=len(data))

    def delete_version(self, file_name: str, version_id: str) -> DeleteResult:
        """
        Remove a version record and its snapshot bytes.

        The record is removed even when the bytes cannot be; the storage failure
        is reported in `DeleteResult.storage_error`.

        Raises:
            HistoryNotFoundError: If `file_name` was never backed up
            VersionNotFoundError: If `version_id` is not in the history
        """
        version = self._find(file_name, version_id)
        history = self._histories[file_name]
        history.remove(version_id)
        self._persist()

        storage_error = None
        try:
            self.storage.delete_snapshot(version.storage_key)
        except StorageIOError as e:
            storage_error = str(e)
            logger.warning(
                "delete.storage_error",
                file_name=file_name,
                version_id=version_id,
                storage_location=version.storage_location,
                error=storage_error,
            )

        logger.info("delete.done", file_name=file_name, version_id=version_id, remaining=len(history))
        return DeleteResult(version=version, remaining=len(history), storage_error=storage_error)

    # ---------------- helpers ---------------- #
    def _find(self, file_name: str, version_id: str) -> Version:
        history = self._histories.get(file_name)
        if history is None:
            raise HistoryNotFoundError(file_name, version_id)
        version = history.find(version_id)
        if version is None:
            raise VersionNotFoundError(file_name, version_id)
        return version

    def _restore_target(self, file_name: str, destination: Optional[str | os.PathLike]) -> Path:
        if destination is not None:
            target = Path(destination)
            return target / file_name if target.is_dir() else target
        base = self.restore_dir if self.restore_dir is not None else Path.cwd()
        return base / file_name

    def _persist(self) -> None:
        if self.index_store is not None:
            self.index_store.save(self._histories)
