"""Snapshot storage backends.

Keys are opaque strings chosen by the version store. The local backend maps
each key to exactly one file directly inside the backup root; `%` and `\\` are
percent-encoded in the file name so any POSIX base name is a usable key.
"""

from __future__ import annotations

import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path

import structlog

from smart_backup.core.errors import SnapshotNotFoundError, StorageIOError, UnsafeSnapshotKeyError

logger = structlog.get_logger(__name__)


class SnapshotStorage(ABC):
    """Interface for raw snapshot byte storage."""

    @abstractmethod
    def ensure_root(self) -> None:
        """Create the storage namespace if it does not exist.

        Raises:
            StorageIOError: If the namespace cannot be created
        """

    @abstractmethod
    def location_for(self, key: str) -> str:
        """Return where the bytes for `key` live (or would live)."""

    @abstractmethod
    def write_snapshot(self, key: str, data: bytes) -> str:
        """Store `data` under `key`, replacing any previous bytes.

        Returns:
            str: Storage location of the written snapshot

        Raises:
            StorageIOError: If the bytes could not be stored
        """

    @abstractmethod
    def read_snapshot(self, key: str) -> bytes:
        """Return the bytes stored under `key`.

        Raises:
            SnapshotNotFoundError: If nothing is stored under `key`
            StorageIOError: On any other read failure
        """

    @abstractmethod
    def delete_snapshot(self, key: str) -> None:
        """Remove the bytes stored under `key`.

        Raises:
            SnapshotNotFoundError: If nothing is stored under `key`
            StorageIOError: On any other delete failure
        """


def _encode_key(key: str) -> str:
    """Map `key` to a file name inside the root.

    Raises:
        UnsafeSnapshotKeyError: If the key would leave the root or is not a file name
    """
    if not key or key in (".", "..") or "/" in key or "\x00" in key:
        raise UnsafeSnapshotKeyError(key)
    return key.replace("%", "%25").replace("\\", "%5C")


class LocalSnapshotStorage(SnapshotStorage):
    """
    Filesystem backend: one file per snapshot, named by its key, under `root`.
    """

    def __init__(self, root: str | Path, *, create: bool = True) -> None:
        self.root = Path(root)
        if create:
            self.ensure_root()

    def ensure_root(self) -> None:
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error("storage.ensure_root_failed", root=str(self.root), error=str(e))
            raise StorageIOError(f"Cannot create backup root {self.root}: {e}") from e

    def path_for(self, key: str) -> Path:
        return self.root / _encode_key(key)

    def location_for(self, key: str) -> str:
        return str(self.path_for(key))

    def write_snapshot(self, key: str, data: bytes) -> str:
        target = self.path_for(key)
        tmp_name = None
        try:
            fd, tmp_name = tempfile.mkstemp(prefix=".tmp-", dir=self.root)
            with os.fdopen(fd, "wb") as fh:
                fh.write(data)
            os.replace(tmp_name, target)
        except OSError as e:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            logger.error("storage.write_failed", key=key, location=str(target), error=str(e))
            raise StorageIOError(f"Cannot write snapshot {key}: {e}") from e

        logger.debug("storage.write", key=key, location=str(target), size=len(data))
        return str(target)

    def read_snapshot(self, key: str) -> bytes:
        path = self.path_for(key)
        try:
            return path.read_bytes()
        except FileNotFoundError as e:
            raise SnapshotNotFoundError(key) from e
        except OSError as e:
            logger.error("storage.read_failed", key=key, location=str(path), error=str(e))
            raise StorageIOError(f"Cannot read snapshot {key}: {e}") from e

    def delete_snapshot(self, key: str) -> None:
        path = self.path_for(key)
        try:
            path.unlink()
        except FileNotFoundError as e:
            raise SnapshotNotFoundError(key) from e
        except OSError as e:
            logger.error("storage.delete_failed", key=key, location=str(path), error=str(e))
            raise StorageIOError(f"Cannot delete snapshot {key}: {e}") from e

        logger.debug("storage.delete", key=key, location=str(path))
