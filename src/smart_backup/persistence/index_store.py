"""Durable version index.

Histories are kept as canonical JSON (sorted keys, compact separators) in a
single file, rewritten atomically after every mutation. Without an index the
version store keeps metadata in memory only.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Mapping

import structlog
from pydantic import ValidationError

from smart_backup.core.errors import StorageIOError
from smart_backup.models.version import VersionHistory

logger = structlog.get_logger(__name__)

INDEX_FORMAT_VERSION = 1


def canonical_json_bytes(obj: Any) -> bytes:
    """Canonical JSON bytes (sorted keys, no whitespace)."""

    return json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


class JsonIndexStore:
    """Loads and saves every file's history from one JSON document."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def load(self) -> dict[str, VersionHistory]:
        if not self.path.exists():
            return {}

        try:
            document = json.loads(self.path.read_bytes())
        except (OSError, ValueError) as e:
            logger.error("index.load_failed", path=str(self.path), error=str(e))
            raise StorageIOError(f"Cannot read version index {self.path}: {e}") from e

        if not isinstance(document, dict) or document.get("format") != INDEX_FORMAT_VERSION:
            raise StorageIOError(f"Unrecognized version index format in {self.path}")

        files = document.get("files", {})
        if not isinstance(files, dict):
            raise StorageIOError(f"Corrupt version index {self.path}: 'files' must be an object")

        histories: dict[str, VersionHistory] = {}
        try:
            for file_name, raw in files.items():
                history = VersionHistory.model_validate(raw)
                if history.file_name != file_name:
                    raise StorageIOError(
                        f"Corrupt version index {self.path}: entry {file_name!r} holds history of {history.file_name!r}"
                    )
                histories[file_name] = history
        except ValidationError as e:
            raise StorageIOError(f"Corrupt version index {self.path}: {e}") from e

        logger.debug("index.loaded", path=str(self.path), files=len(histories))
        return histories

    def save(self, histories: Mapping[str, VersionHistory]) -> None:
        document = {
            "format": INDEX_FORMAT_VERSION,
            "files": {name: history.model_dump(mode="json") for name, history in histories.items()},
        }
        payload = canonical_json_bytes(document)

        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=".tmp-index-", dir=self.path.parent)
            with os.fdopen(fd, "wb") as fh:
                fh.write(payload)
            os.replace(tmp_name, self.path)
        except OSError as e:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            logger.error("index.save_failed", path=str(self.path), error=str(e))
            raise StorageIOError(f"Cannot write version index {self.path}: {e}") from e

        logger.debug("index.saved", path=str(self.path), files=len(histories))
