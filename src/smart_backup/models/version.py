"""Pydantic models for snapshots and per-file version histories."""

import re
from datetime import datetime
from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_serializer, model_validator

DISPLAY_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"

_SEQUENCE_ID_RE = re.compile(r"^v([1-9][0-9]*)$")


def storage_key_for(file_name: str, version_id: str) -> str:
    """Deterministic storage key of a snapshot: `<file_name>_<version_id>`."""
    return f"{file_name}_{version_id}"


class Version(BaseModel):
    """One immutable snapshot of a file."""
    model_config = ConfigDict(frozen=True)

    file_name: str = Field(..., description="Logical file identity (base name of the source path)")
    version_id: str = Field(..., description="Sequence label unique within the file's history")
    timestamp: datetime = Field(..., description="Capture time (UTC)")
    content_fingerprint: str = Field(..., description="Hex digest of the captured bytes")
    storage_location: str = Field(..., description="Where the backend keeps the snapshot bytes")

    @field_serializer('timestamp', when_used='always')
    def _serialize_datetime(self, v: datetime) -> str:  # noqa: D401
        return v.isoformat()

    @property
    def storage_key(self) -> str:
        return storage_key_for(self.file_name, self.version_id)

    def describe(self) -> str:
        return (
            f"{self.version_id} | {self.timestamp.strftime(DISPLAY_TIME_FORMAT)}"
            f" | Hash: {self.content_fingerprint}"
        )

    def __str__(self) -> str:
        return self.describe()


class VersionHistory(BaseModel):
    """
    Ordered snapshots of one file, oldest first.

    `next_sequence` only grows, so a deleted version id is never handed out
    again and a new snapshot can never land on a live version's storage key.
    """
    file_name: str = Field(..., description="Logical file identity")
    versions: List[Version] = Field(default_factory=list, description="Snapshots, oldest first")
    next_sequence: int = Field(default=1, ge=1, description="Number used for the next version id")

    @model_validator(mode='after')
    def _check_consistency(self):
        """Reject histories that could hand out an id or storage key already in use."""
        if not self.file_name or self.file_name in ('.', '..') or '/' in self.file_name:
            raise ValueError(f"Invalid file name {self.file_name!r}")
        seen = set()
        for version in self.versions:
            if version.file_name != self.file_name:
                raise ValueError(f"Version {version.version_id!r} belongs to {version.file_name!r}, not {self.file_name!r}")
            if version.version_id in seen:
                raise ValueError(f"Duplicate version id {version.version_id!r} for {self.file_name!r}")
            seen.add(version.version_id)
            match = _SEQUENCE_ID_RE.match(version.version_id)
            if match and int(match.group(1)) >= self.next_sequence:
                raise ValueError(
                    f"next_sequence {self.next_sequence} would reissue {version.version_id!r} for {self.file_name!r}"
                )
        return self

    def __len__(self) -> int:
        return len(self.versions)

    def latest(self) -> Optional[Version]:
        return self.versions[-1] if self.versions else None

    def next_version_id(self) -> str:
        return f"v{self.next_sequence}"

    def find(self, version_id: str) -> Optional[Version]:
        # Linear scan: O(len(history)).
        for version in self.versions:
            if version.version_id == version_id:
                return version
        return None

    def append(self, version: Version) -> None:
        if version.file_name != self.file_name:
            raise ValueError(f"Version belongs to {version.file_name!r}, not {self.file_name!r}")
        if self.find(version.version_id) is not None:
            raise ValueError(f"Duplicate version id {version.version_id!r} for {self.file_name!r}")
        self.versions.append(version)
        self.next_sequence += 1

    def remove(self, version_id: str) -> Optional[Version]:
        for index, version in enumerate(self.versions):
            if version.version_id == version_id:
                return self.versions.pop(index)
        return None

    def snapshot(self) -> Tuple[Version, ...]:
        return tuple(self.versions)


class BackupStatus(str, Enum):
    """Outcome of a backup request."""
    CREATED = "created"
    NO_CHANGE = "no_change"


class BackupResult(BaseModel):
    """Result of a backup request."""
    model_config = ConfigDict(frozen=True)

    status: BackupStatus = Field(..., description="Whether a new snapshot was stored")
    file_name: str = Field(..., description="Logical file identity")
    version: Version = Field(..., description="New version, or the unchanged latest one")

    @property
    def created(self) -> bool:
        return self.status is BackupStatus.CREATED

    @property
    def version_id(self) -> str:
        return self.version.version_id


class RestoreResult(BaseModel):
    """Result of a restore request."""
    model_config = ConfigDict(frozen=True)

    version: Version = Field(..., description="Restored version")
    target_path: str = Field(..., description="File overwritten with the snapshot bytes")
    bytes_written: int = Field(..., ge=0, description="Size of the restored content")


class DeleteResult(BaseModel):
    """
    Result of a delete request.

    The record is always removed; `storage_error` carries a failure to remove
    the snapshot bytes, which are then left orphaned in the backup root.
    """
    model_config = ConfigDict(frozen=True)

    version: Version = Field(..., description="Removed version")
    remaining: int = Field(..., ge=0, description="Versions left in the file's history")
    storage_error: Optional[str] = Field(None, description="Error raised while deleting snapshot bytes")

    @property
    def storage_cleaned(self) -> bool:
        return self.storage_error is None
