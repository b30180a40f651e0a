"""
Backup storage and fingerprinting configuration settings.
"""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator

from smart_backup.core.fingerprint import normalize_algorithm

from .base_config import BaseConfig


class BackupSettings(BaseConfig):
    """
    Defines where snapshots live and how file content is fingerprinted.
    """
    BACKUP_ROOT: Path = Field(
        default=Path("backup_storage"),
        description="Directory holding one file per stored version"
    )
    FINGERPRINT_ALGORITHM: str = Field(
        default="sha256",
        description="hashlib algorithm used for content fingerprints"
    )
    FINGERPRINT_CHUNK_SIZE: int = Field(
        default=64 * 1024,  # 64KB
        description="Read size in bytes when streaming a file into the digest"
    )
    RESTORE_DIR: Optional[Path] = Field(
        default=None,
        description="Directory restored files are written to; current working directory when unset"
    )
    INDEX_FILE_NAME: str = Field(
        default=".versions.json",
        description="Name of the version index file inside the backup root"
    )
    PERSIST_INDEX: bool = Field(
        default=True,
        description="Persist version metadata between CLI invocations"
    )
    LOG_LEVEL: str = Field(
        default="WARNING",
        description="Log level for the CLI"
    )

    @field_validator('FINGERPRINT_ALGORITHM')
    @classmethod
    def validate_fingerprint_algorithm(cls, v):
        """Only accept fixed-length cryptographic digests."""
        return normalize_algorithm(v)

    @field_validator('FINGERPRINT_CHUNK_SIZE')
    @classmethod
    def validate_chunk_size(cls, v):
        """Validate fingerprint chunk size."""
        if v <= 0:
            raise ValueError("Fingerprint chunk size must be positive")
        return v

    @field_validator('INDEX_FILE_NAME')
    @classmethod
    def validate_index_file_name(cls, v):
        """The index must live directly inside the backup root."""
        if not v or Path(v).name != v or v in ('.', '..'):
            raise ValueError("Index file name must be a plain file name")
        return v

    @field_validator('LOG_LEVEL')
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level is a standard logging level name."""
        level = v.upper()
        if level not in ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'):
            raise ValueError(f"Invalid log level '{v}'")
        return level

    @property
    def log_level_value(self) -> int:
        return getattr(logging, self.LOG_LEVEL)

    @property
    def index_path(self) -> Path:
        return self.BACKUP_ROOT / self.INDEX_FILE_NAME


@lru_cache()
def get_backup_settings() -> BackupSettings:
    """
    Creates a cached instance of BackupSettings.
    This ensures that the settings are loaded only once and reused.
    """
    return BackupSettings()
