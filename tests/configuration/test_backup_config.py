"""
Tests for backup storage and fingerprinting settings.
"""

import logging
from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from smart_backup.configuration.backup_config import BackupSettings, get_backup_settings


@pytest.fixture(autouse=True)
def no_dotenv(workdir):
    """Run from an empty directory so no stray .env file is read."""
    return workdir


class TestBackupSettings:
    """Test cases for BackupSettings configuration class."""

    def test_default_values(self):
        settings = BackupSettings()

        assert settings.BACKUP_ROOT == Path("backup_storage")
        assert settings.FINGERPRINT_ALGORITHM == "sha256"
        assert settings.FINGERPRINT_CHUNK_SIZE == 64 * 1024
        assert settings.RESTORE_DIR is None
        assert settings.INDEX_FILE_NAME == ".versions.json"
        assert settings.PERSIST_INDEX is True
        assert settings.LOG_LEVEL == "WARNING"

    @patch.dict('os.environ', {
        'BACKUP_ROOT': '/srv/backups',
        'FINGERPRINT_ALGORITHM': 'blake2b',
        'FINGERPRINT_CHUNK_SIZE': '4096',
        'RESTORE_DIR': '/srv/restore',
        'INDEX_FILE_NAME': 'index.json',
        'PERSIST_INDEX': 'false',
        'LOG_LEVEL': 'debug',
    })
    def test_environment_variable_override(self):
        settings = BackupSettings()

        assert settings.BACKUP_ROOT == Path("/srv/backups")
        assert settings.FINGERPRINT_ALGORITHM == "blake2b"
        assert settings.FINGERPRINT_CHUNK_SIZE == 4096
        assert settings.RESTORE_DIR == Path("/srv/restore")
        assert settings.INDEX_FILE_NAME == "index.json"
        assert settings.PERSIST_INDEX is False
        assert settings.LOG_LEVEL == "DEBUG"
        assert settings.log_level_value == logging.DEBUG

    def test_algorithm_name_is_normalized(self):
        settings = BackupSettings(FINGERPRINT_ALGORITHM="SHA-256")
        assert settings.FINGERPRINT_ALGORITHM == "sha256"

    @pytest.mark.parametrize("algorithm", ["md5", "sha1", "shake_128", "crc32", ""])
    def test_weak_or_unknown_algorithm_rejected(self, algorithm):
        with pytest.raises(ValidationError, match="Unsupported fingerprint algorithm"):
            BackupSettings(FINGERPRINT_ALGORITHM=algorithm)

    @pytest.mark.parametrize("chunk_size", [0, -1])
    def test_chunk_size_must_be_positive(self, chunk_size):
        with pytest.raises(ValidationError, match="must be positive"):
            BackupSettings(FINGERPRINT_CHUNK_SIZE=chunk_size)

    @pytest.mark.parametrize("name", ["", "nested/index.json", ".."])
    def test_index_file_name_must_be_plain(self, name):
        with pytest.raises(ValidationError, match="plain file name"):
            BackupSettings(INDEX_FILE_NAME=name)

    def test_invalid_log_level_rejected(self):
        with pytest.raises(ValidationError, match="Invalid log level"):
            BackupSettings(LOG_LEVEL="verbose")

    def test_index_path_is_inside_backup_root(self):
        settings = BackupSettings(BACKUP_ROOT=Path("/data/backups"))
        assert settings.index_path == Path("/data/backups/.versions.json")

    def test_values_read_from_dotenv_file(self, workdir):
        (workdir / ".env").write_text("BACKUP_ROOT=from_dotenv\nLOG_LEVEL=ERROR\n", encoding="utf-8")

        settings = BackupSettings()

        assert settings.BACKUP_ROOT == Path("from_dotenv")
        assert settings.LOG_LEVEL == "ERROR"


def test_get_backup_settings_is_cached():
    first = get_backup_settings()
    second = get_backup_settings()
    assert first is second
