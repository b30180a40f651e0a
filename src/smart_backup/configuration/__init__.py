"""
Configuration settings for the backup store.
"""

from .backup_config import BackupSettings, get_backup_settings
from .logging_config import configure_logging

__all__ = [
    "BackupSettings",
    "get_backup_settings",
    "configure_logging",
]
