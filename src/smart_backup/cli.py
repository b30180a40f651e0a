"""
Command line front end for the version store.

One-shot commands (backup, list, restore, delete) keep history in the index
file inside the backup root so it survives between invocations. `shell` runs
the interactive numbered menu.
"""

import argparse
import sys
from pathlib import Path
from typing import Callable, List, Optional

import structlog

from smart_backup.configuration.backup_config import BackupSettings, get_backup_settings
from smart_backup.configuration.logging_config import configure_logging
from smart_backup.core.errors import (
    BackupError,
    HistoryNotFoundError,
    OrphanedRecordError,
    SourceNotFoundError,
    VersionNotFoundError,
)
from smart_backup.services.version_store import VersionStore

logger = structlog.get_logger(__name__)

MENU = """
==== Smart File Backup & Version Control ====
1. Backup a File
2. View File Versions
3. Restore a Version
4. Delete a Version
5. Exit"""


def do_backup(store: VersionStore, path: str) -> bool:
    try:
        result = store.backup(path)
    except SourceNotFoundError:
        print("File does not exist.")
        return False
    except BackupError as e:
        print(f"Backup failed: {e}")
        return False

    if result.created:
        print(f"Backup successful. Version: {result.version_id}")
    else:
        print("No changes detected. Backup not needed.")
    return True


def do_list(store: VersionStore, file_name: str) -> bool:
    versions = store.list_versions(file_name)
    if not versions:
        print("No versions found for this file.")
        return True
    for version in versions:
        print(version.describe())
    return True


def do_restore(store: VersionStore, file_name: str, version_id: str, destination: Optional[str] = None) -> bool:
    try:
        result = store.restore_version(file_name, version_id, destination)
    except HistoryNotFoundError:
        print("No versions found for this file.")
        return False
    except VersionNotFoundError:
        print("Version not found.")
        return False
    except OrphanedRecordError as e:
        print(f"Backup data missing: {e}")
        return False
    except BackupError as e:
        print(f"Restore failed: {e}")
        return False

    print(f"Restored version {version_id} to {result.target_path}.")
    return True


def do_delete(store: VersionStore, file_name: str, version_id: str) -> bool:
    try:
        result = store.delete_version(file_name, version_id)
    except HistoryNotFoundError:
        print("No versions found for this file.")
        return False
    except VersionNotFoundError:
        print("Version not found.")
        return False
    except BackupError as e:
        print(f"Delete failed: {e}")
        return False

    print(f"Deleted version {version_id} of file {file_name}")
    if not result.storage_cleaned:
        print(f"Warning: stored data could not be removed: {result.storage_error}")
    return True


def run_shell(store: VersionStore, read: Callable[[str], str] = input) -> int:
    """Interactive menu loop. Returns 0 on exit or end of input."""
    try:
        while True:
            print(MENU)
            choice = read("Enter your choice: ").strip()
            if choice == "1":
                do_backup(store, read("Enter file path to backup: ").strip())
            elif choice == "2":
                do_list(store, read("Enter file name to view versions: ").strip())
            elif choice == "3":
                name = read("Enter file name: ").strip()
                do_restore(store, name, read("Enter version ID to restore: ").strip())
            elif choice == "4":
                name = read("Enter file name: ").strip()
                do_delete(store, name, read("Enter version ID to delete: ").strip())
            elif choice == "5":
                print("Exiting...")
                return 0
            else:
                print("Invalid choice.")
    except (EOFError, KeyboardInterrupt):
        print("\nExiting...")
        return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="smart-backup",
        description="Per-file version history with content-hash change detection.",
    )
    parser.add_argument("--backup-root", type=Path, default=None, help="Directory holding stored versions (overrides BACKUP_ROOT).")
    parser.add_argument("--log-level", default=None, help="Log level for diagnostics written to stderr (overrides LOG_LEVEL).")
    subparsers = parser.add_subparsers(dest="command", required=True)

    backup_parser = subparsers.add_parser("backup", help="Store a new version of a file if its content changed.")
    backup_parser.add_argument("path", help="Path of the file to back up.")

    list_parser = subparsers.add_parser("list", help="List stored versions of a file, oldest first.")
    list_parser.add_argument("file_name", help="File name (base name of the backed-up path).")

    restore_parser = subparsers.add_parser("restore", help="Overwrite a working file with a stored version.")
    restore_parser.add_argument("file_name", help="File name (base name of the backed-up path).")
    restore_parser.add_argument("version_id", help="Version to restore, e.g. v2.")
    restore_parser.add_argument("--to", dest="destination", default=None, help="Target file or directory (default: restore directory / file name).")

    delete_parser = subparsers.add_parser("delete", help="Delete a stored version.")
    delete_parser.add_argument("file_name", help="File name (base name of the backed-up path).")
    delete_parser.add_argument("version_id", help="Version to delete, e.g. v1.")

    shell_parser = subparsers.add_parser("shell", help="Interactive menu.")
    shell_parser.add_argument("--index", action="store_true", help="Load and save the version index instead of keeping history in memory.")

    return parser


def _settings_for(args: argparse.Namespace) -> BackupSettings:
    settings = get_backup_settings()
    overrides = {}
    if args.backup_root is not None:
        overrides["BACKUP_ROOT"] = args.backup_root
    if args.log_level is not None:
        overrides["LOG_LEVEL"] = args.log_level
    if not overrides:
        return settings
    return BackupSettings(**{**settings.model_dump(), **overrides})


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = _settings_for(args)
    except ValueError as e:
        parser.error(str(e))

    configure_logging(log_level=settings.log_level_value, stream=sys.stderr, force_reconfigure=True)

    if args.command == "shell":
        persist = args.index
    else:
        persist = settings.PERSIST_INDEX

    try:
        store = VersionStore.from_settings(settings, persist_index=persist)
    except BackupError as e:
        print(f"Cannot open backup store: {e}")
        return 1

    if args.command == "shell":
        return run_shell(store)
    if args.command == "backup":
        ok = do_backup(store, args.path)
    elif args.command == "list":
        ok = do_list(store, args.file_name)
    elif args.command == "restore":
        ok = do_restore(store, args.file_name, args.version_id, args.destination)
    else:
        ok = do_delete(store, args.file_name, args.version_id)

    logger.debug("cli.done", command=args.command, ok=ok)
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
