"""
Snapshot storage backends.
"""

from .snapshot_storage import LocalSnapshotStorage, SnapshotStorage

__all__ = ["LocalSnapshotStorage", "SnapshotStorage"]
