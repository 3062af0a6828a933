"""
Persistent Storage Module.

Provides SQLite-backed persistence for a consensus node:
- Key/value records written by the node runtime
- Consistent snapshots for offline checkpoints
"""

from privnet.core.storage.sqlite_adapter import SQLiteAdapter
from privnet.core.storage.storage_manager import (
    DB_NAME,
    NodeStore,
    SQLiteStorageBackend,
    StorageBackend,
)

__all__ = ["DB_NAME", "SQLiteAdapter", "NodeStore", "SQLiteStorageBackend", "StorageBackend"]
