import sqlite3
import threading
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

from privnet.utils.logger import get_logger

logger = get_logger("storage.sqlite")


class SQLiteAdapter:
    """
    SQLite backend for a node's durable state.

    Provides:
    1. Key-Value store for arbitrary binary data, partitioned by bucket.
    2. Consistent file-level snapshots through the SQLite online backup API.
    """

    def __init__(self, db_path: Path):
        self.db_path = db_path
        self._conn_local = threading.local()
        self._connections: List[sqlite3.Connection] = []
        self._lock = threading.Lock()
        self._closed = False

        # Ensure directory exists
        if not db_path.parent.exists():
            db_path.parent.mkdir(parents=True, exist_ok=True)

        self._init_schema()

    def _get_conn(self) -> sqlite3.Connection:
        """Get or create connection for current thread."""
        if self._closed:
            raise sqlite3.ProgrammingError(f"Store {self.db_path} is closed")

        if not hasattr(self._conn_local, "conn"):
            conn = sqlite3.connect(
                self.db_path,
                timeout=30.0,
                check_same_thread=False
            )
            conn.row_factory = sqlite3.Row
            # Enable WAL mode for better concurrency
            conn.execute("PRAGMA journal_mode=WAL;")
            conn.execute("PRAGMA synchronous=NORMAL;")
            self._conn_local.conn = conn
            with self._lock:
                self._connections.append(conn)
        return self._conn_local.conn

    def _init_schema(self):
        """Initialize database schema."""
        conn = self._get_conn()
        with conn:
            # Records, partitioned by bucket
            conn.execute("""
                CREATE TABLE IF NOT EXISTS kv_store (
                    key BLOB NOT NULL,
                    value BLOB NOT NULL,
                    bucket TEXT NOT NULL DEFAULT 'default',
                    PRIMARY KEY (bucket, key)
                )
            """)

    # =========================================================================
    # Key-Value Operations
    # =========================================================================

    def put(self, key: bytes, value: bytes, bucket: str = "default"):
        """Save a key-value pair."""
        conn = self._get_conn()
        with conn:
            conn.execute(
                "INSERT OR REPLACE INTO kv_store (key, value, bucket) VALUES (?, ?, ?)",
                (key, value, bucket)
            )

    def get(self, key: bytes, bucket: str = "default") -> Optional[bytes]:
        """Get value by key."""
        conn = self._get_conn()
        cursor = conn.execute(
            "SELECT value FROM kv_store WHERE bucket = ? AND key = ?", (bucket, key)
        )
        row = cursor.fetchone()
        return row['value'] if row else None

    def delete(self, key: bytes, bucket: str = "default"):
        conn = self._get_conn()
        with conn:
            conn.execute("DELETE FROM kv_store WHERE bucket = ? AND key = ?", (bucket, key))

    def items(self, bucket: Optional[str] = None) -> Iterator[Tuple[str, bytes, bytes]]:
        """Iterate (bucket, key, value) in key order."""
        conn = self._get_conn()
        if bucket is None:
            cursor = conn.execute("SELECT bucket, key, value FROM kv_store ORDER BY bucket, key")
        else:
            cursor = conn.execute(
                "SELECT bucket, key, value FROM kv_store WHERE bucket = ? ORDER BY key", (bucket,)
            )
        for row in cursor:
            yield row['bucket'], row['key'], row['value']

    # =========================================================================
    # Snapshot / Lifecycle
    # =========================================================================

    def backup_to(self, dest_path: Path):
        """
        Copy the database into `dest_path` as one self-contained file.

        Runs the SQLite online backup, which yields a consistent image even
        while other connections keep writing.
        """
        conn = self._get_conn()
        dest = sqlite3.connect(dest_path)
        try:
            conn.backup(dest)
        finally:
            dest.close()
        logger.debug(f"Backed up {self.db_path} to {dest_path}")

    def close(self):
        """Close every connection opened by this adapter."""
        with self._lock:
            for conn in self._connections:
                conn.close()
            self._connections.clear()
            self._closed = True
