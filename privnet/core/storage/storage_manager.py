from pathlib import Path
from typing import Dict, Iterator, Optional, Protocol, Tuple, Union

from privnet.core.storage.sqlite_adapter import SQLiteAdapter
from privnet.utils.logger import get_logger

logger = get_logger("storage.manager")

DB_NAME = "node.db"


class NodeStore:
    """
    Durable state of one consensus node.

    Coordinates data persistence using the SQLite adapter. Holds the raw
    key/value records written by the node runtime.
    """

    def __init__(self, data_dir: Path, db_name: str = DB_NAME):
        self.data_dir = data_dir
        self.db_path = data_dir / db_name
        self.adapter = SQLiteAdapter(self.db_path)

        logger.debug(f"NodeStore opened at {self.db_path}")

    # =========================================================================
    # Records
    # =========================================================================

    def put(self, key: bytes, value: bytes, bucket: str = "default"):
        self.adapter.put(key, value, bucket=bucket)

    def get(self, key: bytes, bucket: str = "default") -> Optional[bytes]:
        return self.adapter.get(key, bucket=bucket)

    def delete(self, key: bytes, bucket: str = "default"):
        self.adapter.delete(key, bucket=bucket)

    def items(self, bucket: Optional[str] = None) -> Iterator[Tuple[str, bytes, bytes]]:
        return self.adapter.items(bucket)

    def dump(self) -> Dict[Tuple[str, bytes], bytes]:
        """All records keyed by (bucket, key)."""
        return {(b, k): v for b, k, v in self.items()}

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def save_checkpoint(self, dest_dir: Path):
        """
        Write a consistent copy of the store into `dest_dir`.

        `dest_dir` may exist but must not already hold a database.
        """
        dest_dir.mkdir(parents=True, exist_ok=True)
        dest = dest_dir / self.db_path.name
        if dest.exists():
            raise FileExistsError(f"{dest} already exists")
        self.adapter.backup_to(dest)

    def close(self):
        self.adapter.close()
        logger.debug(f"NodeStore closed at {self.db_path}")

    def __enter__(self) -> "NodeStore":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


class StorageBackend(Protocol):
    """Storage engine contract consumed by checkpoint and run operations."""

    def open(self, path: Union[str, Path]) -> NodeStore:
        ...

    def export_snapshot(self, handle: NodeStore, dest_dir: Union[str, Path]) -> None:
        ...

    def close(self, handle: NodeStore) -> None:
        ...


class SQLiteStorageBackend:
    """StorageBackend over NodeStore / SQLite."""

    def __init__(self, db_name: str = DB_NAME):
        self.db_name = db_name

    def open(self, path: Union[str, Path]) -> NodeStore:
        return NodeStore(Path(path), db_name=self.db_name)

    def export_snapshot(self, handle: NodeStore, dest_dir: Union[str, Path]) -> None:
        handle.save_checkpoint(Path(dest_dir))

    def close(self, handle: NodeStore) -> None:
        handle.close()
