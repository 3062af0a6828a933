"""
Unit tests for node storage.
"""

import sqlite3

import pytest

from privnet.core.storage import DB_NAME, NodeStore, SQLiteStorageBackend


@pytest.fixture
def store(tmp_path):
    s = NodeStore(tmp_path / "node0")
    yield s
    s.close()


class TestNodeStore:
    """Tests for NodeStore records and metadata."""

    def test_put_get(self, store):
        store.put(b"k", b"v")
        assert store.get(b"k") == b"v"
        assert store.get(b"missing") is None

    def test_buckets_are_separate(self, store):
        store.put(b"k", b"a", bucket="blocks")
        store.put(b"k", b"b", bucket="state")
        assert store.get(b"k", bucket="blocks") == b"a"
        assert store.get(b"k", bucket="state") == b"b"
        assert store.get(b"k") is None

    def test_delete(self, store):
        store.put(b"k", b"v")
        store.delete(b"k")
        assert store.get(b"k") is None

    def test_dump(self, store):
        store.put(b"b", b"2")
        store.put(b"a", b"1", bucket="x")
        assert store.dump() == {("default", b"b"): b"2", ("x", b"a"): b"1"}

    def test_closed_store_unusable(self, tmp_path):
        s = NodeStore(tmp_path / "n")
        s.close()
        with pytest.raises(sqlite3.ProgrammingError):
            s.get(b"k")


class TestSnapshot:
    """Tests for consistent snapshots."""

    def test_snapshot_contains_records(self, store, tmp_path):
        store.put(b"k", b"v")
        dest = tmp_path / "snap"
        store.save_checkpoint(dest)

        assert (dest / DB_NAME).exists()
        with NodeStore(dest) as copy:
            assert copy.dump() == store.dump()

    def test_snapshot_refuses_existing_db(self, store, tmp_path):
        dest = tmp_path / "snap"
        store.save_checkpoint(dest)
        with pytest.raises(FileExistsError):
            store.save_checkpoint(dest)

    def test_backend(self, tmp_path):
        backend = SQLiteStorageBackend()
        handle = backend.open(tmp_path / "node0")
        handle.put(b"k", b"v")
        backend.export_snapshot(handle, tmp_path / "out")
        backend.close(handle)
        assert (tmp_path / "out" / DB_NAME).exists()
