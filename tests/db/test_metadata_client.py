"""Tests for the SQLite metadata store."""

import sqlite3
from datetime import datetime, timedelta, timezone

import pytest

from extasset.db.client import SqliteMetadataStore
from extasset.models import AssetRecord
from extasset.storage.base import StoreError

CHECKED_AT = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def temp_db_path(tmp_path):
    """Return a temporary database path."""
    return tmp_path / "db" / "metadata.db"


@pytest.fixture
def store(temp_db_path):
    """Return a SqliteMetadataStore that is closed after the test."""
    db = SqliteMetadataStore(temp_db_path)
    yield db
    db.close()


class TestSqliteMetadataStore:
    """Tests for SqliteMetadataStore."""

    def test_connection_creates_db_and_schema(self, store, temp_db_path):
        """Opening the connection creates the file and the table."""
        cursor = store.connection.cursor()
        cursor.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name='asset_records'"
        )

        assert temp_db_path.exists()
        assert cursor.fetchone() is not None

    def test_context_manager_closes(self, temp_db_path):
        """Leaving the context closes the connection."""
        with SqliteMetadataStore(temp_db_path) as db:
            db.set("a", AssetRecord("abc", CHECKED_AT))
        assert db._connection is None

    def test_missing_key(self, store):
        """Unknown keys have no record."""
        assert store.has("jquery.js") is False
        assert store.get("jquery.js") is None

    def test_set_and_get(self, store):
        """A stored record is returned unchanged, timezone included."""
        record = AssetRecord("d41d8cd98f00b204e9800998ecf8427e", CHECKED_AT)
        store.set("jquery.js", record)

        assert store.has("jquery.js") is True
        assert store.get("jquery.js") == record
        assert store.get("jquery.js").last_checked_at.tzinfo is not None

    def test_set_overwrites(self, store):
        """A second set replaces hash and timestamp."""
        store.set("a", AssetRecord("one", CHECKED_AT))
        store.set("a", AssetRecord("two", CHECKED_AT + timedelta(hours=1)))

        assert store.get("a") == AssetRecord("two", CHECKED_AT + timedelta(hours=1))
        rows = store.connection.execute("SELECT COUNT(*) FROM asset_records").fetchone()
        assert rows[0] == 1

    def test_records_persist_across_connections(self, temp_db_path):
        """Records survive closing and reopening the database."""
        with SqliteMetadataStore(temp_db_path) as db:
            db.set("a", AssetRecord("abc", CHECKED_AT))

        with SqliteMetadataStore(temp_db_path) as db:
            assert db.get("a") == AssetRecord("abc", CHECKED_AT)

    def test_naive_timestamps_read_as_utc(self, store):
        """Rows written without an offset are treated as UTC."""
        store.connection.execute(
            "INSERT INTO asset_records (asset_key, content_hash, last_checked_at) VALUES (?, ?, ?)",
            ("legacy", "abc", "2024-05-01T12:00:00"),
        )
        store.connection.commit()

        assert store.get("legacy").last_checked_at == CHECKED_AT

    def test_unopenable_database_raises_store_error(self, tmp_path):
        """A path that cannot hold a database raises StoreError."""
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("file")

        with pytest.raises(StoreError, match="Cannot open metadata database"):
            SqliteMetadataStore(blocker / "metadata.db").get("a")

    def test_query_failure_raises_store_error(self, store):
        """SQLite errors during reads surface as StoreError."""
        store.connection.execute("DROP TABLE asset_records")

        with pytest.raises(StoreError, match="Failed to read record"):
            store.get("a")

    def test_write_failure_raises_store_error(self, store):
        """SQLite errors during writes surface as StoreError."""
        store.connection.execute("DROP TABLE asset_records")

        with pytest.raises(StoreError, match="Failed to write record"):
            store.set("a", AssetRecord("abc", CHECKED_AT))

    def test_store_error_keeps_cause(self, store):
        """The underlying sqlite3 error is attached."""
        store.connection.execute("DROP TABLE asset_records")

        with pytest.raises(StoreError) as exc_info:
            store.get("a")
        assert isinstance(exc_info.value.cause, sqlite3.Error)
