"""SQLite metadata store for extasset.

Keeps the permanent ``{content_hash, last_checked_at}`` record of every
synchronized asset in a local SQLite database.
"""

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Optional

from extasset.db.schema import (
    ALL_SCHEMA_STATEMENTS,
    SELECT_RECORD_QUERY,
    UPSERT_RECORD_QUERY,
)
from extasset.models import AssetRecord
from extasset.storage.base import MetadataStore, StoreError


class SqliteMetadataStore(MetadataStore):
    """Metadata store backed by a SQLite database file.

    The schema is created lazily on first connection. Every ``set`` commits
    immediately so a record is durable before the caller moves on.

    Attributes:
        db_path: Path to the SQLite database file
    """

    def __init__(self, db_path: Path):
        """Initialize the metadata store.

        Args:
            db_path: Path to the SQLite database file
        """
        self.db_path = db_path
        self._connection: Optional[sqlite3.Connection] = None

    @property
    def connection(self) -> sqlite3.Connection:
        """Get or create the database connection.

        Returns:
            Active sqlite3 connection with the schema initialized

        Raises:
            StoreError: If the database cannot be opened
        """
        if self._connection is None:
            try:
                self.db_path.parent.mkdir(parents=True, exist_ok=True)
                self._connection = sqlite3.connect(self.db_path)
                self.initialize_schema()
            except (sqlite3.Error, OSError) as e:
                self._connection = None
                raise StoreError(f"Cannot open metadata database {self.db_path}: {e}", cause=e)

        return self._connection

    def close(self) -> None:
        """Close the database connection."""
        if self._connection:
            self._connection.close()
            self._connection = None

    def __enter__(self) -> "SqliteMetadataStore":
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.close()

    @contextmanager
    def transaction(self) -> Generator[sqlite3.Connection, None, None]:
        """Context manager for database transactions.

        Yields:
            SQLite connection with active transaction
        """
        conn = self._connection if self._connection is not None else self.connection
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise

    def initialize_schema(self) -> None:
        """Create tables and triggers if they don't exist."""
        with self.transaction() as conn:
            cursor = conn.cursor()
            for statement in ALL_SCHEMA_STATEMENTS:
                cursor.execute(statement)

    def has(self, key: str) -> bool:
        return self.get(key) is not None

    def get(self, key: str) -> Optional[AssetRecord]:
        """Fetch the record stored under *key*.

        Raises:
            StoreError: If the query fails
        """
        try:
            cursor = self.connection.cursor()
            cursor.execute(SELECT_RECORD_QUERY, (key,))
            row = cursor.fetchone()
        except sqlite3.Error as e:
            raise StoreError(f"Failed to read record {key}: {e}", cause=e)

        return AssetRecord.from_row(tuple(row)) if row else None

    def set(self, key: str, record: AssetRecord) -> None:
        """Insert or overwrite the record under *key*.

        Raises:
            StoreError: If the write fails
        """
        content_hash, checked_at = record.to_row()
        try:
            with self.transaction() as conn:
                conn.execute(UPSERT_RECORD_QUERY, (key, content_hash, checked_at))
        except sqlite3.Error as e:
            raise StoreError(f"Failed to write record {key}: {e}", cause=e)
