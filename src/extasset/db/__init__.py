"""SQLite persistence for asset freshness records."""

from extasset.db.client import SqliteMetadataStore

__all__ = ["SqliteMetadataStore"]
