"""Storage contracts used by the sync engine and resolver.

The engine only talks to storage through these two interfaces, so any
backend (SQLite, local disk, R2, in-memory) can be swapped in.
"""

from abc import ABC, abstractmethod
from typing import Optional

from extasset.models import AssetRecord


class StoreError(Exception):
    """A metadata or blob backend could not complete an operation."""

    def __init__(self, message: str, cause: Optional[Exception] = None):
        super().__init__(message)
        self.cause = cause


class MetadataStore(ABC):
    """Key-value store of permanent asset freshness records."""

    @abstractmethod
    def has(self, key: str) -> bool:
        """Return True if a record exists for *key*."""

    @abstractmethod
    def get(self, key: str) -> Optional[AssetRecord]:
        """Return the record for *key*, or None if absent."""

    @abstractmethod
    def set(self, key: str, record: AssetRecord) -> None:
        """Store *record* under *key* with no expiry."""

    def close(self) -> None:
        """Release backend resources."""


class BlobStore(ABC):
    """Object store holding asset content by blob key."""

    @abstractmethod
    def put(self, key: str, data: bytes) -> None:
        """Durably store *data* under *key*, replacing any existing object."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove the object at *key*. Missing keys are ignored."""

    @abstractmethod
    def url_for(self, key: str) -> str:
        """Return the public URL that serves the object at *key*."""
