"""In-memory store backends.

Useful for dry runs and tests; nothing survives the process.
"""

from typing import Dict, Optional

from extasset.models import AssetRecord
from extasset.storage.base import BlobStore, MetadataStore


class MemoryMetadataStore(MetadataStore):
    """Metadata store backed by a dict."""

    def __init__(self) -> None:
        self.records: Dict[str, AssetRecord] = {}

    def has(self, key: str) -> bool:
        return key in self.records

    def get(self, key: str) -> Optional[AssetRecord]:
        return self.records.get(key)

    def set(self, key: str, record: AssetRecord) -> None:
        self.records[key] = record


class MemoryBlobStore(BlobStore):
    """Blob store backed by a dict.

    Attributes:
        base_url: Prefix used when building URLs
        blobs: Stored objects keyed by blob key
    """

    def __init__(self, base_url: str = "memory://assets"):
        self.base_url = base_url.rstrip("/")
        self.blobs: Dict[str, bytes] = {}

    def put(self, key: str, data: bytes) -> None:
        self.blobs[key] = data

    def delete(self, key: str) -> None:
        self.blobs.pop(key, None)

    def url_for(self, key: str) -> str:
        return f"{self.base_url}/{key}"
