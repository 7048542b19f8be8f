"""Store contracts and backends for extasset.

Provides the metadata/blob store interfaces plus local, R2 and in-memory
blob backends.
"""

from extasset.storage.base import BlobStore, MetadataStore, StoreError

__all__ = ["BlobStore", "MetadataStore", "StoreError"]
