"""URL resolution for mirrored assets."""

from typing import Mapping

from extasset.models import AssetDefinition
from extasset.services.hasher import blob_key
from extasset.storage.base import BlobStore, MetadataStore


class AssetResolver:
    """Resolves asset names to servable URLs.

    Attributes:
        assets: Configured assets keyed by name
        metadata: Store of per-asset freshness records
        blobs: Store serving the mirrored content
    """

    def __init__(
        self,
        assets: Mapping[str, AssetDefinition],
        metadata: MetadataStore,
        blobs: BlobStore,
    ):
        self.assets = assets
        self.metadata = metadata
        self.blobs = blobs

    def has(self, name: str) -> bool:
        """Return True if *name* is a configured asset."""
        return name in self.assets

    def url(self, name: str) -> str:
        """Return the current URL for an asset.

        Unknown names resolve to an empty string. Assets that have never
        been synchronized resolve to their source URL, so a page can always
        reference them.

        Args:
            name: Asset name

        Returns:
            Blob URL, source URL, or "" for unknown assets
        """
        asset = self.assets.get(name)
        if asset is None:
            return ""

        record = self.metadata.get(name)
        if record is None:
            return asset.source_url

        return self.blobs.url_for(blob_key(name, record.content_hash))
