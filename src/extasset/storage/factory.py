"""Factories building store backends from configuration."""

from extasset.config import ConfigError, ExtassetConfig
from extasset.db.client import SqliteMetadataStore
from extasset.storage.base import BlobStore, MetadataStore

SUPPORTED_DISKS = ("local", "r2", "memory")


def create_blob_store(config: ExtassetConfig) -> BlobStore:
    """Create the blob store selected by ``config.disk``.

    Args:
        config: Loaded configuration

    Returns:
        BlobStore for the configured backend

    Raises:
        ConfigError: If the backend is unknown or missing required settings
        ValueError: If R2 credentials are missing from the environment
    """
    disk = config.disk.lower()

    if disk == "local":
        from extasset.storage.local import LocalBlobStore

        return LocalBlobStore(config.local_root, base_url=config.local_base_url)

    if disk == "r2":
        from extasset.storage.r2 import R2BlobStore

        if not config.r2_endpoint_url:
            raise ConfigError("R2 endpoint URL not configured (storage.r2.endpoint_url)")
        return R2BlobStore(
            bucket=config.r2_bucket,
            endpoint_url=config.r2_endpoint_url,
            region=config.r2_region,
            public_url=config.r2_public_url or None,
            cache_control=config.r2_cache_control,
        )

    if disk == "memory":
        from extasset.storage.memory import MemoryBlobStore

        return MemoryBlobStore()

    raise ConfigError(
        f"Unsupported storage disk: {config.disk!r}. Supported: {', '.join(SUPPORTED_DISKS)}"
    )


def create_metadata_store(config: ExtassetConfig) -> MetadataStore:
    """Create the metadata store for *config*.

    The in-memory disk pairs with an in-memory metadata store so a dry run
    leaves nothing behind.
    """
    if config.disk.lower() == "memory":
        from extasset.storage.memory import MemoryMetadataStore

        return MemoryMetadataStore()

    return SqliteMetadataStore(config.metadata_path)
