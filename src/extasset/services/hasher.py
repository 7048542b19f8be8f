"""Content hashing and blob key composition.

The MD5 digest of an asset body is its change-detection identifier and
part of the storage key, so a new upstream version always lands under a
new key.
"""

import hashlib


def compute_content_hash(data: bytes) -> str:
    """Compute the MD5 hex digest of fetched content.

    Args:
        data: Raw response body

    Returns:
        32-character hex digest
    """
    return hashlib.md5(data).hexdigest()


def blob_key(asset_name: str, content_hash: str) -> str:
    """Build the blob store key for one version of an asset.

    Args:
        asset_name: Configured asset name
        content_hash: Hex digest of the version's content

    Returns:
        Key of the form ``{content_hash}.{asset_name}``
    """
    return f"{content_hash}.{asset_name}"
