"""Cloudflare R2 blob store.

Stores mirrored assets in an R2 bucket through its S3-compatible API.
Credentials are read from environment variables so they never appear in
config files.
"""

import mimetypes
import os
from typing import Optional
from urllib.parse import quote

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from extasset.storage.base import BlobStore, StoreError

DEFAULT_CACHE_CONTROL = "public, max-age=31536000, immutable"


class R2BlobStore(BlobStore):
    """Blob store for Cloudflare R2 (S3-compatible) storage.

    Credentials are read from environment variables at construction time:
        EXTASSET_R2_ACCESS_KEY_ID
        EXTASSET_R2_SECRET_ACCESS_KEY

    Attributes:
        bucket: R2 bucket name
        endpoint_url: R2 endpoint URL
        region: R2 region (typically "auto")
        public_url: Public domain serving the bucket, if any
        cache_control: Cache-Control header set on uploaded objects
    """

    def __init__(
        self,
        bucket: str,
        endpoint_url: str,
        region: str = "auto",
        public_url: Optional[str] = None,
        cache_control: str = DEFAULT_CACHE_CONTROL,
    ):
        """Initialize the R2 blob store.

        Args:
            bucket: R2 bucket name
            endpoint_url: R2 endpoint URL
            region: R2 region
            public_url: Public domain serving the bucket (for url_for)
            cache_control: Cache-Control header for uploaded objects

        Raises:
            ValueError: If either credential environment variable is unset
        """
        self.bucket = bucket
        self.endpoint_url = endpoint_url.rstrip("/")
        self.region = region
        self.public_url = (public_url or "").rstrip("/")
        self.cache_control = cache_control

        access_key = os.environ.get("EXTASSET_R2_ACCESS_KEY_ID")
        secret_key = os.environ.get("EXTASSET_R2_SECRET_ACCESS_KEY")

        if not access_key or not secret_key:
            raise ValueError(
                "R2 credentials not set. "
                "Set EXTASSET_R2_ACCESS_KEY_ID and EXTASSET_R2_SECRET_ACCESS_KEY environment variables."
            )

        self._client = boto3.client(
            "s3",
            endpoint_url=endpoint_url,
            aws_access_key_id=access_key,
            aws_secret_access_key=secret_key,
            region_name=region,
        )

    def put(self, key: str, data: bytes) -> None:
        """Upload a blob.

        Args:
            key: Object key
            data: Object content

        Raises:
            StoreError: If the upload fails
        """
        content_type = mimetypes.guess_type(key)[0] or "application/octet-stream"
        try:
            self._client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType=content_type,
                CacheControl=self.cache_control,
            )
        except (ClientError, BotoCoreError) as e:
            raise StoreError(f"Failed to upload {key} to R2: {e}", cause=e)

    def delete(self, key: str) -> None:
        """Delete a blob. S3 semantics make deleting a missing key succeed.

        Raises:
            StoreError: If the request fails
        """
        try:
            self._client.delete_object(Bucket=self.bucket, Key=key)
        except (ClientError, BotoCoreError) as e:
            raise StoreError(f"Failed to delete {key} from R2: {e}", cause=e)

    def url_for(self, key: str) -> str:
        """Build the URL for an object.

        Uses the public domain when configured, otherwise the path-style
        endpoint URL.
        """
        if self.public_url:
            return f"{self.public_url}/{quote(key)}"
        return f"{self.endpoint_url}/{self.bucket}/{quote(key)}"
