"""Local filesystem blob store.

Stores each blob as a file under a root directory, typically one that a
web server exposes at ``base_url``.
"""

import os
import tempfile
from pathlib import Path
from urllib.parse import quote

from extasset.storage.base import BlobStore, StoreError


class LocalBlobStore(BlobStore):
    """Blob store writing files into a directory.

    Attributes:
        root: Directory holding the blobs
        base_url: URL prefix under which *root* is served
    """

    def __init__(self, root: Path, base_url: str = "/assets"):
        """Initialize the local blob store.

        Args:
            root: Directory holding the blobs (created if missing)
            base_url: URL prefix under which *root* is served
        """
        self.root = root
        self.base_url = base_url.rstrip("/")

    def _path_for(self, key: str) -> Path:
        """Map a blob key to a path, refusing keys that escape the root.

        Args:
            key: Blob key

        Returns:
            Absolute path inside the root directory

        Raises:
            StoreError: If the key resolves outside the root
        """
        root = self.root.resolve()
        path = (root / key).resolve()
        if root not in path.parents:
            raise StoreError(f"Blob key escapes storage root: {key}")
        return path

    def put(self, key: str, data: bytes) -> None:
        """Write the blob to a temporary file and rename it into place.

        Args:
            key: Blob key
            data: Content to store

        Raises:
            StoreError: If the file cannot be written
        """
        path = self._path_for(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".tmp-")
            try:
                with os.fdopen(fd, "wb") as f:
                    f.write(data)
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StoreError(f"Failed to write blob {key}: {e}", cause=e)

    def delete(self, key: str) -> None:
        """Remove the blob file if present.

        Raises:
            StoreError: If the file exists but cannot be removed
        """
        path = self._path_for(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise StoreError(f"Failed to delete blob {key}: {e}", cause=e)

    def url_for(self, key: str) -> str:
        return f"{self.base_url}/{quote(key)}"
