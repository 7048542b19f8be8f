"""Asset synchronization engine.

Fetches every due asset concurrently, detects content changes by hash and
swaps each asset's current version without ever leaving its record
pointing at a missing blob.
"""

from contextlib import closing
from datetime import datetime, timedelta, timezone
from typing import Callable, Iterable, List, Mapping, Optional

from extasset.logging_config import get_logger
from extasset.models import (
    AssetDefinition,
    AssetRecord,
    AssetResult,
    AssetStatus,
    Failed,
    FetchOutcome,
)
from extasset.services.fetcher import FetchClient
from extasset.services.hasher import blob_key, compute_content_hash
from extasset.storage.base import BlobStore, MetadataStore

logger = get_logger(__name__)

DEFAULT_CONCURRENCY = 5

# Longest response body copied into a failure log line
MAX_LOGGED_BODY = 500


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class SyncEngine:
    """Synchronizes configured assets into the blob store.

    Fetches run on the fetch client's worker pool; reconciliation of each
    result runs on the calling thread as results arrive, so each asset's
    record and blobs are only ever written by that asset's own
    reconciliation.

    Attributes:
        assets: Configured assets keyed by name
        metadata: Store of per-asset freshness records
        blobs: Store of asset content
        fetcher: Concurrent HTTP client
        concurrency: Maximum simultaneous fetches
    """

    def __init__(
        self,
        assets: Mapping[str, AssetDefinition],
        metadata: MetadataStore,
        blobs: BlobStore,
        fetcher: FetchClient,
        concurrency: int = DEFAULT_CONCURRENCY,
        clock: Callable[[], datetime] = utc_now,
    ):
        """Initialize the sync engine.

        Args:
            assets: Configured assets keyed by name
            metadata: Metadata store
            blobs: Blob store
            fetcher: Fetch client used for the concurrent requests
            concurrency: Maximum simultaneous fetches
            clock: Returns the current time (injectable for tests)
        """
        self.assets = assets
        self.metadata = metadata
        self.blobs = blobs
        self.fetcher = fetcher
        self.concurrency = concurrency
        self._clock = clock

    def synchronize(
        self,
        force: bool = False,
        callback: Optional[Callable[[AssetResult], None]] = None,
    ) -> None:
        """Check and update all configured assets from their sources.

        Blocks until every due asset has been fetched and reconciled. Fetch
        failures are logged and never interrupt the pass; store failures
        propagate.

        Args:
            force: Ignore check intervals and rewrite blobs even when unchanged
            callback: Optional callback called with an AssetResult per asset
        """
        now = self._clock()
        due: List[AssetDefinition] = []

        for asset in self.assets.values():
            record = self.metadata.get(asset.name)
            if self.is_due(asset, record, now, force):
                due.append(asset)
            elif callback:
                callback(AssetResult(asset.name, AssetStatus.SKIPPED, record.content_hash))

        targets = [(asset.name, asset.source_url) for asset in due]
        with closing(self.fetcher.fetch_many(targets, self.concurrency)) as outcomes:
            for name, outcome in outcomes:
                result = self.reconcile(name, outcome, now, force)
                if callback:
                    callback(result)

    @staticmethod
    def is_due(
        asset: AssetDefinition,
        record: Optional[AssetRecord],
        now: datetime,
        force: bool = False,
    ) -> bool:
        """Decide whether an asset should be fetched this pass.

        An asset is skipped only when it declares a check interval, has a
        record, and that record was checked less than one interval ago. A
        check landing exactly on the interval boundary is due.

        Args:
            asset: Asset definition
            record: Current metadata record, if any
            now: Time of this pass
            force: Bypass the interval check

        Returns:
            True if the asset should be fetched
        """
        if force or asset.check_interval_minutes is None or record is None:
            return True

        next_check = record.last_checked_at + timedelta(minutes=asset.check_interval_minutes)
        return next_check <= now

    def reconcile(
        self, name: str, outcome: FetchOutcome, now: datetime, force: bool = False
    ) -> AssetResult:
        """Apply one fetch outcome to the stores.

        The new blob is written before the record moves to the new hash,
        and the old blob is deleted only after the record has moved, so the
        current record always refers to an existing blob.

        Args:
            name: Asset name
            outcome: Result of fetching the asset
            now: Time of this pass, recorded as last_checked_at
            force: Rewrite the blob even if content is unchanged

        Returns:
            AssetResult describing what happened
        """
        if isinstance(outcome, Failed):
            self._log_failure(name, outcome)
            return AssetResult(name, AssetStatus.FAILED, error=outcome.cause)

        content_hash = compute_content_hash(outcome.body)
        record = self.metadata.get(name)
        old_hash = record.content_hash if record else None

        if old_hash == content_hash and not force:
            self.metadata.set(name, AssetRecord(content_hash=content_hash, last_checked_at=now))
            logger.debug(f"Asset {name} unchanged ({content_hash})")
            return AssetResult(name, AssetStatus.UNCHANGED, content_hash)

        self.blobs.put(blob_key(name, content_hash), outcome.body)
        self.metadata.set(name, AssetRecord(content_hash=content_hash, last_checked_at=now))

        if old_hash is not None and old_hash != content_hash:
            self.blobs.delete(blob_key(name, old_hash))

        logger.info(f"Asset {name} stored as {blob_key(name, content_hash)}")
        return AssetResult(name, AssetStatus.UPDATED, content_hash)

    def _log_failure(self, name: str, failure: Failed) -> None:
        """Emit the structured error entry for a failed fetch."""
        context = {"asset": name, "status": failure.status_code, "body": failure.body}

        message = f"Asset update failure: {name}"
        if failure.status_code is not None:
            message += f" (HTTP {failure.status_code})"
        message += f": {failure.cause}"
        if failure.body:
            body = failure.body
            if len(body) > MAX_LOGGED_BODY:
                body = body[:MAX_LOGGED_BODY] + "..."
            message += f" | body: {body}"

        logger.error(message, extra=context)


def summarize(results: Iterable[AssetResult]) -> dict[str, int]:
    """Count results per status.

    Args:
        results: AssetResults collected from a synchronization pass

    Returns:
        Mapping of status value to count, with every status present
    """
    counts = {status.value: 0 for status in AssetStatus}
    for result in results:
        counts[result.status.value] += 1
    return counts


def get_sync_engine_from_config(
    config, metadata: MetadataStore, blobs: BlobStore
) -> SyncEngine:
    """Create a SyncEngine from ExtassetConfig.

    Args:
        config: ExtassetConfig instance
        metadata: Metadata store to reconcile against
        blobs: Blob store to write into

    Returns:
        Configured SyncEngine
    """
    return SyncEngine(
        assets=config.assets,
        metadata=metadata,
        blobs=blobs,
        fetcher=FetchClient(timeout=config.timeout, user_agent=config.user_agent),
        concurrency=config.concurrency,
    )
