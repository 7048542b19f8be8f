"""Shared fixtures for extasset tests."""

from datetime import datetime, timezone
from typing import Dict, Iterable, List, Tuple

import pytest

from extasset.models import AssetDefinition, Failed, Fetched, FetchOutcome
from extasset.services.sync import SyncEngine
from extasset.storage.memory import MemoryBlobStore, MemoryMetadataStore

NOW = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


class FakeFetcher:
    """Stand-in for FetchClient serving canned outcomes by URL.

    Attributes:
        responses: Outcome (or raw bytes) to return per URL
        requested: URLs requested, across all calls
        calls: (targets, concurrency) per fetch_many call
    """

    def __init__(self, responses: Dict[str, object] | None = None):
        self.responses: Dict[str, object] = responses or {}
        self.requested: List[str] = []
        self.calls: List[Tuple[list, int]] = []

    def fetch_many(self, targets: Iterable[Tuple[str, str]], concurrency: int = 5):
        targets = list(targets)
        self.calls.append((targets, concurrency))
        # Reverse order to show completion order is not submission order
        for target_id, url in reversed(targets):
            self.requested.append(url)
            yield target_id, self._outcome(url)

    def _outcome(self, url: str) -> FetchOutcome:
        response = self.responses.get(url)
        if response is None:
            return Failed(cause=f"404 Client Error: Not Found for url: {url}", status_code=404, body="Not Found")
        if isinstance(response, bytes):
            return Fetched(body=response)
        return response

    def close(self) -> None:
        pass


@pytest.fixture
def metadata():
    """Return an empty in-memory metadata store."""
    return MemoryMetadataStore()


@pytest.fixture
def blobs():
    """Return an empty in-memory blob store."""
    return MemoryBlobStore(base_url="https://cdn.example.com/assets")


@pytest.fixture
def fetcher():
    """Return a FakeFetcher with no responses configured."""
    return FakeFetcher()


@pytest.fixture
def assets():
    """Return two configured assets, one with a check interval."""
    return {
        "app.js": AssetDefinition(name="app.js", source_url="https://x.example.com/app.js"),
        "site.css": AssetDefinition(
            name="site.css",
            source_url="https://x.example.com/site.css",
            check_interval_minutes=60,
        ),
    }


class FakeClock:
    """Mutable clock for driving the sync engine through time."""

    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta) -> None:
        self.now = self.now + delta


@pytest.fixture
def clock():
    """Return a FakeClock starting at a fixed instant."""
    return FakeClock()


@pytest.fixture
def engine(assets, metadata, blobs, fetcher, clock):
    """Return a SyncEngine wired to in-memory stores and the fake fetcher."""
    return SyncEngine(assets, metadata, blobs, fetcher, concurrency=5, clock=clock)
