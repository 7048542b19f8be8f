"""Concurrent HTTP fetch client.

Issues GET requests for many assets on a bounded thread pool and yields
each outcome as soon as its request finishes. Every request is attempted
exactly once; timeouts and HTTP errors come back as ``Failed`` outcomes
rather than exceptions.
"""

from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Iterable, Iterator, Optional, Tuple

import requests
from requests.adapters import HTTPAdapter

from extasset import __version__
from extasset.logging_config import get_logger
from extasset.models import Failed, Fetched, FetchOutcome

logger = get_logger(__name__)

DEFAULT_USER_AGENT = f"extasset/{__version__}"


class FetchClient:
    """HTTP client that fetches many URLs concurrently.

    Attributes:
        timeout: Per-request timeout in seconds
        session: Shared requests session
    """

    def __init__(
        self,
        timeout: float = 30,
        user_agent: str = DEFAULT_USER_AGENT,
        session: Optional[requests.Session] = None,
    ):
        """Initialize the fetch client.

        Args:
            timeout: Per-request timeout in seconds
            user_agent: User-Agent header sent with every request
            session: Pre-built session (a new one is created if None)
        """
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": user_agent})

    def _mount_pool(self, concurrency: int) -> None:
        """Size the connection pool to the concurrency ceiling."""
        adapter = HTTPAdapter(
            pool_connections=concurrency,
            pool_maxsize=concurrency,
            max_retries=0,
        )
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)

    def fetch(self, url: str) -> FetchOutcome:
        """Fetch a single URL.

        Args:
            url: URL to GET

        Returns:
            Fetched with the body, or Failed with the cause and, when a
            response was received, its status code and body text
        """
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
            return Fetched(body=response.content)
        except requests.exceptions.HTTPError as e:
            response = e.response
            return Failed(
                cause=str(e),
                status_code=response.status_code if response is not None else None,
                body=response.text if response is not None else None,
            )
        except requests.exceptions.RequestException as e:
            return Failed(cause=str(e))

    def fetch_many(
        self, targets: Iterable[Tuple[str, str]], concurrency: int = 5
    ) -> Iterator[Tuple[str, FetchOutcome]]:
        """Fetch many URLs concurrently, yielding results as they complete.

        The generator blocks between results; once exhausted every request
        has finished. Closing it early cancels requests not yet started and
        waits for those in flight.

        Args:
            targets: Iterable of (id, url) pairs
            concurrency: Maximum number of simultaneous requests

        Yields:
            (id, outcome) tuples in completion order
        """
        targets = list(targets)
        if not targets:
            return

        if concurrency < 1:
            raise ValueError(f"concurrency must be at least 1, got {concurrency}")

        self._mount_pool(concurrency)
        logger.debug(f"Fetching {len(targets)} asset(s) with concurrency {concurrency}")

        pool = ThreadPoolExecutor(max_workers=concurrency, thread_name_prefix="extasset-fetch")
        try:
            futures = {pool.submit(self.fetch, url): target_id for target_id, url in targets}
            for future in as_completed(futures):
                yield futures[future], future.result()
        finally:
            pool.shutdown(wait=True, cancel_futures=True)

    def close(self) -> None:
        """Close the underlying session."""
        self.session.close()
