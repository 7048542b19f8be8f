"""Data models for extasset.

Provides dataclasses for configured assets, their persisted freshness
records, and the per-request fetch outcomes that drive reconciliation.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Union


@dataclass(frozen=True)
class AssetDefinition:
    """A remote asset declared in configuration.

    Attributes:
        name: Unique asset name (also used in the blob key)
        source_url: Upstream URL to mirror
        check_interval_minutes: Minimum minutes between checks (None = always)
    """

    name: str
    source_url: str
    check_interval_minutes: Optional[int] = None


@dataclass(frozen=True)
class AssetRecord:
    """Freshness record kept in the metadata store for one asset.

    Attributes:
        content_hash: Hex digest of the currently stored content
        last_checked_at: When the asset was last fetched and reconciled (UTC)
    """

    content_hash: str
    last_checked_at: datetime

    @classmethod
    def from_row(cls, row: tuple) -> "AssetRecord":
        """Create an AssetRecord from a ``(content_hash, last_checked_at)`` row.

        Args:
            row: Database row tuple

        Returns:
            AssetRecord instance
        """
        checked_at = datetime.fromisoformat(row[1])
        if checked_at.tzinfo is None:
            checked_at = checked_at.replace(tzinfo=timezone.utc)
        return cls(content_hash=row[0], last_checked_at=checked_at)

    def to_row(self) -> tuple[str, str]:
        """Convert to a row tuple suitable for insertion.

        Returns:
            Tuple of (content_hash, ISO timestamp)
        """
        return self.content_hash, self.last_checked_at.isoformat()


@dataclass(frozen=True)
class Fetched:
    """Successful fetch carrying the response body."""

    body: bytes


@dataclass(frozen=True)
class Failed:
    """Failed fetch.

    Attributes:
        cause: Human-readable failure reason
        status_code: HTTP status code, when a response was received
        body: Response body text, when a response was received
    """

    cause: str
    status_code: Optional[int] = None
    body: Optional[str] = None


FetchOutcome = Union[Fetched, Failed]


class AssetStatus(str, Enum):
    """Result of one synchronization pass for a single asset."""

    SKIPPED = "skipped"
    UNCHANGED = "unchanged"
    UPDATED = "updated"
    FAILED = "failed"


@dataclass(frozen=True)
class AssetResult:
    """Per-asset report handed to synchronization callbacks.

    Attributes:
        name: Asset name
        status: What happened to the asset this pass
        content_hash: Current content hash after the pass, if any
        error: Failure description for FAILED results
    """

    name: str
    status: AssetStatus
    content_hash: Optional[str] = None
    error: Optional[str] = None
