"""Services for extasset.

Provides the fetch client, sync engine and URL resolver.
"""

from extasset.services.fetcher import FetchClient
from extasset.services.resolver import AssetResolver
from extasset.services.sync import SyncEngine

__all__ = ["AssetResolver", "FetchClient", "SyncEngine"]
