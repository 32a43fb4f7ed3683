"""API clients for NFT indexers"""

from .base import BaseAPIClient, OwnedRecordsClient
from .explorer import ExplorerBalanceClient
from .alchemy import MultiChainIndexerClient
from .opensea import MarketplaceClient
from .scatter import CatalogClient

__all__ = [
    "BaseAPIClient",
    "OwnedRecordsClient",
    "ExplorerBalanceClient",
    "MultiChainIndexerClient",
    "MarketplaceClient",
    "CatalogClient",
]
