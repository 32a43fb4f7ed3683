"""
NFT Inventory - wallet ownership reconciliation across chains and indexers
"""

__version__ = "1.0.0"
__author__ = "Lawb Team"

from .inventory import InventoryAggregator, reconcile_inventory
from .models import OwnershipSnapshot, CollectionDescriptor, CanonicalNFTRecord, Chain, IndexerKind
from .collections import NFT_COLLECTIONS

__all__ = [
    "InventoryAggregator",
    "reconcile_inventory",
    "OwnershipSnapshot",
    "CollectionDescriptor",
    "CanonicalNFTRecord",
    "Chain",
    "IndexerKind",
    "NFT_COLLECTIONS",
]
