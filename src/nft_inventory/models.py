"""
Pydantic models for ownership reconciliation
"""

from enum import Enum
from typing import Optional, List, Dict, Any, Tuple
from pydantic import BaseModel, ConfigDict, Field


class Chain(str, Enum):
    """Supported blockchain networks"""
    ETHEREUM = "ethereum"
    BASE = "base"

    @property
    def chain_id(self) -> int:
        return _CHAIN_IDS[self]

    @classmethod
    def from_string(cls, chain_str: str) -> "Chain":
        """Convert string to Chain enum"""
        chain_str = chain_str.lower().strip()
        mapping = {
            "eth": cls.ETHEREUM,
            "ethereum": cls.ETHEREUM,
            "mainnet": cls.ETHEREUM,
            "base": cls.BASE,
        }
        if chain_str not in mapping:
            raise ValueError(f"Unsupported chain: {chain_str}")
        return mapping[chain_str]

    @classmethod
    def from_chain_id(cls, chain_id: int) -> "Chain":
        for chain, known_id in _CHAIN_IDS.items():
            if known_id == chain_id:
                return chain
        raise ValueError(f"Unsupported chain id: {chain_id}")


_CHAIN_IDS = {
    Chain.ETHEREUM: 1,
    Chain.BASE: 8453,
}


class IndexerKind(str, Enum):
    """External indexing services, in no particular order"""
    EXPLORER_BALANCE = "chain-explorer-balance"
    MULTI_CHAIN = "multi-chain-nft-indexer"
    MARKETPLACE = "marketplace-search"
    CATALOG = "collection-catalog"


class CollectionDescriptor(BaseModel):
    """One supported collection and the order its sources are consulted in"""

    model_config = ConfigDict(frozen=True)

    key: str
    name: str
    chain: Chain
    contract_address: str
    slug: str
    preferred_indexer: IndexerKind
    fallback_indexers: Tuple[IndexerKind, ...] = ()

    @property
    def indexer_priority(self) -> Tuple[IndexerKind, ...]:
        return (self.preferred_indexer,) + tuple(self.fallback_indexers)


class CanonicalNFTRecord(BaseModel):
    """Normalized NFT record that every indexer response is converted to"""

    token_id: str
    owner_address: Optional[str] = None
    contract_address: Optional[str] = None
    image_url: Optional[str] = None
    name: Optional[str] = None
    attributes: List[Dict[str, Any]] = Field(default_factory=list)


class TransferEvent(BaseModel):
    """Decoded ERC-721 Transfer log"""

    from_address: str
    to_address: str
    token_id: str
    block_number: int
    transaction_hash: Optional[str] = None


class EnumerationResult(BaseModel):
    """Outcome of a direct balanceOf/tokenOfOwnerByIndex walk"""

    balance: int
    token_ids: List[str] = Field(default_factory=list)
    enumerable: bool = True


class StageStatus(str, Enum):
    OK = "ok"
    SKIP = "skip"
    VERIFIED_ZERO = "verified_zero"


class StageOutcome(BaseModel):
    """Result of one rung of a collection cascade"""

    stage: str
    status: StageStatus
    token_ids: List[str] = Field(default_factory=list)
    reason: Optional[str] = None

    @classmethod
    def ok(cls, stage: str, token_ids: List[str]) -> "StageOutcome":
        return cls(stage=stage, status=StageStatus.OK, token_ids=list(token_ids))

    @classmethod
    def skip(cls, stage: str, reason: str) -> "StageOutcome":
        return cls(stage=stage, status=StageStatus.SKIP, reason=reason)

    @classmethod
    def verified_zero(cls, stage: str) -> "StageOutcome":
        return cls(stage=stage, status=StageStatus.VERIFIED_ZERO, reason="verified zero balance")

    @property
    def is_final(self) -> bool:
        return self.status != StageStatus.SKIP


class OwnershipSnapshot(BaseModel):
    """Token IDs owned by a wallet, per collection key"""

    wallet: str
    collections: Dict[str, List[str]] = Field(default_factory=dict)
    sources: Dict[str, Optional[str]] = Field(default_factory=dict)

    def __getitem__(self, collection_key: str) -> List[str]:
        return self.collections[collection_key]

    @property
    def total_count(self) -> int:
        return sum(len(ids) for ids in self.collections.values())


class TokenMetadata(BaseModel):
    """Display metadata for a single token"""

    image_url: str = ""
    name: Optional[str] = None
