"""Ordered fallback across external indexers"""

from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from loguru import logger

from .clients import (
    BaseAPIClient,
    CatalogClient,
    ExplorerBalanceClient,
    MarketplaceClient,
    MultiChainIndexerClient,
    OwnedRecordsClient,
)
from .config import Config
from .errors import IndexerUnavailable, VerifiedZeroBalance
from .models import CollectionDescriptor, IndexerKind
from .normalizer import filter_owned


def build_clients(config: Config) -> Dict[IndexerKind, BaseAPIClient]:
    """One client per indexer kind, configured from ``config``"""
    return {
        IndexerKind.EXPLORER_BALANCE: ExplorerBalanceClient(
            api_key=config.etherscan_api_key,
            base_url=config.etherscan_base_url,
            timeout=config.timeout,
        ),
        IndexerKind.MULTI_CHAIN: MultiChainIndexerClient(
            api_key=config.alchemy_api_key,
            relay_url=config.alchemy_relay_url,
            timeout=config.timeout,
            max_pages=config.multi_chain_max_pages,
        ),
        IndexerKind.MARKETPLACE: MarketplaceClient(
            api_key=config.opensea_api_key,
            base_url=config.opensea_base_url,
            timeout=config.timeout,
            page_limit=config.marketplace_page_limit,
        ),
        IndexerKind.CATALOG: CatalogClient(
            base_url=config.scatter_base_url,
            timeout=config.timeout,
            page_size=config.catalog_page_size,
            max_pages=config.catalog_max_pages,
        ),
    }


class IndexerFallbackChain:
    """
    Query indexers in a collection's priority order

    A rung succeeds only with a well-formed, non-empty list of token IDs owned
    by the wallet. Empty lists are ambiguous (an indexer that has not caught up
    looks exactly like a wallet that owns nothing), so they fall through. The
    one authoritative negative is an explorer-verified zero balance, which is
    raised as VerifiedZeroBalance so the caller can stop the whole cascade.
    """

    def __init__(self, clients: Mapping[IndexerKind, BaseAPIClient]):
        self.clients = dict(clients)

    @classmethod
    def from_config(cls, config: Config) -> "IndexerFallbackChain":
        return cls(build_clients(config))

    def priority(self, collection: CollectionDescriptor) -> Tuple[IndexerKind, ...]:
        """The order indexers are tried for a collection; the explorer balance check always comes first"""
        return (IndexerKind.EXPLORER_BALANCE,) + collection.indexer_priority

    def _client(self, kind: IndexerKind) -> BaseAPIClient:
        client = self.clients.get(kind)
        if client is None:
            raise IndexerUnavailable(kind.value, "no client configured")
        return client

    async def check_balance(self, collection: CollectionDescriptor, wallet_address: str) -> int:
        """
        Ask the explorer for the wallet's balance

        Returns:
            the (non-zero) balance

        Raises:
            VerifiedZeroBalance: the explorer confirmed a zero balance
            IndexerUnavailable: the explorer gave nothing usable
        """
        client = self._client(IndexerKind.EXPLORER_BALANCE)
        if not isinstance(client, ExplorerBalanceClient):
            raise IndexerUnavailable(IndexerKind.EXPLORER_BALANCE.value, "client cannot look up balances")

        balance = await client.fetch_balance(collection, wallet_address)
        if balance == 0:
            raise VerifiedZeroBalance(collection.key)
        return balance

    async def fetch_one(self, kind: IndexerKind, collection: CollectionDescriptor, wallet_address: str) -> List[str]:
        """
        Run a single rung of the chain

        Raises:
            VerifiedZeroBalance: explorer rung confirmed zero
            IndexerUnavailable: the rung produced no usable token IDs
        """
        if kind == IndexerKind.EXPLORER_BALANCE:
            balance = await self.check_balance(collection, wallet_address)
            raise IndexerUnavailable(kind.value, f"balance {balance} confirmed, explorer has no token IDs")

        client = self._client(kind)
        if not isinstance(client, OwnedRecordsClient):
            raise IndexerUnavailable(kind.value, "client cannot list owned tokens")

        records = await client.fetch_owned_records(collection, wallet_address)
        token_ids = filter_owned(records, wallet_address, collection.contract_address)
        if not token_ids:
            raise IndexerUnavailable(kind.value, f"empty result ({len(records)} record(s) before owner filter)")
        return token_ids

    async def fetch_from_indexers(
        self,
        collection: CollectionDescriptor,
        wallet_address: str,
        kinds: Optional[Sequence[IndexerKind]] = None,
    ) -> List[str]:
        """
        Get token IDs from the first indexer that has a usable answer

        Raises:
            VerifiedZeroBalance: the explorer confirmed a zero balance
            IndexerUnavailable: every indexer failed
        """
        order = tuple(kinds) if kinds is not None else self.priority(collection)
        failures: List[str] = []

        for kind in order:
            try:
                token_ids = await self.fetch_one(kind, collection, wallet_address)
            except IndexerUnavailable as e:
                logger.info(f"[{collection.key}] {kind.value} unavailable: {e.reason}")
                failures.append(str(e))
                continue
            logger.info(f"[{collection.key}] {len(token_ids)} token(s) from {kind.value}")
            return token_ids

        raise IndexerUnavailable("indexer-chain", "; ".join(failures) or "no indexers to try")
