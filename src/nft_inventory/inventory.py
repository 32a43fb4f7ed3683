"""
Inventory aggregator: per-collection cascades merged into one snapshot
"""

import asyncio
from dataclasses import dataclass
from functools import partial
from typing import Awaitable, Callable, List, Mapping, Optional, Tuple

from loguru import logger

from .collections import NFT_COLLECTIONS, get_collection
from .config import Config, config
from .errors import (
    EndpointPoolExhausted,
    IndexerUnavailable,
    RpcError,
    VerifiedZeroBalance,
)
from .indexers import IndexerFallbackChain
from .models import (
    CollectionDescriptor,
    IndexerKind,
    OwnershipSnapshot,
    StageOutcome,
)
from .observability import StageObserver, log_stage, notify
from .rpc.erc721 import balance_of, enumerate_owned_tokens
from .rpc.provider import JsonRpcProvider, ProviderFactory, resolve_live_endpoint
from .rpc.transfer_logs import reconstruct_ownership
from .utils import require_address


VERIFIED_ZERO_STAGE = "verified-zero"
CONTRACT_STAGE = "contract"


@dataclass(frozen=True)
class CascadeContext:
    """Inputs shared by every stage of one collection's cascade"""
    collection: CollectionDescriptor
    wallet_address: str


Strategy = Callable[[CascadeContext], Awaitable[StageOutcome]]


class InventoryAggregator:
    """
    Reconcile a wallet's holdings across every supported collection

    Each collection runs an ordered list of strategies; the first one that
    returns ``ok`` wins, a verified zero stops the cascade with no tokens, and
    running out of strategies yields an empty list. Nothing a data source
    does can make ``reconcile_inventory`` raise.
    """

    def __init__(
        self,
        config_instance: Optional[Config] = None,
        indexers: Optional[IndexerFallbackChain] = None,
        provider_factory: ProviderFactory = JsonRpcProvider,
        observer: StageObserver = log_stage,
        collections: Optional[Mapping[str, CollectionDescriptor]] = None,
    ):
        self.config = config_instance or config
        self.indexers = indexers or IndexerFallbackChain.from_config(self.config)
        self.provider_factory = provider_factory
        self.observer = observer
        self.collections = dict(collections or NFT_COLLECTIONS)

    def build_cascade(self, collection: CollectionDescriptor) -> List[Tuple[str, Strategy]]:
        """Strategies for a collection, in the order they run"""
        kinds = collection.indexer_priority
        stages: List[Tuple[str, Strategy]] = [(VERIFIED_ZERO_STAGE, self._verified_zero_stage)]
        stages.append((kinds[0].value, partial(self._indexer_stage, kinds[0])))
        stages.append((CONTRACT_STAGE, self._contract_stage))
        for kind in kinds[1:]:
            stages.append((kind.value, partial(self._indexer_stage, kind)))
        return stages

    async def _verified_zero_stage(self, ctx: CascadeContext) -> StageOutcome:
        try:
            balance = await self.indexers.check_balance(ctx.collection, ctx.wallet_address)
        except VerifiedZeroBalance:
            return StageOutcome.verified_zero(VERIFIED_ZERO_STAGE)
        except IndexerUnavailable as e:
            return StageOutcome.skip(VERIFIED_ZERO_STAGE, f"unverifiable: {e.reason}")
        return StageOutcome.skip(VERIFIED_ZERO_STAGE, f"explorer balance {balance}")

    async def _indexer_stage(self, kind: IndexerKind, ctx: CascadeContext) -> StageOutcome:
        try:
            token_ids = await self.indexers.fetch_one(kind, ctx.collection, ctx.wallet_address)
        except VerifiedZeroBalance:
            return StageOutcome.verified_zero(kind.value)
        except IndexerUnavailable as e:
            return StageOutcome.skip(kind.value, e.reason)
        return StageOutcome.ok(kind.value, token_ids)

    async def _resolve_provider(self, collection: CollectionDescriptor) -> JsonRpcProvider:
        return await resolve_live_endpoint(
            self.config.get_rpc_pool(collection.chain),
            provider_factory=self.provider_factory,
            timeout=self.config.timeout,
        )

    async def _contract_stage(self, ctx: CascadeContext) -> StageOutcome:
        """Enumerate on-chain, falling back to Transfer logs on the same endpoint"""
        contract = ctx.collection.contract_address
        try:
            provider = await self._resolve_provider(ctx.collection)
        except EndpointPoolExhausted as e:
            return StageOutcome.skip(CONTRACT_STAGE, str(e))

        try:
            result = await enumerate_owned_tokens(
                provider,
                contract,
                ctx.wallet_address,
                max_tokens=self.config.max_enumerated_tokens,
            )
        except RpcError as e:
            return StageOutcome.skip(CONTRACT_STAGE, f"balanceOf failed: {e}")

        if result.balance == 0:
            return StageOutcome.ok(CONTRACT_STAGE, [])
        if result.enumerable:
            return StageOutcome.ok(CONTRACT_STAGE, result.token_ids)

        logger.info(f"Contract doesn't support tokenOfOwnerByIndex, trying Transfer events for {ctx.collection.name}")
        try:
            token_ids = await reconstruct_ownership(
                provider,
                contract,
                ctx.wallet_address,
                window=self.config.log_window_blocks,
            )
        except RpcError as e:
            return StageOutcome.skip(CONTRACT_STAGE, f"Transfer log scan failed: {e}")

        if not token_ids:
            return StageOutcome.skip(
                CONTRACT_STAGE,
                f"balance {result.balance} but no token IDs in the last {self.config.log_window_blocks} blocks",
            )
        return StageOutcome.ok(CONTRACT_STAGE, token_ids)

    async def _run_cascade(self, collection: CollectionDescriptor, wallet_address: str) -> Tuple[List[str], Optional[str]]:
        """Returns (token IDs, name of the stage that produced them or None)"""
        ctx = CascadeContext(collection=collection, wallet_address=wallet_address)

        for stage, strategy in self.build_cascade(collection):
            try:
                outcome = await strategy(ctx)
            except Exception as e:
                logger.exception(f"[{collection.key}] {stage} raised unexpectedly")
                outcome = StageOutcome.skip(stage, f"unexpected error: {e!r}")

            notify(self.observer, stage, collection.key, outcome)

            if outcome.is_final:
                return list(dict.fromkeys(outcome.token_ids)), stage

        logger.warning(f"All methods failed for {collection.name}, reporting no tokens")
        return [], None

    async def reconcile_inventory(self, wallet_address: str) -> OwnershipSnapshot:
        """
        Compute the wallet's current token IDs for every collection

        The five cascades run concurrently and share nothing; the snapshot is
        returned once all of them have finished and always carries every
        collection key.

        Raises:
            ValueError: ``wallet_address`` is not an Ethereum address
        """
        wallet = require_address(wallet_address)
        collections = list(self.collections.values())

        results = await asyncio.gather(
            *[self._run_cascade(collection, wallet) for collection in collections],
            return_exceptions=True,
        )

        snapshot = OwnershipSnapshot(wallet=wallet)
        for collection, result in zip(collections, results):
            if isinstance(result, BaseException):
                logger.error(f"Error reconciling {collection.name}: {result!r}")
                snapshot.collections[collection.key] = []
                snapshot.sources[collection.key] = None
                continue
            token_ids, source = result
            snapshot.collections[collection.key] = token_ids
            snapshot.sources[collection.key] = source

        logger.info(f"Reconciled {snapshot.total_count} token(s) across {len(collections)} collections for {wallet}")
        return snapshot

    async def holds_any(self, collection_key: str, wallet_address: str) -> bool:
        """Whether the wallet holds at least one token of a collection, by a direct balanceOf"""
        collection = get_collection(collection_key)
        wallet = require_address(wallet_address)
        try:
            provider = await self._resolve_provider(collection)
            balance = await balance_of(provider, collection.contract_address, wallet)
        except (EndpointPoolExhausted, RpcError) as e:
            logger.error(f"Error checking {collection.name} ownership for {wallet}: {e}")
            return False
        return balance > 0


async def reconcile_inventory(wallet_address: str, config_instance: Optional[Config] = None) -> OwnershipSnapshot:
    """Reconcile with a default aggregator"""
    return await InventoryAggregator(config_instance).reconcile_inventory(wallet_address)
