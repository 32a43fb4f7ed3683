import pytest

from nft_inventory.config import Config
from nft_inventory.indexers import IndexerFallbackChain
from nft_inventory.inventory import InventoryAggregator
from nft_inventory.models import Chain, IndexerKind

from tests.fakes import BASE_RPC, ETH_RPC, FakeChainProvider, FakeExplorerClient, FakeOwnedClient, ProviderPool


@pytest.fixture
def test_config():
    return Config(
        etherscan_api_key="test-key",
        rpc_endpoints={Chain.ETHEREUM: [ETH_RPC], Chain.BASE: [BASE_RPC]},
        timeout=5,
    )


@pytest.fixture
def chains():
    return {
        ETH_RPC: FakeChainProvider(ETH_RPC),
        BASE_RPC: FakeChainProvider(BASE_RPC),
    }


@pytest.fixture
def indexer_clients():
    return {
        IndexerKind.EXPLORER_BALANCE: FakeExplorerClient(),
        IndexerKind.MULTI_CHAIN: FakeOwnedClient(IndexerKind.MULTI_CHAIN),
        IndexerKind.MARKETPLACE: FakeOwnedClient(IndexerKind.MARKETPLACE),
        IndexerKind.CATALOG: FakeOwnedClient(IndexerKind.CATALOG),
    }


@pytest.fixture
def stage_log():
    return []


@pytest.fixture
def make_aggregator(test_config, chains, indexer_clients, stage_log):
    """Build an aggregator from the current fake chains and clients"""
    def record(stage, collection_key, outcome):
        stage_log.append((collection_key, stage, outcome.status.value))

    def build(observer=record):
        return InventoryAggregator(
            test_config,
            indexers=IndexerFallbackChain(indexer_clients),
            provider_factory=ProviderPool(chains),
            observer=observer,
        )

    return build


@pytest.fixture
def aggregator(make_aggregator):
    return make_aggregator()
