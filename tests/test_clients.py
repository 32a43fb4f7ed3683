import pytest
from aiohttp import web

from nft_inventory.clients import CatalogClient, ExplorerBalanceClient, MarketplaceClient, MultiChainIndexerClient
from nft_inventory.collections import NFT_COLLECTIONS
from nft_inventory.errors import IndexerUnavailable
from nft_inventory.models import Chain

from tests.fakes import OTHER, WALLET, serve


PIXELAWBS = NFT_COLLECTIONS["pixelawbs"]
HALLOWEEN = NFT_COLLECTIONS["halloween_lawbsters"]


async def test_explorer_sends_balance_query():
    seen = {}

    async def handler(request):
        seen.update(request.query)
        return web.json_response({"status": "1", "message": "OK", "result": "2"})

    async with serve(("GET", "/api", handler)) as server:
        client = ExplorerBalanceClient(api_key="secret", base_url=str(server.make_url("/api")), timeout=5)
        assert await client.fetch_balance(PIXELAWBS, WALLET) == 2

    assert seen["chainid"] == "1"
    assert seen["module"] == "account"
    assert seen["action"] == "tokennftbalance"
    assert seen["contractaddress"] == PIXELAWBS.contract_address
    assert seen["address"] == WALLET
    assert seen["apikey"] == "secret"


async def test_explorer_without_key_is_unavailable():
    client = ExplorerBalanceClient(api_key=None)
    with pytest.raises(IndexerUnavailable, match="not configured"):
        await client.fetch_balance(PIXELAWBS, WALLET)


async def test_rate_limit_is_unavailable():
    async def handler(request):
        return web.json_response({"message": "slow down"}, status=429)

    async with serve(("GET", "/api", handler)) as server:
        client = ExplorerBalanceClient(api_key="secret", base_url=str(server.make_url("/api")), timeout=5)
        with pytest.raises(IndexerUnavailable, match="429"):
            await client.fetch_balance(PIXELAWBS, WALLET)


async def test_non_json_body_is_unavailable():
    async def handler(request):
        return web.Response(text="<html>blocked</html>", content_type="text/html")

    async with serve(("GET", "/v1/collection/pixelawbs/nfts", handler)) as server:
        client = CatalogClient(base_url=str(server.make_url("/v1")), timeout=5)
        with pytest.raises(IndexerUnavailable, match="non-JSON"):
            await client.fetch_owned_records(PIXELAWBS, WALLET)


async def test_catalog_follows_total_pages():
    pages = []

    async def handler(request):
        page = int(request.query["page"])
        pages.append(page)
        assert request.query["ownerAddress"] == WALLET
        return web.json_response({
            "data": [{"token_id": str(page * 10), "owner_of": WALLET}],
            "totalPages": 3,
        })

    async with serve(("GET", "/v1/collection/pixelawbs/nfts", handler)) as server:
        client = CatalogClient(base_url=str(server.make_url("/v1")), timeout=5, max_pages=5)
        records = await client.fetch_owned_records(PIXELAWBS, WALLET)

    assert pages == [1, 2, 3]
    assert [r.token_id for r in records] == ["10", "20", "30"]
    assert all(r.contract_address == PIXELAWBS.contract_address for r in records)


async def test_catalog_stops_at_max_pages():
    async def handler(request):
        return web.json_response({"data": [], "totalPages": 50})

    async with serve(("GET", "/v1/collection/pixelawbs/nfts", handler)) as server:
        client = CatalogClient(base_url=str(server.make_url("/v1")), timeout=5, max_pages=2)
        records, total_pages = await client.get_collection_page(PIXELAWBS, 1)
        assert total_pages == 50
        assert await client.fetch_owned_records(PIXELAWBS, WALLET) == records == []


async def test_multi_chain_relay_mode_forwards_owner_query():
    seen = []

    async def handler(request):
        seen.append(dict(request.query))
        if "pageKey" not in request.query:
            return web.json_response({"ownedNfts": [{"tokenId": "0x2a"}], "pageKey": "p2"})
        return web.json_response({"ownedNfts": [{"tokenId": "0x2b"}]})

    async with serve(("GET", "/proxy", handler)) as server:
        client = MultiChainIndexerClient(relay_url=str(server.make_url("/proxy")), timeout=5)
        records = await client.fetch_owned_records(HALLOWEEN, WALLET)

    assert [r.token_id for r in records] == ["42", "43"]
    assert all(r.owner_address == WALLET for r in records)
    assert seen[0] == {"owner": WALLET, "contractAddress": HALLOWEEN.contract_address, "chain": "base"}
    assert seen[1]["pageKey"] == "p2"


async def test_multi_chain_without_relay_or_key_is_unavailable():
    client = MultiChainIndexerClient()
    with pytest.raises(IndexerUnavailable, match="neither relay URL nor API key"):
        await client.fetch_owned_records(HALLOWEEN, WALLET)


def test_alchemy_url_per_chain():
    assert MultiChainIndexerClient.alchemy_url(Chain.BASE, "k", "getNFTsForOwner") == (
        "https://base-mainnet.g.alchemy.com/nft/v3/k/getNFTsForOwner"
    )
    assert MultiChainIndexerClient.alchemy_url(Chain.ETHEREUM, "k", "getNFTsForContract").startswith(
        "https://eth-mainnet.g.alchemy.com/"
    )


async def test_marketplace_sends_api_key_header():
    seen = {}

    async def handler(request):
        seen["key"] = request.headers.get("X-API-KEY")
        seen["query"] = dict(request.query)
        return web.json_response({
            "nfts": [
                {"identifier": "3", "contract": HALLOWEEN.contract_address, "owners": [{"address": WALLET, "quantity": 1}]},
                {"identifier": "4", "contract": HALLOWEEN.contract_address, "owners": [{"address": OTHER, "quantity": 1}]},
            ]
        })

    path = f"/api/v2/chain/base/account/{WALLET}/nfts"
    async with serve(("GET", path, handler)) as server:
        client = MarketplaceClient(api_key="os-key", base_url=str(server.make_url("/api/v2")), timeout=5)
        records = await client.fetch_owned_records(HALLOWEEN, WALLET)

    assert seen["key"] == "os-key"
    assert seen["query"]["contract_address"] == HALLOWEEN.contract_address
    assert [(r.token_id, r.owner_address) for r in records] == [("3", WALLET), ("4", OTHER)]


async def test_marketplace_fetch_token_reads_nft_member():
    async def handler(request):
        return web.json_response({"nft": {"identifier": "9", "name": "Halloween #9", "image_url": "https://img/9"}})

    path = f"/api/v2/chain/base/contract/{HALLOWEEN.contract_address}/nfts/9"
    async with serve(("GET", path, handler)) as server:
        client = MarketplaceClient(api_key="os-key", base_url=str(server.make_url("/api/v2")), timeout=5)
        record = await client.fetch_token(HALLOWEEN, "9")

    assert record.name == "Halloween #9"
    assert record.image_url == "https://img/9"


async def test_marketplace_without_key_is_unavailable():
    client = MarketplaceClient(api_key=None)
    with pytest.raises(IndexerUnavailable, match="not configured"):
        await client.fetch_owned_records(HALLOWEEN, WALLET)


async def test_server_error_is_unavailable():
    async def handler(request):
        return web.Response(status=500, text="boom")

    async with serve(("GET", "/proxy", handler)) as server:
        client = MultiChainIndexerClient(relay_url=str(server.make_url("/proxy")), timeout=5)
        with pytest.raises(IndexerUnavailable, match="HTTP 500"):
            await client.fetch_owned_records(HALLOWEEN, WALLET)


async def test_multi_chain_collection_page_returns_next_key():
    async def handler(request):
        assert "owner" not in request.query
        return web.json_response({"nfts": [{"tokenId": "0x1"}, {"tokenId": "0x2"}], "pageKey": "more"})

    async with serve(("GET", "/proxy", handler)) as server:
        client = MultiChainIndexerClient(relay_url=str(server.make_url("/proxy")), timeout=5)
        records, next_key = await client.fetch_collection_page(HALLOWEEN)

    assert [r.token_id for r in records] == ["1", "2"]
    assert all(r.owner_address is None for r in records)
    assert next_key == "more"


async def test_marketplace_collection_records_by_slug():
    async def handler(request):
        return web.json_response({"nfts": [{"identifier": "10", "owners": [{"address": OTHER, "quantity": 1}]}]})

    async with serve(("GET", "/api/v2/collection/a-lawbster-halloween/nfts", handler)) as server:
        client = MarketplaceClient(api_key="os-key", base_url=str(server.make_url("/api/v2")), timeout=5)
        records = await client.fetch_collection_records(HALLOWEEN)

    assert [(r.token_id, r.owner_address) for r in records] == [("10", OTHER)]
