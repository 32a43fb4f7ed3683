import pytest
from aiohttp import web

from nft_inventory.errors import AllEndpointsUnavailable, EndpointPoolExhausted, RpcError
from nft_inventory.rpc import JsonRpcProvider, resolve_live_endpoint

from tests.fakes import FakeChainProvider, ProviderPool, serve


async def test_resolver_checks_in_order_and_stops_at_first_live():
    pool = ProviderPool({
        "fake://a": FakeChainProvider("fake://a", live=False),
        "fake://b": FakeChainProvider("fake://b", live=False),
        "fake://c": FakeChainProvider("fake://c"),
        "fake://d": FakeChainProvider("fake://d"),
    })

    provider = await resolve_live_endpoint(["fake://a", "fake://b", "fake://c", "fake://d"], provider_factory=pool)

    assert provider.url == "fake://c"
    assert pool.created == ["fake://a", "fake://b", "fake://c"]
    assert pool.providers["fake://d"].calls == []


async def test_resolver_checks_again_on_every_call():
    pool = ProviderPool({"fake://a": FakeChainProvider("fake://a")})

    await resolve_live_endpoint(["fake://a"], provider_factory=pool)
    await resolve_live_endpoint(["fake://a"], provider_factory=pool)

    assert pool.providers["fake://a"].calls == ["eth_blockNumber", "eth_blockNumber"]


async def test_resolver_raises_with_last_error_when_all_down():
    pool = ProviderPool({
        "fake://a": FakeChainProvider("fake://a", live=False),
        "fake://b": FakeChainProvider("fake://b", live=False),
    })

    with pytest.raises(EndpointPoolExhausted) as exc_info:
        await resolve_live_endpoint(["fake://a", "fake://b"], provider_factory=pool)

    assert "All RPC endpoints failed" in str(exc_info.value)
    assert isinstance(exc_info.value.last_error, RpcError)
    assert exc_info.value.last_error.url == "fake://b"


async def test_resolver_empty_pool():
    with pytest.raises(AllEndpointsUnavailable, match="empty pool"):
        await resolve_live_endpoint([], provider_factory=ProviderPool({}))


async def test_provider_returns_result_member():
    seen = []

    async def handler(request):
        body = await request.json()
        seen.append(body)
        return web.json_response({"jsonrpc": "2.0", "id": body["id"], "result": "0x10"})

    async with serve(("POST", "/", handler)) as server:
        provider = JsonRpcProvider(str(server.make_url("/")), timeout=5)
        assert await provider.block_number() == 16

    assert seen[0]["method"] == "eth_blockNumber"
    assert seen[0]["jsonrpc"] == "2.0"
    assert seen[0]["params"] == []


async def test_provider_error_member_raises():
    async def handler(request):
        return web.json_response({"jsonrpc": "2.0", "id": 1, "error": {"code": -32000, "message": "execution reverted"}})

    async with serve(("POST", "/", handler)) as server:
        provider = JsonRpcProvider(str(server.make_url("/")), timeout=5)
        with pytest.raises(RpcError, match="execution reverted") as exc_info:
            await provider.call("0x" + "11" * 20, "0x70a08231")

    assert exc_info.value.code == -32000


async def test_provider_http_error_raises():
    async def handler(request):
        return web.Response(status=503, text="overloaded")

    async with serve(("POST", "/", handler)) as server:
        provider = JsonRpcProvider(str(server.make_url("/")), timeout=5)
        with pytest.raises(RpcError, match="HTTP 503"):
            await provider.block_number()


async def test_provider_missing_result_raises():
    async def handler(request):
        return web.json_response({"jsonrpc": "2.0", "id": 1})

    async with serve(("POST", "/", handler)) as server:
        provider = JsonRpcProvider(str(server.make_url("/")), timeout=5)
        with pytest.raises(RpcError, match="without result"):
            await provider.get_logs({"address": "0x" + "11" * 20, "topics": []})


async def test_provider_non_list_logs_raise():
    async def handler(request):
        return web.json_response({"jsonrpc": "2.0", "id": 1, "result": "0x0"})

    async with serve(("POST", "/", handler)) as server:
        provider = JsonRpcProvider(str(server.make_url("/")), timeout=5)
        with pytest.raises(RpcError, match="non-list"):
            await provider.get_logs({})


async def test_unreachable_endpoint_raises_rpc_error():
    provider = JsonRpcProvider("http://127.0.0.1:9/", timeout=2)
    with pytest.raises(RpcError):
        await provider.block_number()
