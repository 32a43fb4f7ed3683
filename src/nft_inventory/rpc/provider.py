"""JSON-RPC provider and endpoint pool resolution"""

import asyncio
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

import aiohttp
from loguru import logger

from ..errors import EndpointPoolExhausted, RpcError


class JsonRpcProvider:
    """Minimal Ethereum JSON-RPC client bound to one endpoint"""

    def __init__(self, url: str, timeout: int = 30):
        self.url = url
        self.timeout = timeout

    def __repr__(self) -> str:
        return f"JsonRpcProvider({self.url!r})"

    async def request(self, method: str, params: Optional[List[Any]] = None) -> Any:
        """Make a JSON-RPC request and return its result member"""
        payload: Dict[str, Any] = {
            "jsonrpc": "2.0",
            "id": 1,
            "method": method,
            "params": params or [],
        }

        try:
            async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self.timeout)) as session:
                async with session.post(self.url, json=payload) as response:
                    if response.status >= 400:
                        raise RpcError(f"HTTP {response.status} from {self.url}", url=self.url)
                    body = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise RpcError(f"{method} failed on {self.url}: {e!r}", url=self.url) from e

        if not isinstance(body, dict):
            raise RpcError(f"Malformed JSON-RPC response from {self.url}", url=self.url)
        if body.get("error"):
            error = body["error"]
            message = error.get("message", str(error)) if isinstance(error, dict) else str(error)
            code = error.get("code") if isinstance(error, dict) else None
            raise RpcError(f"{method} error from {self.url}: {message}", url=self.url, code=code)
        if "result" not in body:
            raise RpcError(f"JSON-RPC response without result from {self.url}", url=self.url)
        return body["result"]

    async def block_number(self) -> int:
        result = await self.request("eth_blockNumber")
        return _hex_to_int(result, self.url)

    async def call(self, to: str, data: str, block: str = "latest") -> str:
        result = await self.request("eth_call", [{"to": to, "data": data}, block])
        if not isinstance(result, str):
            raise RpcError(f"eth_call returned non-hex result from {self.url}", url=self.url)
        return result

    async def get_logs(self, log_filter: Dict[str, Any]) -> List[Dict[str, Any]]:
        result = await self.request("eth_getLogs", [log_filter])
        if not isinstance(result, list):
            raise RpcError(f"eth_getLogs returned non-list result from {self.url}", url=self.url)
        return result


def _hex_to_int(value: Union[str, int], url: str) -> int:
    if isinstance(value, int):
        return value
    try:
        return int(value, 16)
    except (TypeError, ValueError) as e:
        raise RpcError(f"Expected hex quantity from {url}, got {value!r}", url=url) from e


ProviderFactory = Callable[..., JsonRpcProvider]


async def resolve_live_endpoint(
    pool: Sequence[str],
    provider_factory: ProviderFactory = JsonRpcProvider,
    timeout: int = 30,
) -> JsonRpcProvider:
    """
    Return a provider for the first endpoint in the pool that answers eth_blockNumber

    Endpoints are checked strictly in pool order, once each. A fresh check runs
    on every call since endpoints go stale.

    Raises:
        EndpointPoolExhausted: every endpoint failed (or the pool is empty)
    """
    last_error: Optional[BaseException] = None

    for url in pool:
        provider = provider_factory(url, timeout=timeout)
        try:
            await provider.block_number()
        except RpcError as e:
            logger.warning(f"RPC endpoint failed ({url}): {e}")
            last_error = e
            continue
        logger.debug(f"Using RPC endpoint: {url}")
        return provider

    detail = f"{last_error}" if last_error else "empty pool"
    raise EndpointPoolExhausted(f"All RPC endpoints failed. Last error: {detail}", last_error=last_error)
