"""Base client with common functionality"""

import asyncio
from typing import Dict, Any, Optional, List
from abc import ABC, abstractmethod
import aiohttp
from loguru import logger

from ..errors import IndexerUnavailable
from ..models import CanonicalNFTRecord, CollectionDescriptor, IndexerKind


class BaseAPIClient(ABC):
    """
    Base class for indexer clients

    Requests are single-shot: a failed call raises IndexerUnavailable and the
    caller moves on to its next source instead of retrying.
    """

    kind: IndexerKind

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        timeout: int = 30,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout

    def _unavailable(self, reason: str) -> IndexerUnavailable:
        return IndexerUnavailable(self.kind.value, reason)

    async def _request(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """Make HTTP request and return the decoded JSON body"""
        if endpoint.startswith(("http://", "https://")):
            url = endpoint
        elif endpoint:
            url = f"{self.base_url}/{endpoint.lstrip('/')}"
        else:
            url = self.base_url

        default_headers = {"Accept": "application/json"}
        if headers:
            default_headers.update(headers)

        try:
            async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self.timeout)) as session:
                async with session.request(
                    method=method,
                    url=url,
                    params=params,
                    headers=default_headers,
                ) as response:
                    if response.status == 429:
                        logger.warning(f"{self.kind.value} rate limited")
                        raise self._unavailable("rate limited (HTTP 429)")
                    if response.status >= 400:
                        text = await response.text()
                        raise self._unavailable(f"HTTP {response.status}: {text[:300]}")

                    content_type = response.headers.get("Content-Type", "")
                    if "json" not in content_type:
                        text = await response.text()
                        raise self._unavailable(f"non-JSON response: {text[:200]}")
                    return await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.error(f"{self.kind.value} request failed: {e!r}")
            raise self._unavailable(f"request failed: {e!r}") from e


class OwnedRecordsClient(BaseAPIClient):
    """An indexer that can list the NFTs a wallet holds in one collection"""

    @abstractmethod
    async def fetch_owned_records(
        self,
        collection: CollectionDescriptor,
        wallet_address: str,
    ) -> List[CanonicalNFTRecord]:
        """Get the wallet's NFTs in a collection as canonical records"""
        pass
