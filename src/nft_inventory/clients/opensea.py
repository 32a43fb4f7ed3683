"""OpenSea marketplace API client"""

from typing import Dict, Any, Optional, List

from .base import OwnedRecordsClient
from ..models import CanonicalNFTRecord, CollectionDescriptor, IndexerKind
from ..normalizer import normalize_opensea_response, Normalizer


class MarketplaceClient(OwnedRecordsClient):
    """OpenSea v2 API client (header-authenticated)"""

    kind = IndexerKind.MARKETPLACE

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = "https://api.opensea.io/api/v2",
        timeout: int = 30,
        page_limit: int = 100,
    ):
        super().__init__(base_url, api_key=api_key, timeout=timeout)
        self.page_limit = page_limit

    async def _make_request(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """Make request with API key header"""
        if not self.api_key:
            raise self._unavailable("marketplace API key not configured")
        return await self._request("GET", endpoint, params=params, headers={"X-API-KEY": self.api_key})

    async def fetch_owned_records(
        self,
        collection: CollectionDescriptor,
        wallet_address: str,
    ) -> List[CanonicalNFTRecord]:
        """Get the wallet's NFTs in one contract"""
        endpoint = f"/chain/{collection.chain.value}/account/{wallet_address}/nfts"
        params = {
            "contract_address": collection.contract_address,
            "limit": self.page_limit,
        }
        payload = await self._make_request(endpoint, params=params)
        return normalize_opensea_response(payload, owner=wallet_address)

    async def fetch_collection_records(self, collection: CollectionDescriptor) -> List[CanonicalNFTRecord]:
        """Get the first page of a collection by slug"""
        payload = await self._make_request(
            f"/collection/{collection.slug}/nfts",
            params={"limit": self.page_limit},
        )
        return normalize_opensea_response(payload)

    async def fetch_token(self, collection: CollectionDescriptor, token_id: str) -> Optional[CanonicalNFTRecord]:
        """Get a single NFT by contract and token ID"""
        endpoint = f"/chain/{collection.chain.value}/contract/{collection.contract_address}/nfts/{token_id}"
        payload = await self._make_request(endpoint)
        if not isinstance(payload, dict):
            raise self._unavailable("response is not a JSON object")
        data = payload.get("nft") if isinstance(payload.get("nft"), dict) else payload
        return Normalizer.normalize_opensea_nft(data)
