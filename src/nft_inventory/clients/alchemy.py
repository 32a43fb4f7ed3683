"""Alchemy NFT API client, direct or through the key-hiding relay"""

from typing import Dict, Any, Optional, List, Tuple

from loguru import logger

from .base import OwnedRecordsClient
from ..models import CanonicalNFTRecord, Chain, CollectionDescriptor, IndexerKind
from ..normalizer import normalize_alchemy_response


class MultiChainIndexerClient(OwnedRecordsClient):
    """Alchemy NFT API client"""

    kind = IndexerKind.MULTI_CHAIN

    CHAIN_MAP = {
        Chain.ETHEREUM: "eth-mainnet",
        Chain.BASE: "base-mainnet",
    }

    def __init__(
        self,
        api_key: Optional[str] = None,
        relay_url: Optional[str] = None,
        timeout: int = 30,
        max_pages: int = 5,
    ):
        # The relay keeps the key server-side; without one we need the key here
        super().__init__(relay_url or "https://eth-mainnet.g.alchemy.com", api_key=api_key, timeout=timeout)
        self.relay_url = relay_url
        self.max_pages = max_pages

    @classmethod
    def alchemy_url(cls, chain: Chain, api_key: str, method: str) -> str:
        return f"https://{cls.CHAIN_MAP[chain]}.g.alchemy.com/nft/v3/{api_key}/{method}"

    async def _get(self, chain: Chain, method: str, params: Dict[str, Any]) -> Any:
        if self.relay_url:
            relay_params = {
                "owner": params.get("owner"),
                "contractAddress": params.get("contractAddress") or params.get("contractAddresses[]"),
                "chain": chain.value,
                "pageKey": params.get("pageKey"),
            }
            return await self._request("GET", "", params={k: v for k, v in relay_params.items() if v})

        if not self.api_key:
            raise self._unavailable("neither relay URL nor API key configured")

        return await self._request("GET", self.alchemy_url(chain, self.api_key, method), params=params)

    async def fetch_owned_records(
        self,
        collection: CollectionDescriptor,
        wallet_address: str,
    ) -> List[CanonicalNFTRecord]:
        """Get the wallet's current holdings in one collection"""
        records: List[CanonicalNFTRecord] = []
        page_key: Optional[str] = None

        for _ in range(self.max_pages):
            params: Dict[str, Any] = {
                "owner": wallet_address,
                "contractAddresses[]": collection.contract_address,
                "withMetadata": "true",
                "pageSize": 100,
            }
            if page_key:
                params["pageKey"] = page_key

            payload = await self._get(collection.chain, "getNFTsForOwner", params)
            records.extend(normalize_alchemy_response(payload, owner=wallet_address))

            page_key = payload.get("pageKey") if isinstance(payload, dict) else None
            if not page_key:
                break
        else:
            logger.warning(f"Stopped after {self.max_pages} pages of {collection.name} for {wallet_address}")

        return records

    async def fetch_collection_page(
        self,
        collection: CollectionDescriptor,
        page_key: Optional[str] = None,
    ) -> Tuple[List[CanonicalNFTRecord], Optional[str]]:
        """
        Get one page of a whole collection

        Returns:
            (records, next page key or None); a key means more results exist
        """
        params: Dict[str, Any] = {
            "contractAddress": collection.contract_address,
            "withMetadata": "true",
        }
        if page_key:
            params["pageKey"] = page_key

        payload = await self._get(collection.chain, "getNFTsForContract", params)
        next_key = payload.get("pageKey") if isinstance(payload, dict) else None
        return normalize_alchemy_response(payload), next_key
