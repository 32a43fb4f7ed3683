"""Scatter collection catalog client"""

from typing import Dict, Any, Optional, List, Tuple

from loguru import logger

from .base import OwnedRecordsClient
from ..models import CanonicalNFTRecord, CollectionDescriptor, IndexerKind
from ..normalizer import normalize_scatter_response


class CatalogClient(OwnedRecordsClient):
    """Scatter API client, authoritative for collections minted through it"""

    kind = IndexerKind.CATALOG

    def __init__(
        self,
        base_url: str = "https://api.scatter.art/v1",
        timeout: int = 30,
        page_size: int = 100,
        max_pages: int = 5,
    ):
        super().__init__(base_url, timeout=timeout)
        self.page_size = page_size
        self.max_pages = max_pages

    async def get_collection_page(
        self,
        collection: CollectionDescriptor,
        page: int = 1,
        owner_address: Optional[str] = None,
        page_size: Optional[int] = None,
    ) -> Tuple[List[CanonicalNFTRecord], int]:
        """
        Get one page of a collection, optionally filtered by owner

        Returns:
            (records, totalPages)
        """
        params: Dict[str, Any] = {
            "page": page,
            "pageSize": page_size or self.page_size,
            "sortBy": "recent",
            "sortOrder": "desc",
        }
        if owner_address:
            params["ownerAddress"] = owner_address

        payload = await self._request("GET", f"/collection/{collection.slug}/nfts", params=params)
        records = normalize_scatter_response(payload, contract_address=collection.contract_address)

        total_pages = payload.get("totalPages", 1)
        if not isinstance(total_pages, int) or total_pages < 1:
            total_pages = 1
        return records, total_pages

    async def fetch_owned_records(
        self,
        collection: CollectionDescriptor,
        wallet_address: str,
    ) -> List[CanonicalNFTRecord]:
        """Get the wallet's NFTs in a collection, following totalPages"""
        records: List[CanonicalNFTRecord] = []
        page = 1
        while True:
            page_records, total_pages = await self.get_collection_page(collection, page, owner_address=wallet_address)
            records.extend(page_records)
            if page >= total_pages:
                break
            if page >= self.max_pages:
                logger.warning(f"Stopped after {self.max_pages} of {total_pages} pages of {collection.name}")
                break
            page += 1
        return records
