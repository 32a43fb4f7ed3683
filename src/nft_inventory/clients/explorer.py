"""Etherscan-style explorer client (NFT balance lookups)"""

from typing import Optional

from .base import BaseAPIClient
from ..models import CollectionDescriptor, IndexerKind
from ..normalizer import parse_explorer_balance


class ExplorerBalanceClient(BaseAPIClient):
    """Chain explorer ``tokennftbalance`` lookups"""

    kind = IndexerKind.EXPLORER_BALANCE

    def __init__(self, api_key: Optional[str], base_url: str = "https://api.etherscan.io/v2/api", timeout: int = 30):
        super().__init__(base_url, api_key=api_key, timeout=timeout)

    async def fetch_balance(self, collection: CollectionDescriptor, wallet_address: str) -> int:
        """
        Get the wallet's token count in a collection

        Raises:
            IndexerUnavailable: no key, HTTP failure, or a NOTOK/status 0 body
        """
        if not self.api_key:
            raise self._unavailable("explorer API key not configured")

        params = {
            "chainid": collection.chain.chain_id,
            "module": "account",
            "action": "tokennftbalance",
            "contractaddress": collection.contract_address,
            "address": wallet_address,
            "tag": "latest",
            "apikey": self.api_key,
        }
        payload = await self._request("GET", "", params=params)
        return parse_explorer_balance(payload)
