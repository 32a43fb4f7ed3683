"""
Configuration management for NFT Inventory
"""

import os
from typing import Dict, List, Optional
from dataclasses import dataclass, field
from pathlib import Path
from dotenv import load_dotenv

from .models import Chain

# Load environment variables
env_path = Path(__file__).parent.parent.parent / ".env"
load_dotenv(env_path)


DEFAULT_RPC_ENDPOINTS: Dict[Chain, List[str]] = {
    Chain.ETHEREUM: [
        "https://eth.llamarpc.com",
        "https://eth.blockscout.com/api/eth-rpc",
        "https://rpc.ankr.com/eth",
        "https://eth-mainnet.public.blastapi.io",
    ],
    Chain.BASE: [
        "https://mainnet.base.org",
        "https://base.llamarpc.com",
        "https://base-rpc.publicnode.com",
        "https://base.gateway.tenderly.co",
        "https://base.drpc.org",
        "https://1rpc.io/base",
    ],
}

# ~1 year of Ethereum blocks
LOG_WINDOW_BLOCKS = 2_500_000

# Upper bound on tokenOfOwnerByIndex calls per wallet and contract
MAX_ENUMERATED_TOKENS = 1_000


@dataclass
class Config:
    """Main configuration class"""

    # API keys
    etherscan_api_key: Optional[str] = None
    alchemy_api_key: Optional[str] = None
    opensea_api_key: Optional[str] = None

    # Indexer endpoints
    etherscan_base_url: str = "https://api.etherscan.io/v2/api"
    alchemy_relay_url: Optional[str] = None
    opensea_base_url: str = "https://api.opensea.io/api/v2"
    scatter_base_url: str = "https://api.scatter.art/v1"

    # Chain RPC pools, in priority order
    rpc_endpoints: Dict[Chain, List[str]] = field(
        default_factory=lambda: {chain: list(urls) for chain, urls in DEFAULT_RPC_ENDPOINTS.items()}
    )

    # Reconciliation settings
    log_window_blocks: int = LOG_WINDOW_BLOCKS
    max_enumerated_tokens: int = MAX_ENUMERATED_TOKENS
    catalog_page_size: int = 100
    catalog_max_pages: int = 5
    multi_chain_max_pages: int = 5
    marketplace_page_limit: int = 100

    # Request settings
    timeout: int = 30

    # Relay settings
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables"""

        def get_list(key_name: str) -> List[str]:
            """Get comma-separated values"""
            values_str = os.getenv(key_name, "")
            if not values_str:
                return []
            return [v.strip() for v in values_str.split(",") if v.strip()]

        rpc_endpoints = {chain: list(urls) for chain, urls in DEFAULT_RPC_ENDPOINTS.items()}
        for chain in Chain:
            override = get_list(f"{chain.name}_RPC_URLS")
            if override:
                rpc_endpoints[chain] = override

        return cls(
            etherscan_api_key=os.getenv("ETHERSCAN_API_KEY") or None,
            alchemy_api_key=os.getenv("ALCHEMY_API_KEY") or None,
            opensea_api_key=os.getenv("OPENSEA_API_KEY") or None,
            etherscan_base_url=os.getenv("ETHERSCAN_BASE_URL", "https://api.etherscan.io/v2/api"),
            alchemy_relay_url=os.getenv("ALCHEMY_RELAY_URL") or None,
            opensea_base_url=os.getenv("OPENSEA_BASE_URL", "https://api.opensea.io/api/v2"),
            scatter_base_url=os.getenv("SCATTER_BASE_URL", "https://api.scatter.art/v1"),
            rpc_endpoints=rpc_endpoints,
            log_window_blocks=int(os.getenv("LOG_WINDOW_BLOCKS", str(LOG_WINDOW_BLOCKS))),
            catalog_page_size=int(os.getenv("CATALOG_PAGE_SIZE", "100")),
            max_enumerated_tokens=int(os.getenv("MAX_ENUMERATED_TOKENS", str(MAX_ENUMERATED_TOKENS))),
            catalog_max_pages=int(os.getenv("CATALOG_MAX_PAGES", "5")),
            multi_chain_max_pages=int(os.getenv("MULTI_CHAIN_MAX_PAGES", "5")),
            marketplace_page_limit=int(os.getenv("MARKETPLACE_PAGE_LIMIT", "100")),
            timeout=int(os.getenv("TIMEOUT", "30")),
            cors_origins=get_list("CORS_ORIGINS") or ["*"],
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )

    def get_rpc_pool(self, chain: Chain) -> List[str]:
        """Get the RPC endpoint pool for a chain"""
        return list(self.rpc_endpoints.get(chain, []))


# Global config instance
config = Config.from_env()
