"""FastAPI relay for the Alchemy NFT API plus an inventory endpoint"""

import asyncio
from typing import Any, Dict, Optional

import aiohttp
from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

from ..clients.alchemy import MultiChainIndexerClient
from ..config import Config, config
from ..inventory import InventoryAggregator
from ..models import Chain
from ..utils import validate_ethereum_address


app = FastAPI(title="NFT Inventory Relay", version="1.0.0")

if config.cors_origins == ["*"]:
    logger.warning("CORS is set to allow all origins. Consider restricting in production.")

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins,
    allow_credentials=False,
    allow_methods=["GET"],
    allow_headers=["*"],
    max_age=3600,
)


def get_config() -> Config:
    return config


class UpstreamError(Exception):
    """Alchemy answered with an error status"""

    def __init__(self, status: int, body: str):
        super().__init__(f"HTTP {status}: {body[:300]}")
        self.status = status


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    retry=retry_if_exception_type((aiohttp.ClientError, asyncio.TimeoutError)),
    reraise=True,
)
async def fetch_upstream(url: str, params: Dict[str, Any], timeout: int = 30) -> Dict[str, Any]:
    """GET an Alchemy endpoint, retrying transport failures"""
    async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=timeout)) as session:
        async with session.get(url, params=params) as response:
            if response.status >= 400:
                raise UpstreamError(response.status, await response.text())
            return await response.json(content_type=None)


@app.get("/health")
async def health() -> Dict[str, str]:
    return {"status": "ok"}


@app.get("/proxy")
async def proxy(
    owner: Optional[str] = Query(None),
    contractAddress: str = Query(...),
    chain: str = Query("ethereum"),
    pageKey: Optional[str] = Query(None),
    settings: Config = Depends(get_config),
) -> Dict[str, Any]:
    """Forward an owner or collection query to Alchemy with the server-side key"""
    if not settings.alchemy_api_key:
        raise HTTPException(status_code=503, detail="Alchemy API key not configured")

    try:
        chain_enum = Chain.from_string(chain)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    # Lowercase first: collection addresses are stored with inconsistent casing
    is_valid, contract = validate_ethereum_address(contractAddress.strip().lower())
    if not is_valid:
        raise HTTPException(status_code=400, detail="Invalid contractAddress")

    params: Dict[str, Any] = {"withMetadata": "true"}
    if owner:
        owner_valid, owner_address = validate_ethereum_address(owner)
        if not owner_valid:
            raise HTTPException(status_code=400, detail="Invalid owner")
        method = "getNFTsForOwner"
        params.update({"owner": owner_address, "contractAddresses[]": contract, "pageSize": 100})
    else:
        method = "getNFTsForContract"
        params["contractAddress"] = contract
    if pageKey:
        params["pageKey"] = pageKey

    url = MultiChainIndexerClient.alchemy_url(chain_enum, settings.alchemy_api_key, method)
    try:
        data = await fetch_upstream(url, params, timeout=settings.timeout)
    except UpstreamError as e:
        logger.warning(f"Alchemy {method} error: {e}")
        raise HTTPException(status_code=502, detail=f"Upstream error {e.status}")
    except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
        logger.error(f"Alchemy {method} failed: {e!r}")
        raise HTTPException(status_code=502, detail="Upstream unavailable")

    if not isinstance(data, dict):
        raise HTTPException(status_code=502, detail="Malformed upstream response")

    if owner:
        return {
            "ownedNfts": data.get("ownedNfts", []),
            "pageKey": data.get("pageKey"),
            "totalCount": data.get("totalCount"),
        }
    return {"nfts": data.get("nfts", []), "pageKey": data.get("pageKey")}


@app.get("/inventory/{wallet}")
async def inventory(wallet: str, settings: Config = Depends(get_config)) -> Dict[str, Any]:
    """Reconcile and return a wallet's snapshot"""
    is_valid, _ = validate_ethereum_address(wallet)
    if not is_valid:
        raise HTTPException(status_code=400, detail="Invalid wallet address")

    snapshot = await InventoryAggregator(settings).reconcile_inventory(wallet)
    return snapshot.model_dump()

