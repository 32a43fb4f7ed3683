"""Display metadata lookup for a single owned token"""

from typing import Optional

from loguru import logger

from .clients import CatalogClient, MarketplaceClient
from .collections import get_collection
from .errors import IndexerUnavailable
from .indexers import IndexerFallbackChain
from .models import CanonicalNFTRecord, IndexerKind, TokenMetadata
from .utils import normalize_token_id

# Owner-filtered catalog pages are small; unfiltered scans cover more ground
OWNER_SCAN_PAGES = 3
COLLECTION_SCAN_PAGES = 5


def _to_metadata(record: CanonicalNFTRecord) -> TokenMetadata:
    return TokenMetadata(image_url=record.image_url or "", name=record.name)


async def _from_catalog(
    client: CatalogClient,
    collection_key: str,
    token_id: str,
    owner_address: Optional[str],
) -> Optional[TokenMetadata]:
    collection = get_collection(collection_key)
    max_pages = OWNER_SCAN_PAGES if owner_address else COLLECTION_SCAN_PAGES

    for page in range(1, max_pages + 1):
        records, total_pages = await client.get_collection_page(collection, page, owner_address=owner_address)
        for record in records:
            if record.token_id == token_id:
                logger.debug(f"Found {collection.name} #{token_id} in catalog page {page}")
                return _to_metadata(record)
        if page >= total_pages:
            break

    logger.warning(
        f"Token {token_id} not found in catalog"
        + (f" for owner {owner_address}" if owner_address else " after searching all pages")
    )
    return None


async def _from_marketplace(client: MarketplaceClient, collection_key: str, token_id: str) -> Optional[TokenMetadata]:
    record = await client.fetch_token(get_collection(collection_key), token_id)
    if record is None or not record.image_url:
        return None
    return _to_metadata(record)


async def fetch_token_metadata(
    indexers: IndexerFallbackChain,
    collection_key: str,
    token_id: str,
    owner_address: Optional[str] = None,
) -> TokenMetadata:
    """
    Look up image URL and name for one token

    Catalog collections are searched page by page (owner-filtered when an
    owner is given); everything else goes to the marketplace single-NFT
    endpoint. Never raises: an empty TokenMetadata means every source failed
    or the collection key is unknown.
    """
    try:
        collection = get_collection(collection_key)
    except ValueError as e:
        logger.warning(str(e))
        return TokenMetadata()
    normalized_id = normalize_token_id(token_id)
    if normalized_id is None:
        logger.warning(f"Invalid token id {token_id!r} for {collection.name}")
        return TokenMetadata()

    catalog = indexers.clients.get(IndexerKind.CATALOG)
    marketplace = indexers.clients.get(IndexerKind.MARKETPLACE)

    if IndexerKind.CATALOG in collection.indexer_priority and isinstance(catalog, CatalogClient):
        try:
            found = await _from_catalog(catalog, collection_key, normalized_id, owner_address)
            if found:
                return found
        except IndexerUnavailable as e:
            logger.error(f"Error fetching {collection.name} metadata from catalog: {e}")

    if isinstance(marketplace, MarketplaceClient):
        try:
            found = await _from_marketplace(marketplace, collection_key, normalized_id)
            if found:
                return found
        except IndexerUnavailable as e:
            logger.error(f"Error fetching {collection.name} metadata from marketplace: {e}")

    logger.warning(f"All metadata sources failed for {collection.name} #{normalized_id}")
    return TokenMetadata()
