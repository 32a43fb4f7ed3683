"""Supported collections"""

from typing import Dict

from .models import Chain, CollectionDescriptor, IndexerKind


NFT_COLLECTIONS: Dict[str, CollectionDescriptor] = {
    "pixelawbs": CollectionDescriptor(
        key="pixelawbs",
        name="Pixelawbs",
        chain=Chain.ETHEREUM,
        contract_address="0x2d278e95b2fC67D4b27a276807e24E479D9707F6",
        slug="pixelawbs",
        preferred_indexer=IndexerKind.CATALOG,
        fallback_indexers=(IndexerKind.MULTI_CHAIN,),
    ),
    "lawbsters": CollectionDescriptor(
        key="lawbsters",
        name="Lawbsters",
        chain=Chain.ETHEREUM,
        contract_address="0x0ef7ba09c38624b8e9cc4985790a2f5dbfc1dc42",
        slug="lawbsters",
        preferred_indexer=IndexerKind.MULTI_CHAIN,
        fallback_indexers=(IndexerKind.MARKETPLACE,),
    ),
    "lawbstarz": CollectionDescriptor(
        key="lawbstarz",
        name="Lawbstarz",
        chain=Chain.ETHEREUM,
        contract_address="0xd7922cd333da5ab3758c95f774b092a7b13a5449",
        slug="lawbstarz",
        preferred_indexer=IndexerKind.CATALOG,
        fallback_indexers=(IndexerKind.MULTI_CHAIN,),
    ),
    "halloween_lawbsters": CollectionDescriptor(
        key="halloween_lawbsters",
        name="Halloween Lawbsters",
        chain=Chain.BASE,
        contract_address="0x8ab6733f8f8702c233f3582ec2a2750d3fc63a97",
        slug="a-lawbster-halloween",
        preferred_indexer=IndexerKind.MULTI_CHAIN,
        fallback_indexers=(IndexerKind.MARKETPLACE,),
    ),
    "asciilawbs": CollectionDescriptor(
        key="asciilawbs",
        name="ASCII Lawbsters",
        chain=Chain.BASE,
        contract_address="0x13c33121f8a73e22ac6aa4a135132f5ac7f221b2",
        slug="asciilawbs",
        preferred_indexer=IndexerKind.MULTI_CHAIN,
        fallback_indexers=(IndexerKind.MARKETPLACE,),
    ),
}


def get_collection(key: str) -> CollectionDescriptor:
    """Look up a collection by key"""
    try:
        return NFT_COLLECTIONS[key]
    except KeyError:
        raise ValueError(f"Unknown collection: {key}") from None
