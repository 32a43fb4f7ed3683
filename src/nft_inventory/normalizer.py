"""Normalize indexer responses to canonical records"""

from typing import Any, Dict, Iterable, List, Optional

from loguru import logger

from .errors import IndexerUnavailable
from .models import CanonicalNFTRecord, IndexerKind
from .utils import normalize_token_id, same_address


def _first_str(*values: Any) -> Optional[str]:
    for value in values:
        if isinstance(value, str) and value:
            return value
    return None


def _attributes(raw: Any) -> List[Dict[str, Any]]:
    if not isinstance(raw, list):
        return []
    return [attr for attr in raw if isinstance(attr, dict)]


def _quantity(owner: Dict[str, Any]) -> int:
    try:
        return int(owner.get("quantity", 1))
    except (TypeError, ValueError):
        return 0


def _items(payload: Any, key: str, kind: IndexerKind) -> List[Dict[str, Any]]:
    """Pull the record list out of a response, rejecting anything that is not a list of objects"""
    if not isinstance(payload, dict):
        raise IndexerUnavailable(kind.value, "response is not a JSON object")
    items = payload.get(key)
    if not isinstance(items, list):
        raise IndexerUnavailable(kind.value, f"response has no '{key}' list")
    return [item for item in items if isinstance(item, dict)]


class Normalizer:
    """Convert API-specific responses to canonical records"""

    @staticmethod
    def normalize_alchemy_nft(data: Dict[str, Any], assumed_owner: Optional[str] = None) -> Optional[CanonicalNFTRecord]:
        """Normalize one Alchemy NFT (v2 ``id.tokenId`` or v3 ``tokenId`` shape)"""
        id_block = data.get("id") if isinstance(data.get("id"), dict) else {}
        token_id = normalize_token_id(id_block.get("tokenId") or data.get("tokenId"))
        if token_id is None:
            return None

        image = data.get("image") if isinstance(data.get("image"), dict) else {}
        raw = data.get("raw") if isinstance(data.get("raw"), dict) else {}
        metadata = raw.get("metadata") if isinstance(raw.get("metadata"), dict) else {}
        if not metadata and isinstance(data.get("metadata"), dict):
            metadata = data["metadata"]
        contract = data.get("contract") if isinstance(data.get("contract"), dict) else {}

        return CanonicalNFTRecord(
            token_id=token_id,
            owner_address=assumed_owner,
            contract_address=contract.get("address"),
            image_url=_first_str(image.get("cachedUrl"), image.get("originalUrl"), metadata.get("image")),
            name=_first_str(data.get("name"), data.get("title"), metadata.get("name")),
            attributes=_attributes(metadata.get("attributes")),
        )

    @staticmethod
    def normalize_opensea_nft(data: Dict[str, Any], assumed_owner: Optional[str] = None) -> Optional[CanonicalNFTRecord]:
        """Normalize one OpenSea v2 NFT"""
        token_id = normalize_token_id(data.get("identifier"))
        if token_id is None:
            return None

        owner = assumed_owner
        owners = data.get("owners")
        if isinstance(owners, list):
            holders = [
                o.get("address") for o in owners
                if isinstance(o, dict) and o.get("address") and _quantity(o) > 0
            ]
            if holders:
                # Prefer the queried wallet when it is among several holders
                matching = [h for h in holders if same_address(h, assumed_owner)]
                owner = matching[0] if matching else holders[0]

        return CanonicalNFTRecord(
            token_id=token_id,
            owner_address=owner,
            contract_address=data.get("contract"),
            image_url=_first_str(data.get("display_image_url"), data.get("image_url")),
            name=data.get("name"),
            attributes=_attributes(data.get("traits")),
        )

    @staticmethod
    def normalize_scatter_nft(data: Dict[str, Any], contract_address: Optional[str] = None) -> Optional[CanonicalNFTRecord]:
        """Normalize one Scatter collection catalog entry"""
        token_id = normalize_token_id(data.get("token_id"))
        if token_id is None:
            return None
        return CanonicalNFTRecord(
            token_id=token_id,
            owner_address=data.get("owner_of"),
            contract_address=contract_address,
            image_url=_first_str(data.get("image_url"), data.get("image"), data.get("image_url_shrunk")),
            name=data.get("name"),
            attributes=_attributes(data.get("attributes")),
        )


def normalize_alchemy_response(payload: Any, owner: Optional[str] = None) -> List[CanonicalNFTRecord]:
    """
    Normalize an Alchemy response

    Owner queries come back as ``{"ownedNfts": [...]}`` and every entry is
    owned by the queried wallet; collection-wide queries come back as
    ``{"nfts": [...], "pageKey": ...}`` with no owner information.
    """
    if isinstance(payload, dict) and "ownedNfts" in payload:
        items = _items(payload, "ownedNfts", IndexerKind.MULTI_CHAIN)
        assumed_owner = owner
    else:
        items = _items(payload, "nfts", IndexerKind.MULTI_CHAIN)
        assumed_owner = None
    records = [Normalizer.normalize_alchemy_nft(item, assumed_owner) for item in items]
    return [record for record in records if record is not None]


def normalize_opensea_response(payload: Any, owner: Optional[str] = None) -> List[CanonicalNFTRecord]:
    """Normalize an OpenSea ``{"nfts": [...]}`` response"""
    items = _items(payload, "nfts", IndexerKind.MARKETPLACE)
    records = [Normalizer.normalize_opensea_nft(item, owner) for item in items]
    return [record for record in records if record is not None]


def normalize_scatter_response(payload: Any, contract_address: Optional[str] = None) -> List[CanonicalNFTRecord]:
    """Normalize a Scatter ``{"data": [...], "totalPages": n}`` response"""
    items = _items(payload, "data", IndexerKind.CATALOG)
    records = [Normalizer.normalize_scatter_nft(item, contract_address) for item in items]
    return [record for record in records if record is not None]


def parse_explorer_balance(payload: Any) -> int:
    """
    Read the balance out of an explorer ``tokennftbalance`` response

    ``status == "0"`` or ``message == "NOTOK"`` means rate limiting or a bad
    key, never a real zero.
    """
    kind = IndexerKind.EXPLORER_BALANCE.value
    if not isinstance(payload, dict):
        raise IndexerUnavailable(kind, "response is not a JSON object")

    status = str(payload.get("status", ""))
    message = str(payload.get("message", ""))
    if status == "0" or message == "NOTOK":
        raise IndexerUnavailable(kind, f"explorer error: {payload.get('result') or message or 'NOTOK'}")
    if status != "1":
        raise IndexerUnavailable(kind, f"unexpected status {status!r}")

    result = payload.get("result")
    if isinstance(result, list):
        result = result[0] if result else None
    if isinstance(result, dict):
        result = result.get("TokenQuantity") or result.get("balance")
    if result is None or result == "":
        raise IndexerUnavailable(kind, "balance missing from result")
    try:
        balance = int(str(result), 0) if str(result).lower().startswith("0x") else int(str(result))
    except ValueError:
        raise IndexerUnavailable(kind, f"unparsable balance {result!r}") from None
    if balance < 0:
        raise IndexerUnavailable(kind, f"negative balance {balance}")
    return balance


def filter_owned(
    records: Iterable[CanonicalNFTRecord],
    wallet_address: str,
    contract_address: Optional[str] = None,
) -> List[str]:
    """Token IDs of records owned by the wallet (and in the contract, when the record names one)"""
    token_ids: Dict[str, None] = {}
    for record in records:
        if not same_address(record.owner_address, wallet_address):
            continue
        if contract_address and record.contract_address and not same_address(record.contract_address, contract_address):
            logger.debug(f"Dropping token {record.token_id} from foreign contract {record.contract_address}")
            continue
        token_ids.setdefault(record.token_id, None)
    return list(token_ids)
