"""Rebuild current ownership from ERC-721 Transfer logs"""

from typing import Any, Dict, List, Optional

from eth_utils import encode_hex, event_signature_to_log_topic
from loguru import logger

from ..config import LOG_WINDOW_BLOCKS
from ..errors import LogWindowIncomplete, RpcError
from ..models import TransferEvent
from ..utils import address_to_topic, topic_to_address
from .provider import JsonRpcProvider


TRANSFER_TOPIC = encode_hex(event_signature_to_log_topic("Transfer(address,address,uint256)"))

# topics[1] is "from", topics[2] is "to"
FROM_POSITION = 1
TO_POSITION = 2


def decode_transfer_log(log: Dict[str, Any]) -> Optional[TransferEvent]:
    """Decode a raw Transfer log; ERC-20 style logs (tokenId not indexed) give None"""
    topics = log.get("topics") or []
    if len(topics) < 4 or str(topics[0]).lower() != TRANSFER_TOPIC:
        return None
    try:
        block_number = log.get("blockNumber") or "0x0"
        return TransferEvent(
            from_address=topic_to_address(topics[1]),
            to_address=topic_to_address(topics[2]),
            token_id=str(int(topics[3], 16)),
            block_number=int(block_number, 16) if isinstance(block_number, str) else int(block_number),
            transaction_hash=log.get("transactionHash"),
        )
    except (TypeError, ValueError) as e:
        logger.debug(f"Skipping undecodable Transfer log: {e}")
        return None


async def _filtered_transfer_logs(
    provider: JsonRpcProvider,
    contract_address: str,
    wallet_topic: str,
    position: int,
    from_block: int,
) -> List[Dict[str, Any]]:
    topics: List[Optional[str]] = [TRANSFER_TOPIC, None, None]
    topics[position] = wallet_topic
    try:
        return await provider.get_logs({
            "address": contract_address,
            "topics": topics,
            "fromBlock": hex(from_block),
            "toBlock": "latest",
        })
    except RpcError as e:
        raise LogWindowIncomplete(f"Filtered log query rejected by {provider.url}: {e}") from e


async def _transfer_logs(
    provider: JsonRpcProvider,
    contract_address: str,
    wallet_topic: str,
    position: int,
    from_block: int,
) -> List[Dict[str, Any]]:
    """Transfer logs with the wallet at ``position``, filtered server-side when the endpoint allows it"""
    try:
        return await _filtered_transfer_logs(provider, contract_address, wallet_topic, position, from_block)
    except LogWindowIncomplete as e:
        logger.warning(f"RPC doesn't support null topics, querying all Transfer events: {e}")

    all_logs = await provider.get_logs({
        "address": contract_address,
        "topics": [TRANSFER_TOPIC],
        "fromBlock": hex(from_block),
        "toBlock": "latest",
    })
    return [
        log for log in all_logs
        if len(log.get("topics") or []) > position
        and str(log["topics"][position]).lower() == wallet_topic
    ]


def _token_ids(logs: List[Dict[str, Any]]) -> List[str]:
    token_ids: Dict[str, None] = {}
    for log in logs:
        event = decode_transfer_log(log)
        if event is not None:
            token_ids.setdefault(event.token_id, None)
    return list(token_ids)


async def reconstruct_ownership(
    provider: JsonRpcProvider,
    contract_address: str,
    wallet_address: str,
    window: int = LOG_WINDOW_BLOCKS,
) -> List[str]:
    """
    Derive a wallet's token IDs from Transfer logs in the last ``window`` blocks

    Result is (IDs transferred in) minus (IDs transferred out), compared as
    sets without regard to block order. A token sent out and later received
    back inside the window is therefore excluded, and tokens received before
    the window are never seen.

    Raises:
        RpcError: the block height or the unfiltered log query failed
    """
    wallet_topic = address_to_topic(wallet_address)
    current_block = await provider.block_number()
    from_block = max(0, current_block - window)

    inbound = await _transfer_logs(provider, contract_address, wallet_topic, TO_POSITION, from_block)
    logger.debug(f"Found {len(inbound)} Transfer events to {wallet_address} on {contract_address}")

    outbound = await _transfer_logs(provider, contract_address, wallet_topic, FROM_POSITION, from_block)
    transferred_out = set(_token_ids(outbound))

    token_ids = [token_id for token_id in _token_ids(inbound) if token_id not in transferred_out]
    logger.debug(f"Found {len(token_ids)} token IDs from Transfer events on {contract_address}")
    return token_ids
