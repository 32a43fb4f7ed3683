"""Address and token ID helpers"""

import re
from typing import Any, Optional, Tuple
from eth_utils import is_address, to_checksum_address
from loguru import logger


def validate_ethereum_address(address: str) -> Tuple[bool, Optional[str]]:
    """
    Validate Ethereum address format

    Returns:
        (is_valid, checksum_address or None)
    """
    if not address or not isinstance(address, str):
        return False, None

    address = address.strip()

    if not re.match(r'^0x[a-fA-F0-9]{40}$', address):
        return False, None

    # Mixed-case input must carry a valid checksum
    if not is_address(address):
        logger.debug(f"Address failed checksum validation: {address}")
        return False, None

    return True, to_checksum_address(address)


def require_address(address: str) -> str:
    """Return the checksum form of an address or raise ValueError"""
    is_valid, checksum = validate_ethereum_address(address)
    if not is_valid or checksum is None:
        raise ValueError(f"Invalid Ethereum address: {address!r}")
    return checksum


def address_to_topic(address: str) -> str:
    """Left-pad an address to a 32-byte log topic"""
    return "0x" + address.lower()[2:].rjust(64, "0")


def topic_to_address(topic: str) -> str:
    """Take the low 20 bytes of a 32-byte topic as an address"""
    return "0x" + topic.lower()[-40:]


def same_address(left: Optional[str], right: Optional[str]) -> bool:
    """Case-insensitive address comparison"""
    if not left or not right:
        return False
    return left.strip().lower() == right.strip().lower()


def normalize_token_id(value: Any) -> Optional[str]:
    """
    Convert a token ID in any form an API returns to a decimal string

    Accepts ints, decimal strings and 0x-prefixed hex strings
    (Alchemy returns "0x2a" where others return "42").
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return str(value) if value >= 0 else None

    text = str(value).strip()
    if not text:
        return None
    try:
        if text.lower().startswith("0x"):
            return str(int(text, 16))
        if text.isdigit():
            return str(int(text))
    except ValueError:
        pass
    logger.debug(f"Unrecognized token id: {value!r}")
    return None
