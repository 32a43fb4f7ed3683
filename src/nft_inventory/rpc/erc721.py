"""Direct ERC-721 contract reads"""

from typing import List

from eth_utils import function_signature_to_4byte_selector, encode_hex
from loguru import logger

from ..config import MAX_ENUMERATED_TOKENS
from ..errors import EnumerationUnsupported, RpcError
from ..models import EnumerationResult
from .provider import JsonRpcProvider


BALANCE_OF_SELECTOR = encode_hex(function_signature_to_4byte_selector("balanceOf(address)"))
TOKEN_OF_OWNER_BY_INDEX_SELECTOR = encode_hex(
    function_signature_to_4byte_selector("tokenOfOwnerByIndex(address,uint256)")
)


def _encode_address(address: str) -> str:
    return address.lower()[2:].rjust(64, "0")


def _encode_uint256(value: int) -> str:
    return format(value, "x").rjust(64, "0")


def _decode_uint256(data: str) -> int:
    if not isinstance(data, str) or not data.startswith("0x") or len(data) < 3:
        raise RpcError(f"Cannot decode uint256 from {data!r}")
    try:
        return int(data[2:66], 16)
    except ValueError as e:
        raise RpcError(f"Cannot decode uint256 from {data!r}") from e


async def balance_of(provider: JsonRpcProvider, contract_address: str, wallet_address: str) -> int:
    """Call balanceOf(wallet) on an ERC-721 contract"""
    data = BALANCE_OF_SELECTOR + _encode_address(wallet_address)
    return _decode_uint256(await provider.call(contract_address, data))


async def token_of_owner_by_index(
    provider: JsonRpcProvider,
    contract_address: str,
    wallet_address: str,
    index: int,
) -> str:
    """Call tokenOfOwnerByIndex(wallet, index); a revert means the extension is missing"""
    data = TOKEN_OF_OWNER_BY_INDEX_SELECTOR + _encode_address(wallet_address) + _encode_uint256(index)
    try:
        result = await provider.call(contract_address, data)
        return str(_decode_uint256(result))
    except RpcError as e:
        raise EnumerationUnsupported(
            f"tokenOfOwnerByIndex({index}) failed on {contract_address}: {e}"
        ) from e


async def enumerate_owned_tokens(
    provider: JsonRpcProvider,
    contract_address: str,
    wallet_address: str,
    max_tokens: int = MAX_ENUMERATED_TOKENS,
) -> EnumerationResult:
    """
    Read a wallet's token IDs straight from the contract

    A zero balance returns immediately. Otherwise indices 0..balance-1 are
    walked in order; the first failing index call means the contract does
    not support enumeration at all, so the partial list is dropped and the
    result comes back with ``enumerable=False``. A balance above
    ``max_tokens`` is treated the same way without walking any index.

    Raises:
        RpcError: balanceOf itself failed
    """
    balance = await balance_of(provider, contract_address, wallet_address)
    logger.debug(f"{contract_address} balanceOf({wallet_address}) = {balance}")

    if balance == 0:
        return EnumerationResult(balance=0)

    if balance > max_tokens:
        logger.warning(f"Balance {balance} on {contract_address} exceeds {max_tokens}, not enumerating")
        return EnumerationResult(balance=balance, enumerable=False)

    token_ids: List[str] = []
    try:
        for index in range(balance):
            token_ids.append(
                await token_of_owner_by_index(provider, contract_address, wallet_address, index)
            )
    except EnumerationUnsupported as e:
        logger.warning(f"Contract may not support tokenOfOwnerByIndex: {e}")
        return EnumerationResult(balance=balance, enumerable=False)

    return EnumerationResult(balance=balance, token_ids=token_ids)
