"""Chain RPC access: endpoint failover, contract reads, log scanning"""

from .provider import JsonRpcProvider, resolve_live_endpoint
from .erc721 import balance_of, enumerate_owned_tokens
from .transfer_logs import reconstruct_ownership, decode_transfer_log, TRANSFER_TOPIC

__all__ = [
    "JsonRpcProvider",
    "resolve_live_endpoint",
    "balance_of",
    "enumerate_owned_tokens",
    "reconstruct_ownership",
    "decode_transfer_log",
    "TRANSFER_TOPIC",
]
