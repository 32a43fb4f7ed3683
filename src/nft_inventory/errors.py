"""Failure taxonomy for the reconciliation cascade"""

from typing import Optional


class InventoryError(Exception):
    """Base class for reconciliation errors"""


class RpcError(InventoryError):
    """A JSON-RPC call failed (transport, HTTP status or error object)"""

    def __init__(self, message: str, url: Optional[str] = None, code: Optional[int] = None):
        super().__init__(message)
        self.url = url
        self.code = code


class EndpointPoolExhausted(InventoryError):
    """Every RPC candidate in a pool failed its liveness check"""

    def __init__(self, message: str, last_error: Optional[BaseException] = None):
        super().__init__(message)
        self.last_error = last_error


AllEndpointsUnavailable = EndpointPoolExhausted


class EnumerationUnsupported(InventoryError):
    """The contract does not implement tokenOfOwnerByIndex"""


class LogWindowIncomplete(InventoryError):
    """The endpoint rejected a topic-filtered log query"""


class IndexerUnavailable(InventoryError):
    """An indexer returned nothing usable"""

    def __init__(self, kind: str, reason: str):
        super().__init__(f"{kind}: {reason}")
        self.kind = kind
        self.reason = reason


class VerifiedZeroBalance(InventoryError):
    """The explorer confirmed the wallet holds nothing in the collection"""

    def __init__(self, collection_key: str):
        super().__init__(f"verified zero balance for {collection_key}")
        self.collection_key = collection_key
