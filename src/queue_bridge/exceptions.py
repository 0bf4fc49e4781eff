"""Error types raised by the bridge.

Library errors (botocore, azure-core) are caught inside the client wrappers
and re-raised as one of these, with the original exception chained.
"""


class BridgeError(Exception):
    """Base exception for all bridge errors."""


class ConfigurationError(BridgeError):
    """Required settings are missing or invalid."""

    def __init__(self, message: str, missing: list[str] | None = None):
        super().__init__(message)
        self.missing = missing or []


class SourceUnavailable(BridgeError):
    """Transport or auth failure talking to the source queue."""


class SinkUnavailable(BridgeError):
    """Transport or auth failure talking to the destination queue."""


class InvalidReceiptHandle(BridgeError):
    """Receipt handle already expired or deleted."""


class PayloadTooLarge(BridgeError):
    """Encoded payload exceeds the destination queue's message size limit."""

    def __init__(self, size: int, limit: int):
        super().__init__(f"Encoded payload is {size} bytes, limit is {limit}")
        self.size = size
        self.limit = limit
