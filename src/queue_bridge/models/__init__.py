"""Models package."""

from queue_bridge.models.schemas import SourceMessage, TransferOutcome, TransferSummary

__all__ = [
    "SourceMessage",
    "TransferOutcome",
    "TransferSummary",
]
