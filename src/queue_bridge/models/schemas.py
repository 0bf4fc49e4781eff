"""Pydantic models for relayed messages and run results."""

from enum import Enum

from pydantic import BaseModel


class SourceMessage(BaseModel):
    """Message received from the source SQS queue."""

    message_id: str
    body: str
    receipt_handle: str
    receive_count: int = 0

    def body_bytes(self) -> bytes:
        """Return the raw payload bytes, untouched."""
        return self.body.encode("utf-8")


class TransferOutcome(str, Enum):
    """Result of relaying a single message."""

    TRANSFERRED = "transferred"
    FAILED = "failed"


class TransferSummary(BaseModel):
    """Counts for one run of the transfer loop."""

    fetched: int = 0
    transferred: int = 0
    failed: int = 0
    skipped: bool = False
    error: str | None = None

    def record(self, outcome: TransferOutcome) -> None:
        """Add one per-message outcome to the counts."""
        if outcome is TransferOutcome.TRANSFERRED:
            self.transferred += 1
        else:
            self.failed += 1

    def to_dict(self) -> dict:
        return self.model_dump()
