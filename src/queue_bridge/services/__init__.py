"""Services package."""

from queue_bridge.services.metrics_publisher import MetricsPublisher
from queue_bridge.services.run_gate import RunGate
from queue_bridge.services.transfer_loop import TransferLoop

__all__ = [
    "MetricsPublisher",
    "RunGate",
    "TransferLoop",
]
