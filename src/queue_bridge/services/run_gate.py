"""Enable switch and single-run guard around the transfer loop."""

import logging
import threading
from typing import Callable

from queue_bridge.models.schemas import TransferSummary

logger = logging.getLogger(__name__)


class RunGate:
    """Skips runs when disabled and never lets two runs overlap in one process.

    Single-instance execution across hosts is the hosting platform's job.
    """

    def __init__(self):
        self._lock = threading.Lock()

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    def run(
        self, enabled: bool, operation: Callable[[], TransferSummary]
    ) -> TransferSummary:
        """
        Run the operation if the gate is open and no other run is active.

        Args:
            enabled: Enable flag read for this invocation.
            operation: The run to execute.

        Returns:
            The operation's summary, or a skipped all-zero summary.
        """
        if not enabled:
            logger.info("Bridge disabled, skipping run")
            return TransferSummary(skipped=True)

        if not self._lock.acquire(blocking=False):
            logger.warning("Previous run still in progress, skipping run")
            return TransferSummary(skipped=True)

        try:
            return operation()
        finally:
            self._lock.release()
