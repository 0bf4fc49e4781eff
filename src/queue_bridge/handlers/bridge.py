"""Handler for one scheduled bridge run."""

import logging
from typing import Callable

from queue_bridge.config import Config
from queue_bridge.exceptions import ConfigurationError
from queue_bridge.models.schemas import TransferSummary
from queue_bridge.services.metrics_publisher import MetricsPublisher
from queue_bridge.services.run_gate import RunGate
from queue_bridge.services.transfer_loop import TransferLoop

logger = logging.getLogger(__name__)


def _abort(error: Exception, publisher: MetricsPublisher) -> None:
    """Emit the error summary for a run that never reached the transfer loop."""
    summary = TransferSummary(error=str(error))
    error.summary = summary
    publisher.publish(summary)


def run_bridge(
    config: Config,
    gate: RunGate,
    loop_factory: Callable[[Config], TransferLoop],
    publisher: MetricsPublisher | None = None,
) -> TransferSummary:
    """Run one bridge invocation.

    1. Gate check (no validation and no network calls when disabled)
    2. Validate configuration, aborting before any queue operation
    3. Build or reuse the injected clients and run the transfer loop

    Args:
        config: Configuration read for this invocation.
        gate: Process-wide run gate.
        loop_factory: Returns the TransferLoop wired for the given config.
        publisher: Receives summaries of runs that skip or abort before the
            transfer loop. Log-only when not given.

    Returns:
        TransferSummary for the run.

    Raises:
        ConfigurationError: If required settings are missing or invalid.
        SourceUnavailable: If the batch could not be received.
        SinkUnavailable: If the destination queue could not be ensured.

    Raised errors carry the run's error summary as ``error.summary``.
    """
    if publisher is None:
        publisher = MetricsPublisher()

    def _run() -> TransferSummary:
        try:
            config.validate()
        except ConfigurationError as e:
            logger.error("Run aborted, configuration error: %s", e)
            _abort(e, publisher)
            raise

        try:
            transfer_loop = loop_factory(config)
        except Exception as e:
            logger.exception("Run aborted, failed to create queue clients: %s", e)
            _abort(e, publisher)
            raise

        return transfer_loop.run()

    summary = gate.run(config.enabled, _run)
    if summary.skipped:
        publisher.publish(summary)
    return summary
