"""Long-lived bridge application owned by the host entry point."""

import logging

from queue_bridge.config import Config
from queue_bridge.handlers.bridge import run_bridge
from queue_bridge.infrastructure.dependency_injection import DependenciesContainer
from queue_bridge.models.schemas import TransferSummary
from queue_bridge.services.metrics_publisher import MetricsPublisher
from queue_bridge.services.run_gate import RunGate
from queue_bridge.services.transfer_loop import TransferLoop

logger = logging.getLogger(__name__)


class BridgeApp:
    """Owns the run gate and the DI container across invocations.

    Clients are built on the first run and reused until the configuration
    changes.
    """

    def __init__(self, container_factory=DependenciesContainer):
        self.gate = RunGate()
        self._container_factory = container_factory
        self._container = None
        self._container_config: Config | None = None

    def transfer_loop(self, config: Config) -> TransferLoop:
        """Return the TransferLoop for this config, rebuilding clients if needed."""
        if self._container is None or self._container_config != config:
            if self._container is not None:
                logger.info("Configuration changed, rebuilding queue clients")
            self._container = self._container_factory(config=config)
            self._container_config = config
        return self._container.transfer_loop()

    def metrics_publisher(self) -> MetricsPublisher:
        """Publisher of the current container, or a log-only one before the first run."""
        if self._container is None:
            return MetricsPublisher()
        return self._container.metrics_publisher()

    def invoke(self, config: Config | None = None) -> TransferSummary:
        """Run once with the given config, or one freshly read from the environment."""
        if config is None:
            config = Config.from_env()
        return run_bridge(
            config, self.gate, self.transfer_loop, publisher=self.metrics_publisher()
        )
