"""Run summary emission to logs and, optionally, CloudWatch."""

import logging
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from queue_bridge.models.schemas import TransferSummary

logger = logging.getLogger(__name__)


class MetricsPublisher:
    """Emits one summary per run."""

    def __init__(self, cloudwatch_client: Any = None, namespace: str = "", queue_name: str = ""):
        """
        Initialize metrics publisher.

        Args:
            cloudwatch_client: boto3 CloudWatch client, or None to log only.
            namespace: CloudWatch namespace. Empty disables CloudWatch.
            queue_name: Destination queue name used as metric dimension.
        """
        self._cloudwatch = cloudwatch_client
        self._namespace = namespace
        self._queue_name = queue_name

    @property
    def enabled(self) -> bool:
        return bool(self._cloudwatch is not None and self._namespace)

    def publish(self, summary: TransferSummary) -> None:
        """Log the summary and push the counts to CloudWatch if configured."""
        if summary.error:
            logger.error("Run summary: %s", summary.to_dict())
        else:
            logger.info("Run summary: %s", summary.to_dict())

        if not self.enabled or summary.skipped:
            return

        dimensions = [{"Name": "QueueName", "Value": self._queue_name}]
        try:
            self._cloudwatch.put_metric_data(
                Namespace=self._namespace,
                MetricData=[
                    {
                        "MetricName": name,
                        "Value": value,
                        "Unit": "Count",
                        "Dimensions": dimensions,
                    }
                    for name, value in (
                        ("Fetched", summary.fetched),
                        ("Transferred", summary.transferred),
                        ("Failed", summary.failed),
                    )
                ],
            )
        except (ClientError, BotoCoreError) as e:
            logger.warning("Failed to publish run metrics: %s", e)
