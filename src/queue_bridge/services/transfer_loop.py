"""Transfer loop: relay one batch from SQS to the Azure queue."""

import logging

from queue_bridge.config import MAX_RECEIVE_BATCH
from queue_bridge.exceptions import BridgeError
from queue_bridge.infrastructure.azure_queue_client import AzureQueueClient
from queue_bridge.infrastructure.sqs_client import SQSClient
from queue_bridge.models.schemas import SourceMessage, TransferOutcome, TransferSummary
from queue_bridge.services.metrics_publisher import MetricsPublisher

logger = logging.getLogger(__name__)


class TransferLoop:
    """Runs one receive → send → delete pass over a single batch.

    A message is deleted from the source only after the sink confirmed the
    send. Failures are isolated per message: a failed message is left in the
    source queue and becomes visible again once its visibility timeout
    expires, which is the only retry mechanism.
    """

    def __init__(
        self,
        source: SQSClient,
        sink: AzureQueueClient,
        metrics: MetricsPublisher,
        max_batch_size: int = MAX_RECEIVE_BATCH,
        visibility_timeout: int = 180,
        poison_receive_threshold: int = 5,
    ):
        """
        Initialize transfer loop.

        Args:
            source: Source queue client.
            sink: Destination queue client.
            metrics: Collaborator receiving the run summary.
            max_batch_size: Messages to receive per run (1-10).
            visibility_timeout: Lease in seconds for received messages.
            poison_receive_threshold: Receive count above which a message is
                reported as a poison candidate.
        """
        self._source = source
        self._sink = sink
        self._metrics = metrics
        self._max_batch_size = max_batch_size
        self._visibility_timeout = visibility_timeout
        self._poison_receive_threshold = poison_receive_threshold

    def run(self) -> TransferSummary:
        """
        Execute one run and emit its summary.

        Returns:
            TransferSummary with fetched/transferred/failed counts.

        Raises:
            SinkUnavailable: If the destination queue cannot be ensured.
            SourceUnavailable: If the batch cannot be received.
        """
        summary = TransferSummary()

        try:
            self._sink.ensure_exists()
            messages = self._source.receive_messages(
                max_messages=self._max_batch_size,
                visibility_timeout=self._visibility_timeout,
            )
        except Exception as e:
            logger.error("Run aborted before transfer: %s", e)
            summary.error = str(e)
            e.summary = summary
            self._metrics.publish(summary)
            raise

        summary.fetched = len(messages)
        logger.info("Fetched %d msg(s) from SQS", summary.fetched)

        for message in messages:
            summary.record(self.transfer_message(message))

        self._metrics.publish(summary)
        return summary

    def transfer_message(self, message: SourceMessage) -> TransferOutcome:
        """
        Send one message to the sink, then delete it from the source.

        Never raises; every failure becomes TransferOutcome.FAILED.
        """
        if message.receive_count > self._poison_receive_threshold:
            logger.warning(
                "Message %s has been received %d times, possible poison message",
                message.message_id,
                message.receive_count,
            )

        try:
            self._sink.send(message.body_bytes())
        except BridgeError as e:
            logger.error("Failed to send msg %s: %s", message.message_id, e)
            return TransferOutcome.FAILED
        except Exception as e:
            logger.exception("Unexpected error sending msg %s: %s", message.message_id, e)
            return TransferOutcome.FAILED

        try:
            self._source.delete_message(message.receipt_handle)
        except BridgeError as e:
            # Sent but not deleted: the message will be relayed again next run
            logger.error(
                "Sent msg %s but failed to delete it from SQS: %s", message.message_id, e
            )
            return TransferOutcome.FAILED
        except Exception as e:
            logger.exception("Unexpected error deleting msg %s: %s", message.message_id, e)
            return TransferOutcome.FAILED

        logger.info("Moved message %s", message.message_id)
        return TransferOutcome.TRANSFERRED
