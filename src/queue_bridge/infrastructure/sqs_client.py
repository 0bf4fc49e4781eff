"""SQS client wrapper for the source queue."""

import logging
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from queue_bridge.exceptions import InvalidReceiptHandle, SourceUnavailable
from queue_bridge.models.schemas import SourceMessage

logger = logging.getLogger(__name__)

MAX_MESSAGES_PER_RECEIVE = 10


def _is_invalid_receipt_handle(error: ClientError) -> bool:
    """Check whether a ClientError means the receipt handle is no longer valid."""
    error_info = error.response.get("Error", {})
    code = error_info.get("Code", "")
    if code.endswith("ReceiptHandleIsInvalid"):
        return True
    # Expired handles come back as InvalidParameterValue mentioning the handle
    return code.endswith("InvalidParameterValue") and "ReceiptHandle" in error_info.get(
        "Message", ""
    )


class SQSClient:
    """Handles receive/delete against one SQS queue."""

    def __init__(self, client: Any, queue_url: str):
        """
        Initialize SQS client wrapper.

        Args:
            client: boto3 SQS client instance.
            queue_url: URL of the queue to drain.
        """
        self._client = client
        self._queue_url = queue_url

    @property
    def queue_url(self) -> str:
        """Get the SQS queue URL."""
        return self._queue_url

    def receive_messages(
        self,
        max_messages: int = MAX_MESSAGES_PER_RECEIVE,
        visibility_timeout: int = 180,
    ) -> list[SourceMessage]:
        """
        Receive one batch of messages without long polling.

        Args:
            max_messages: Maximum number of messages to receive (1-10).
            visibility_timeout: Visibility timeout in seconds.

        Returns:
            List of SourceMessage objects, possibly empty.

        Raises:
            ValueError: If max_messages is outside 1-10.
            SourceUnavailable: On transport or auth errors.
        """
        if not 1 <= max_messages <= MAX_MESSAGES_PER_RECEIVE:
            raise ValueError(
                f"max_messages must be between 1 and {MAX_MESSAGES_PER_RECEIVE}"
            )

        try:
            response = self._client.receive_message(
                QueueUrl=self._queue_url,
                MaxNumberOfMessages=max_messages,
                WaitTimeSeconds=0,
                VisibilityTimeout=visibility_timeout,
                AttributeNames=["ApproximateReceiveCount"],
            )
        except (ClientError, BotoCoreError) as e:
            raise SourceUnavailable(
                f"Failed to receive messages from {self._queue_url}: {e}"
            ) from e

        messages = [
            SourceMessage(
                message_id=raw["MessageId"],
                body=raw.get("Body", ""),
                receipt_handle=raw["ReceiptHandle"],
                receive_count=int(
                    raw.get("Attributes", {}).get("ApproximateReceiveCount", 0)
                ),
            )
            for raw in response.get("Messages", [])
        ]
        if messages:
            logger.info("Received %d message(s) from SQS", len(messages))
        return messages

    def delete_message(self, receipt_handle: str, missing_ok: bool = True) -> bool:
        """
        Delete a message from the queue.

        Args:
            receipt_handle: Message receipt handle.
            missing_ok: Treat an expired or already-deleted handle as success.

        Returns:
            True if the message was deleted, False if the handle was already invalid.

        Raises:
            InvalidReceiptHandle: If the handle is invalid and missing_ok is False.
            SourceUnavailable: On transport or auth errors.
        """
        try:
            self._client.delete_message(
                QueueUrl=self._queue_url,
                ReceiptHandle=receipt_handle,
            )
        except ClientError as e:
            if not _is_invalid_receipt_handle(e):
                raise SourceUnavailable(f"Failed to delete message: {e}") from e
            if not missing_ok:
                raise InvalidReceiptHandle(str(e)) from e
            logger.warning("Receipt handle already invalid, nothing to delete")
            return False
        except BotoCoreError as e:
            raise SourceUnavailable(f"Failed to delete message: {e}") from e

        logger.debug("Deleted message from SQS")
        return True
