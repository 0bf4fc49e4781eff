"""Azure Storage Queue client wrapper for the destination queue."""

import base64
import logging
from typing import Any

from azure.core.exceptions import AzureError, HttpResponseError, ResourceExistsError

from queue_bridge.exceptions import PayloadTooLarge, SinkUnavailable

logger = logging.getLogger(__name__)

# Azure Storage Queue message size limit
MAX_MESSAGE_SIZE = 64 * 1024


class AzureQueueClient:
    """Handles ensure-exists and send against one Azure Storage Queue."""

    def __init__(self, client: Any, max_message_size: int = MAX_MESSAGE_SIZE):
        """
        Initialize Azure queue client wrapper.

        Args:
            client: azure.storage.queue.QueueClient instance.
            max_message_size: Maximum encoded message size in bytes.
        """
        self._client = client
        self._max_message_size = max_message_size
        self._exists = False

    @property
    def queue_name(self) -> str:
        """Get the destination queue name."""
        return self._client.queue_name

    def ensure_exists(self) -> None:
        """
        Create the queue if it does not exist yet. Only calls the service once.

        Raises:
            SinkUnavailable: On transport or auth errors.
        """
        if self._exists:
            return

        try:
            self._client.create_queue()
            logger.info("Created Azure queue: %s", self.queue_name)
        except ResourceExistsError:
            logger.debug("Azure queue already exists: %s", self.queue_name)
        except AzureError as e:
            raise SinkUnavailable(
                f"Failed to ensure queue {self.queue_name} exists: {e}"
            ) from e

        self._exists = True

    def send(self, body: bytes) -> None:
        """
        Base64-encode a payload and send it as one message.

        Args:
            body: Raw message payload.

        Raises:
            PayloadTooLarge: If the encoded payload exceeds the size limit.
            SinkUnavailable: On transport or auth errors.
        """
        encoded = base64.b64encode(body).decode("ascii")
        if len(encoded) > self._max_message_size:
            raise PayloadTooLarge(len(encoded), self._max_message_size)

        try:
            self._client.send_message(encoded)
        except HttpResponseError as e:
            if e.status_code == 413 or getattr(e, "error_code", None) == "RequestBodyTooLarge":
                raise PayloadTooLarge(len(encoded), self._max_message_size) from e
            raise SinkUnavailable(f"Failed to send message to {self.queue_name}: {e}") from e
        except AzureError as e:
            raise SinkUnavailable(f"Failed to send message to {self.queue_name}: {e}") from e
