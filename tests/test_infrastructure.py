"""Tests for infrastructure layer."""

import base64
from unittest.mock import MagicMock, patch

import pytest
from azure.core.exceptions import (
    HttpResponseError,
    ResourceExistsError,
    ServiceRequestError,
)
from botocore.exceptions import ClientError, EndpointConnectionError

from queue_bridge.config import Config
from queue_bridge.exceptions import (
    InvalidReceiptHandle,
    PayloadTooLarge,
    SinkUnavailable,
    SourceUnavailable,
)
from queue_bridge.infrastructure.azure_queue_client import AzureQueueClient
from queue_bridge.infrastructure.dependency_injection import DependenciesContainer
from queue_bridge.infrastructure.sqs_client import SQSClient

QUEUE_URL = "https://sqs.test/queue"


def _client_error(code: str, message: str = "", operation: str = "DeleteMessage"):
    return ClientError({"Error": {"Code": code, "Message": message}}, operation)


class TestSQSClient:
    """Tests for SQSClient."""

    def test_receive_messages_success(self):
        """Test receive_messages parses messages."""
        mock_boto_client = MagicMock()
        mock_boto_client.receive_message.return_value = {
            "Messages": [
                {
                    "MessageId": "id-1",
                    "Body": '{"order": 1}',
                    "ReceiptHandle": "handle-1",
                    "Attributes": {"ApproximateReceiveCount": "3"},
                }
            ]
        }

        client = SQSClient(mock_boto_client, QUEUE_URL)
        messages = client.receive_messages(max_messages=10, visibility_timeout=180)

        assert len(messages) == 1
        assert messages[0].message_id == "id-1"
        assert messages[0].body == '{"order": 1}'
        assert messages[0].receipt_handle == "handle-1"
        assert messages[0].receive_count == 3

    def test_receive_messages_does_not_long_poll(self):
        """Test receive_messages requests zero wait time and the given lease."""
        mock_boto_client = MagicMock()
        mock_boto_client.receive_message.return_value = {}

        client = SQSClient(mock_boto_client, QUEUE_URL)
        client.receive_messages(max_messages=5, visibility_timeout=120)

        mock_boto_client.receive_message.assert_called_once_with(
            QueueUrl=QUEUE_URL,
            MaxNumberOfMessages=5,
            WaitTimeSeconds=0,
            VisibilityTimeout=120,
            AttributeNames=["ApproximateReceiveCount"],
        )

    def test_receive_messages_empty(self):
        """Test receive_messages returns empty list when no messages."""
        mock_boto_client = MagicMock()
        mock_boto_client.receive_message.return_value = {}

        client = SQSClient(mock_boto_client, QUEUE_URL)

        assert client.receive_messages() == []

    def test_receive_messages_missing_receive_count(self):
        """Test receive_count defaults to 0 without attributes."""
        mock_boto_client = MagicMock()
        mock_boto_client.receive_message.return_value = {
            "Messages": [{"MessageId": "id-1", "Body": "x", "ReceiptHandle": "h"}]
        }

        client = SQSClient(mock_boto_client, QUEUE_URL)

        assert client.receive_messages()[0].receive_count == 0

    def test_receive_messages_client_error(self):
        """Test receive_messages raises SourceUnavailable on service errors."""
        mock_boto_client = MagicMock()
        mock_boto_client.receive_message.side_effect = _client_error(
            "AccessDenied", operation="ReceiveMessage"
        )

        client = SQSClient(mock_boto_client, QUEUE_URL)

        with pytest.raises(SourceUnavailable):
            client.receive_messages()

    def test_receive_messages_connection_error(self):
        """Test receive_messages raises SourceUnavailable on transport errors."""
        mock_boto_client = MagicMock()
        mock_boto_client.receive_message.side_effect = EndpointConnectionError(
            endpoint_url=QUEUE_URL
        )

        client = SQSClient(mock_boto_client, QUEUE_URL)

        with pytest.raises(SourceUnavailable):
            client.receive_messages()

    @pytest.mark.parametrize("max_messages", [0, 11])
    def test_receive_messages_rejects_batch_size(self, max_messages):
        """Test receive_messages only accepts 1-10 messages."""
        client = SQSClient(MagicMock(), QUEUE_URL)

        with pytest.raises(ValueError):
            client.receive_messages(max_messages=max_messages)

    def test_delete_message_success(self):
        """Test delete_message succeeds."""
        mock_boto_client = MagicMock()

        client = SQSClient(mock_boto_client, QUEUE_URL)
        result = client.delete_message("test-handle")

        assert result is True
        mock_boto_client.delete_message.assert_called_once_with(
            QueueUrl=QUEUE_URL,
            ReceiptHandle="test-handle",
        )

    def test_delete_message_invalid_handle_is_noop(self):
        """Test deleting an already-invalid handle is not an error."""
        mock_boto_client = MagicMock()
        mock_boto_client.delete_message.side_effect = _client_error(
            "ReceiptHandleIsInvalid"
        )

        client = SQSClient(mock_boto_client, QUEUE_URL)

        assert client.delete_message("test-handle") is False

    def test_delete_message_expired_handle_is_noop(self):
        """Test an expired handle reported as InvalidParameterValue is not an error."""
        mock_boto_client = MagicMock()
        mock_boto_client.delete_message.side_effect = _client_error(
            "InvalidParameterValue",
            "Value x for parameter ReceiptHandle is invalid. Reason: The receipt handle has expired.",
        )

        client = SQSClient(mock_boto_client, QUEUE_URL)

        assert client.delete_message("test-handle") is False

    def test_delete_message_twice(self):
        """Test deleting the same handle twice does not raise."""
        mock_boto_client = MagicMock()
        mock_boto_client.delete_message.side_effect = [
            None,
            _client_error("ReceiptHandleIsInvalid"),
        ]

        client = SQSClient(mock_boto_client, QUEUE_URL)

        assert client.delete_message("test-handle") is True
        assert client.delete_message("test-handle") is False

    def test_delete_message_invalid_handle_strict(self):
        """Test missing_ok=False surfaces InvalidReceiptHandle."""
        mock_boto_client = MagicMock()
        mock_boto_client.delete_message.side_effect = _client_error(
            "ReceiptHandleIsInvalid"
        )

        client = SQSClient(mock_boto_client, QUEUE_URL)

        with pytest.raises(InvalidReceiptHandle):
            client.delete_message("test-handle", missing_ok=False)

    def test_delete_message_failure(self):
        """Test delete_message raises SourceUnavailable on other errors."""
        mock_boto_client = MagicMock()
        mock_boto_client.delete_message.side_effect = _client_error("AccessDenied")

        client = SQSClient(mock_boto_client, QUEUE_URL)

        with pytest.raises(SourceUnavailable):
            client.delete_message("test-handle")

    def test_queue_url_property(self):
        """Test queue_url property returns the configured URL."""
        assert SQSClient(MagicMock(), QUEUE_URL).queue_url == QUEUE_URL


class TestAzureQueueClient:
    """Tests for AzureQueueClient."""

    def test_ensure_exists_creates_queue(self):
        """Test ensure_exists creates the queue."""
        mock_sdk_client = MagicMock()

        client = AzureQueueClient(mock_sdk_client)
        client.ensure_exists()

        mock_sdk_client.create_queue.assert_called_once()

    def test_ensure_exists_already_exists(self):
        """Test ensure_exists treats an existing queue as success."""
        mock_sdk_client = MagicMock()
        mock_sdk_client.create_queue.side_effect = ResourceExistsError("exists")

        client = AzureQueueClient(mock_sdk_client)
        client.ensure_exists()

        mock_sdk_client.create_queue.assert_called_once()

    def test_ensure_exists_is_memoized(self):
        """Test ensure_exists only calls the service once per client."""
        mock_sdk_client = MagicMock()

        client = AzureQueueClient(mock_sdk_client)
        client.ensure_exists()
        client.ensure_exists()

        assert mock_sdk_client.create_queue.call_count == 1

    def test_ensure_exists_failure(self):
        """Test ensure_exists raises SinkUnavailable and retries next time."""
        mock_sdk_client = MagicMock()
        mock_sdk_client.create_queue.side_effect = [
            ServiceRequestError("connection refused"),
            None,
        ]

        client = AzureQueueClient(mock_sdk_client)

        with pytest.raises(SinkUnavailable):
            client.ensure_exists()

        client.ensure_exists()
        assert mock_sdk_client.create_queue.call_count == 2

    def test_send_base64_encodes_payload(self):
        """Test send transmits the base64 form of the exact bytes."""
        mock_sdk_client = MagicMock()
        body = b'  {"a": "\xc3\xa9"}\n'

        client = AzureQueueClient(mock_sdk_client)
        client.send(body)

        sent = mock_sdk_client.send_message.call_args.args[0]
        assert sent == base64.b64encode(body).decode("ascii")
        assert base64.b64decode(sent) == body

    def test_send_payload_too_large(self):
        """Test send rejects oversized payloads without calling the service."""
        mock_sdk_client = MagicMock()

        client = AzureQueueClient(mock_sdk_client, max_message_size=8)

        with pytest.raises(PayloadTooLarge) as exc_info:
            client.send(b"0123456789")

        assert exc_info.value.size == 16
        assert exc_info.value.limit == 8
        mock_sdk_client.send_message.assert_not_called()

    def test_send_payload_rejected_by_service(self):
        """Test a 413 from the service maps to PayloadTooLarge."""
        mock_sdk_client = MagicMock()
        error = HttpResponseError(message="Request body too large")
        error.status_code = 413
        mock_sdk_client.send_message.side_effect = error

        client = AzureQueueClient(mock_sdk_client)

        with pytest.raises(PayloadTooLarge):
            client.send(b"payload")

    def test_send_failure(self):
        """Test send raises SinkUnavailable on transport errors."""
        mock_sdk_client = MagicMock()
        mock_sdk_client.send_message.side_effect = ServiceRequestError("timeout")

        client = AzureQueueClient(mock_sdk_client)

        with pytest.raises(SinkUnavailable):
            client.send(b"payload")

    def test_send_auth_failure(self):
        """Test send raises SinkUnavailable on auth errors."""
        mock_sdk_client = MagicMock()
        error = HttpResponseError(message="Forbidden")
        error.status_code = 403
        mock_sdk_client.send_message.side_effect = error

        client = AzureQueueClient(mock_sdk_client)

        with pytest.raises(SinkUnavailable):
            client.send(b"payload")


class TestDependenciesContainer:
    """Tests for DependenciesContainer wiring."""

    def _config(self, **overrides) -> Config:
        values = dict(
            aws_access_key="key",
            aws_secret_key="secret",
            aws_region="eu-west-1",
            sqs_queue_url=QUEUE_URL,
            azure_connection_string="UseDevelopmentStorage=true",
            azure_queue_name="bridge-queue",
        )
        values.update(overrides)
        return Config(**values)

    @patch("queue_bridge.infrastructure.dependency_injection.QueueClient")
    @patch("queue_bridge.infrastructure.dependency_injection.boto3")
    def test_wires_clients_from_config(self, mock_boto3, mock_queue_client):
        """Test the container builds clients from the given config."""
        container = DependenciesContainer(config=self._config())

        sqs_client = container.sqs_client()
        azure_client = container.azure_queue_client()

        assert sqs_client.queue_url == QUEUE_URL
        assert isinstance(azure_client, AzureQueueClient)
        mock_boto3.Session.assert_called_once_with(
            aws_access_key_id="key",
            aws_secret_access_key="secret",
            region_name="eu-west-1",
        )
        mock_queue_client.from_connection_string.assert_called_once_with(
            conn_str="UseDevelopmentStorage=true",
            queue_name="bridge-queue",
        )

    @patch("queue_bridge.infrastructure.dependency_injection.QueueClient")
    @patch("queue_bridge.infrastructure.dependency_injection.boto3")
    def test_transfer_loop_is_singleton(self, mock_boto3, mock_queue_client):
        """Test the same TransferLoop and clients are reused."""
        container = DependenciesContainer(config=self._config())

        assert container.transfer_loop() is container.transfer_loop()
        assert container.azure_queue_client() is container.azure_queue_client()

    @patch("queue_bridge.infrastructure.dependency_injection.QueueClient")
    @patch("queue_bridge.infrastructure.dependency_injection.boto3")
    def test_assumes_role_without_key_pair(self, mock_boto3, mock_queue_client):
        """Test the session assumes the configured role when no keys are set."""
        mock_sts = MagicMock()
        mock_sts.assume_role.return_value = {
            "Credentials": {
                "AccessKeyId": "AK",
                "SecretAccessKey": "SK",
                "SessionToken": "TOKEN",
            }
        }
        mock_boto3.client.return_value = mock_sts

        container = DependenciesContainer(
            config=self._config(
                aws_access_key="",
                aws_secret_key="",
                aws_role_arn="arn:aws:iam::123456789012:role/bridge",
            )
        )
        container.session()

        mock_sts.assume_role.assert_called_once_with(
            RoleArn="arn:aws:iam::123456789012:role/bridge",
            RoleSessionName="queue-bridge",
        )
        mock_boto3.Session.assert_called_once_with(
            aws_access_key_id="AK",
            aws_secret_access_key="SK",
            aws_session_token="TOKEN",
            region_name="eu-west-1",
        )

    @patch("queue_bridge.infrastructure.dependency_injection.QueueClient")
    @patch("queue_bridge.infrastructure.dependency_injection.boto3")
    def test_no_cloudwatch_without_namespace(self, mock_boto3, mock_queue_client):
        """Test metrics stay log-only when no namespace is configured."""
        container = DependenciesContainer(config=self._config())

        assert container.cloudwatch_boto_client() is None
        assert container.metrics_publisher().enabled is False
