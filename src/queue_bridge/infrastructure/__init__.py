"""Infrastructure package."""

from queue_bridge.infrastructure.azure_queue_client import AzureQueueClient
from queue_bridge.infrastructure.dependency_injection import DependenciesContainer
from queue_bridge.infrastructure.sqs_client import SQSClient

__all__ = [
    "AzureQueueClient",
    "DependenciesContainer",
    "SQSClient",
]
