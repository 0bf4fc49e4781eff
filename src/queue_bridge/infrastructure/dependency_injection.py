"""Dependency injection container for the bridge."""

import boto3
from azure.storage.queue import QueueClient
from dependency_injector import providers
from dependency_injector.containers import DeclarativeContainer

from queue_bridge.config import Config
from queue_bridge.infrastructure.azure_queue_client import AzureQueueClient
from queue_bridge.infrastructure.sqs_client import SQSClient


def _create_session(config: Config) -> boto3.Session:
    """Create boto3 session from a key pair, or by assuming the configured role."""
    if config.aws_access_key:
        return boto3.Session(
            aws_access_key_id=config.aws_access_key,
            aws_secret_access_key=config.aws_secret_key,
            region_name=config.aws_region,
        )

    sts = boto3.client("sts", region_name=config.aws_region)
    assumed = sts.assume_role(RoleArn=config.aws_role_arn, RoleSessionName="queue-bridge")
    credentials = assumed["Credentials"]

    return boto3.Session(
        aws_access_key_id=credentials["AccessKeyId"],
        aws_secret_access_key=credentials["SecretAccessKey"],
        aws_session_token=credentials["SessionToken"],
        region_name=config.aws_region,
    )


def _create_cloudwatch_client(session: boto3.Session, config: Config):
    """CloudWatch client, or None when no metrics namespace is configured."""
    if not config.metrics_namespace:
        return None
    return session.client("cloudwatch")


def _create_metrics_publisher(cloudwatch_client, config: Config):
    """Factory for MetricsPublisher to avoid circular import."""
    from queue_bridge.services.metrics_publisher import MetricsPublisher

    return MetricsPublisher(
        cloudwatch_client=cloudwatch_client,
        namespace=config.metrics_namespace,
        queue_name=config.azure_queue_name,
    )


def _create_transfer_loop(source, sink, metrics, config: Config):
    """Factory for TransferLoop to avoid circular import."""
    from queue_bridge.services.transfer_loop import TransferLoop

    return TransferLoop(
        source=source,
        sink=sink,
        metrics=metrics,
        max_batch_size=config.max_batch_size,
        visibility_timeout=config.visibility_timeout,
        poison_receive_threshold=config.poison_receive_threshold,
    )


class DependenciesContainer(DeclarativeContainer):
    """DI container for the bridge. Every client is built once per container."""

    config = providers.Dependency(instance_of=Config)

    session = providers.Singleton(_create_session, config=config)

    # Source (SQS) dependency chain
    sqs_boto_client = providers.Singleton(
        lambda session: session.client("sqs"),
        session=session,
    )

    sqs_client = providers.Singleton(
        lambda client, config: SQSClient(client, config.sqs_queue_url),
        client=sqs_boto_client,
        config=config,
    )

    # Sink (Azure Storage Queue) dependency chain
    azure_sdk_client = providers.Singleton(
        lambda config: QueueClient.from_connection_string(
            conn_str=config.azure_connection_string,
            queue_name=config.azure_queue_name,
        ),
        config=config,
    )

    azure_queue_client = providers.Singleton(
        AzureQueueClient,
        client=azure_sdk_client,
    )

    # Metrics
    cloudwatch_boto_client = providers.Singleton(
        _create_cloudwatch_client,
        session=session,
        config=config,
    )

    metrics_publisher = providers.Singleton(
        _create_metrics_publisher,
        cloudwatch_client=cloudwatch_boto_client,
        config=config,
    )

    transfer_loop = providers.Singleton(
        _create_transfer_loop,
        source=sqs_client,
        sink=azure_queue_client,
        metrics=metrics_publisher,
        config=config,
    )
