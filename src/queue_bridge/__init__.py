"""Relay messages from an SQS queue to an Azure Storage Queue."""
