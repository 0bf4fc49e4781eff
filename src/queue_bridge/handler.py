"""Scheduled function handler for the SQS to Azure queue bridge.

Triggered on a fixed schedule (every minute in the reference deployment).
Relays one batch from the SQS queue to the Azure Storage Queue per invocation.
"""

import json
import logging

from queue_bridge.app import BridgeApp
from queue_bridge.models.schemas import TransferSummary

# Configure root logger for the function host (all modules will inherit this)
logging.getLogger().setLevel(logging.INFO)
logger = logging.getLogger(__name__)

# Built once per process so queue clients are reused across invocations
app = BridgeApp()


def lambda_handler(event: dict, context) -> dict:
    """
    Handler function triggered by the scheduler.

    Args:
        event: Scheduled event data.
        context: Function context object.

    Returns:
        Response dict with statusCode and body.
    """
    logger.info("Received scheduled event: %s", json.dumps(event))

    try:
        summary = app.invoke()

        response_body = {
            "message": "Bridge run completed",
            **summary.to_dict(),
        }

        return {
            "statusCode": 200,
            "body": json.dumps(response_body),
        }

    except Exception as e:
        logger.exception("Bridge run failed: %s", e)
        summary = getattr(e, "summary", None) or TransferSummary(error=str(e))
        return {
            "statusCode": 500,
            "body": json.dumps({**summary.to_dict(), "error": str(e)}),
        }
