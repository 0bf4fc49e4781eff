"""Run a single bridge pass outside the function host.

Reads settings from the env file at BRIDGE_DOTENV_PATH (default /app/.env),
relays one batch from SQS to the Azure queue and prints the run summary.
"""

import json
import logging
import os
from datetime import datetime, timezone

from dotenv import load_dotenv

load_dotenv(os.getenv("BRIDGE_DOTENV_PATH", "/app/.env"))

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

from queue_bridge.handler import lambda_handler

if __name__ == "__main__":
    event = {
        "source": "queue-bridge.manual",
        "detail-type": "Scheduled Event",
        "time": datetime.now(timezone.utc).isoformat(),
    }
    response = lambda_handler(event, None)
    print(json.dumps(response, indent=2))
    raise SystemExit(0 if response["statusCode"] == 200 else 1)
