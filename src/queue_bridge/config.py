"""Configuration management for the queue bridge."""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from queue_bridge.exceptions import ConfigurationError

# Load .env if exists (local dev only, no-op in the function host)
load_dotenv()

logger = logging.getLogger(__name__)

# SQS hard limit for ReceiveMessage
MAX_RECEIVE_BATCH = 10


def _load_json_config(filename: str) -> dict:
    """Load configuration from JSON file in .config directory."""
    config_path = Path(__file__).parent.parent.parent / ".config" / filename
    if config_path.exists():
        with open(config_path, "r") as f:
            return json.load(f)
    return {}


def _get_config(key: str, default: str = "", file_config: dict | None = None) -> str:
    """Get config value with priority: env var > json config > default."""
    env_value = os.getenv(key.upper())
    if env_value:  # Treat empty string as missing
        return env_value

    if file_config and key.lower() in file_config:
        return str(file_config[key.lower()])

    return default


def _get_int(key: str, default: int, file_config: dict | None, invalid: list[str]) -> int:
    """Parse an integer setting, recording unparsable values instead of raising."""
    raw = _get_config(key, str(default), file_config)
    try:
        return int(raw)
    except ValueError:
        invalid.append(f"{key}={raw}")
        return default


def _get_bool(key: str, default: bool, file_config: dict | None = None) -> bool:
    value = _get_config(key, str(default), file_config).lower()
    return value in ("true", "1", "yes", "on")


@dataclass(frozen=True)
class Config:
    """Bridge configuration, read fresh at the start of every invocation."""

    # Source (SQS)
    aws_access_key: str = ""
    aws_secret_key: str = ""
    aws_role_arn: str = ""
    aws_region: str = ""
    sqs_queue_url: str = ""

    # Sink (Azure Storage Queue)
    azure_connection_string: str = ""
    azure_queue_name: str = ""

    # Run gate
    enabled: bool = True

    # Transfer loop
    max_batch_size: int = MAX_RECEIVE_BATCH
    visibility_timeout: int = 180
    run_interval_seconds: int = 60
    poison_receive_threshold: int = 5

    # Metrics
    metrics_namespace: str = ""

    # Unparsable settings, reported by validate() once the gate is open
    invalid: tuple[str, ...] = ()

    @classmethod
    def from_env(cls, config_file: str = "config.dev.json") -> "Config":
        """Build a Config from env vars, falling back to the JSON config file."""
        file_config = _load_json_config(config_file)
        enabled = _get_bool("BRIDGE_ENABLED", True, file_config)
        invalid: list[str] = []

        return cls(
            aws_access_key=_get_config("AWS_ACCESS_KEY", "", file_config),
            aws_secret_key=_get_config("AWS_SECRET_KEY", "", file_config),
            aws_role_arn=_get_config("AWS_ROLE_ARN", "", file_config),
            aws_region=_get_config("AWS_REGION", "", file_config),
            sqs_queue_url=_get_config("SQS_QUEUE_URL", "", file_config),
            azure_connection_string=_get_config(
                "AZURE_STORAGE_CONNECTION_STRING", "", file_config
            ),
            azure_queue_name=_get_config("AZURE_QUEUE_NAME", "", file_config),
            enabled=enabled,
            max_batch_size=_get_int(
                "MAX_BATCH_SIZE", MAX_RECEIVE_BATCH, file_config, invalid
            ),
            visibility_timeout=_get_int("VISIBILITY_TIMEOUT", 180, file_config, invalid),
            run_interval_seconds=_get_int(
                "RUN_INTERVAL_SECONDS", 60, file_config, invalid
            ),
            poison_receive_threshold=_get_int(
                "POISON_RECEIVE_THRESHOLD", 5, file_config, invalid
            ),
            metrics_namespace=_get_config("METRICS_NAMESPACE", "", file_config),
            invalid=tuple(invalid),
        )

    def validate(self) -> None:
        """Validate required configuration.

        Raises:
            ConfigurationError: Naming every missing or invalid setting.
        """
        missing = []

        if bool(self.aws_access_key) != bool(self.aws_secret_key):
            missing.append("AWS_SECRET_KEY" if self.aws_access_key else "AWS_ACCESS_KEY")
        elif not self.aws_access_key and not self.aws_role_arn:
            missing.append("AWS_ACCESS_KEY/AWS_SECRET_KEY or AWS_ROLE_ARN")

        required = {
            "AWS_REGION": self.aws_region,
            "SQS_QUEUE_URL": self.sqs_queue_url,
            "AZURE_STORAGE_CONNECTION_STRING": self.azure_connection_string,
            "AZURE_QUEUE_NAME": self.azure_queue_name,
        }
        missing.extend(key for key, value in required.items() if not value)

        if missing:
            raise ConfigurationError(
                f"Missing required configuration: {', '.join(missing)}",
                missing=missing,
            )

        if self.invalid:
            raise ConfigurationError(
                f"Invalid integer configuration: {', '.join(self.invalid)}"
            )

        if not 1 <= self.max_batch_size <= MAX_RECEIVE_BATCH:
            raise ConfigurationError(
                f"MAX_BATCH_SIZE must be between 1 and {MAX_RECEIVE_BATCH}, "
                f"got {self.max_batch_size}"
            )

        if self.visibility_timeout <= 0:
            raise ConfigurationError(
                f"VISIBILITY_TIMEOUT must be positive, got {self.visibility_timeout}"
            )

        if self.visibility_timeout < 2 * self.run_interval_seconds:
            logger.warning(
                "VISIBILITY_TIMEOUT (%ds) is less than twice the run interval (%ds); "
                "overlapping runs may receive the same message",
                self.visibility_timeout,
                self.run_interval_seconds,
            )
