"""Application settings from environment variables.

All variables use the ``HOSTPROBE_`` prefix.
"""

import logging
import os
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

ENV_PREFIX = "HOSTPROBE_"


@dataclass
class Settings:
    """Application settings from environment.

    Handles parsing, validation, and defaults for all env vars.
    """

    # Per-command timeout applied by the MCP tools
    command_timeout: int = field(default=30)

    # Connection pool
    idle_timeout: int = field(default=60)
    max_pool_size: int = field(default=100)
    connect_timeout: int = field(default=10)

    # Transport
    transport: str = field(default="http")
    http_host: str = field(default="0.0.0.0")
    http_port: int = field(default=8000)

    # Logging
    log_level: str = field(default="INFO")
    log_payloads: bool = field(default=False)
    slow_threshold_ms: int = field(default=1000)
    include_traceback: bool = field(default=False)

    # Default retry policy for the run tool
    retry_count: int = field(default=0)
    retry_delay: float = field(default=1.0)

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from environment variables.

        Returns:
            Settings instance with values from environment
        """
        return cls(
            command_timeout=cls._get_int("COMMAND_TIMEOUT", 30),
            idle_timeout=cls._get_int("IDLE_TIMEOUT", 60),
            max_pool_size=cls._get_int("MAX_POOL_SIZE", 100),
            connect_timeout=cls._get_int("CONNECT_TIMEOUT", 10),
            transport=cls._get_transport(),
            http_host=os.getenv(f"{ENV_PREFIX}HTTP_HOST", "0.0.0.0"),
            http_port=cls._get_int("HTTP_PORT", 8000),
            log_level=os.getenv(f"{ENV_PREFIX}LOG_LEVEL", "INFO").upper(),
            log_payloads=cls._get_bool("LOG_PAYLOADS", False),
            slow_threshold_ms=cls._get_int("SLOW_THRESHOLD_MS", 1000),
            include_traceback=cls._get_bool("INCLUDE_TRACEBACK", False),
            retry_count=cls._get_int("RETRY_COUNT", 0),
            retry_delay=cls._get_float("RETRY_DELAY", 1.0),
        )

    @staticmethod
    def _get_int(name: str, default: int) -> int:
        """Get a non-negative integer from ``HOSTPROBE_<name>``."""
        key = f"{ENV_PREFIX}{name}"
        value = os.getenv(key)
        if value is None:
            return default

        try:
            parsed = int(value)
        except ValueError:
            logger.warning("Invalid int for %s: %s, using default %d", key, value, default)
            return default
        if parsed < 0:
            logger.warning("Negative value for %s: %d, using default %d", key, parsed, default)
            return default
        return parsed

    @staticmethod
    def _get_float(name: str, default: float) -> float:
        key = f"{ENV_PREFIX}{name}"
        value = os.getenv(key)
        if value is None:
            return default

        try:
            return max(float(value), 0.0)
        except ValueError:
            logger.warning("Invalid float for %s: %s, using default %s", key, value, default)
            return default

    @staticmethod
    def _get_bool(name: str, default: bool) -> bool:
        """Get boolean from ``HOSTPROBE_<name>``."""
        value = os.getenv(f"{ENV_PREFIX}{name}")
        if value is None:
            return default
        return value.lower() in ("1", "true", "yes", "on")

    @staticmethod
    def _get_transport() -> str:
        """Get transport ("http" or "stdio"), defaulting to http."""
        transport = os.getenv(f"{ENV_PREFIX}TRANSPORT", "").lower()
        if transport in ("http", "stdio"):
            return transport
        return "http"
