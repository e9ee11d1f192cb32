"""Global state management for hostprobe MCP.

Holds the process-wide config and connection pool, plus one connector and
one facts snapshot per host so that probing happens once per session.
"""

from typing import TYPE_CHECKING

from hostprobe_mcp.config import Config
from hostprobe_mcp.services.pool import ConnectionPool

if TYPE_CHECKING:
    from hostprobe_mcp.models import Facts
    from hostprobe_mcp.protocols import Connector

# Global state (initialized on first access)
_config: Config | None = None
_pool: ConnectionPool | None = None
_connectors: dict[str, "Connector"] = {}
_facts: dict[str, "Facts"] = {}


def get_config() -> Config:
    """Get or create config."""
    global _config
    if _config is None:
        _config = Config.from_env()
    return _config


def get_pool() -> ConnectionPool:
    """Get or create connection pool."""
    global _pool
    if _pool is None:
        _pool = ConnectionPool(**get_config().pool_options())
    return _pool


def get_cached_connector(host: str) -> "Connector | None":
    """Return the connector previously created for a host."""
    return _connectors.get(host)


def cache_connector(host: str, conn: "Connector") -> None:
    """Remember the connector for a host."""
    _connectors[host] = conn


def get_cached_facts(host: str) -> "Facts | None":
    """Return the facts snapshot gathered earlier for a host."""
    return _facts.get(host)


def cache_facts(host: str, facts: "Facts") -> None:
    """Store a facts snapshot for a host, replacing any older one."""
    _facts[host] = facts


def forget_facts(host: str) -> None:
    """Drop a host's facts snapshot so the next request probes again."""
    _facts.pop(host, None)


def reset_state() -> None:
    """Reset global state for testing.

    Clears the singletons and per-host caches so tests start fresh.
    Should only be used in test fixtures.
    """
    global _config, _pool
    _config = None
    _pool = None
    _connectors.clear()
    _facts.clear()


def set_config(config: Config) -> None:
    """Set the global config instance.

    Allows tests to inject a custom config without modifying module internals.
    """
    global _config
    _config = config


def set_pool(pool: ConnectionPool) -> None:
    """Set the global pool instance."""
    global _pool
    _pool = pool
