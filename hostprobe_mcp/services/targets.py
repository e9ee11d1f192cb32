"""Resolve MCP host names to connectors."""

import logging

from hostprobe_mcp.models import Facts
from hostprobe_mcp.protocols import Connector
from hostprobe_mcp.services.connectors import LocalConnector, SSHConnector
from hostprobe_mcp.services.facts import gather_facts
from hostprobe_mcp.services.state import (
    cache_connector,
    cache_facts,
    forget_facts,
    get_cached_connector,
    get_cached_facts,
    get_config,
    get_pool,
)
from hostprobe_mcp.utils.validation import PolicyError, validate_host

logger = logging.getLogger(__name__)

LOCAL_TARGETS = frozenset({"localhost", "local"})


def get_connector(host: str) -> Connector:
    """Return the connector for a host, creating it on first use.

    Hosts from the SSH config get an :class:`SSHConnector`; ``localhost`` and
    ``local`` run on this machine unless the SSH config defines them.

    Raises:
        PolicyError: If the host is unknown
    """
    host = validate_host(host)
    cached = get_cached_connector(host)
    if cached is not None:
        return cached

    ssh_host = get_config().get_host(host)
    conn: Connector
    if ssh_host is not None:
        conn = SSHConnector(ssh_host, get_pool())
    elif host.lower() in LOCAL_TARGETS:
        conn = LocalConnector()
    else:
        available = ", ".join(sorted(get_config().get_hosts())) or "none"
        raise PolicyError(f"Unknown host '{host}'. Available: {available}")

    logger.debug("Created %r for %s", conn, host)
    cache_connector(host, conn)
    return conn


async def get_facts(host: str, refresh: bool = False) -> Facts:
    """Return the facts for a host, gathering them once per session.

    Args:
        host: Host name from the SSH config, or localhost
        refresh: Discard any cached snapshot and OS identity and probe again
    """
    if refresh:
        forget_facts(host)
        get_connector(host).forget_os()
    facts = get_cached_facts(host)
    if facts is None:
        facts = await gather_facts(get_connector(host))
        cache_facts(host, facts)
    return facts
