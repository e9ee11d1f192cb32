"""Transport errors and the redial-once connection helper."""

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import asyncssh

    from hostprobe_mcp.models import SSHHost
    from hostprobe_mcp.services.pool import ConnectionPool

logger = logging.getLogger(__name__)


class ConnectionError(Exception):
    """A host could not be reached, or the transport broke mid-command.

    The command either never started or never reported an exit status,
    which is what separates this from :class:`~hostprobe_mcp.models.CommandError`.
    """

    def __init__(self, host_name: str, original_error: BaseException):
        """Initialize connection error.

        Args:
            host_name: Name of the SSH host
            original_error: Transport exception that caused the failure
        """
        self.host_name = host_name
        self.original_error = original_error
        super().__init__(f"Cannot connect to {host_name}: {original_error}")


async def get_connection_with_retry(
    ssh_host: "SSHHost",
    pool: "ConnectionPool | None" = None,
) -> "asyncssh.SSHClientConnection":
    """Get a pooled connection, redialling once if the first attempt fails.

    A failed first attempt usually means the pooled connection went stale,
    so it is dropped before the second dial.

    Raises:
        ConnectionError: If the second attempt fails too
    """
    if pool is None:
        from hostprobe_mcp.services.state import get_pool

        pool = get_pool()

    try:
        return await pool.get_connection(ssh_host)
    except Exception as e:
        logger.warning("Connecting to %s failed (%s), redialling once", ssh_host.name, e)

    await pool.remove_connection(ssh_host.name)
    try:
        conn = await pool.get_connection(ssh_host)
    except Exception as e:
        logger.error("Redial to %s failed: %s", ssh_host.name, e)
        raise ConnectionError(ssh_host.name, e) from e
    logger.info("Redial to %s succeeded", ssh_host.name)
    return conn
