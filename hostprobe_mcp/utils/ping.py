"""TCP reachability checks for configured hosts."""

import asyncio
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from hostprobe_mcp.models import SSHHost


async def check_host_online(hostname: str, port: int, timeout: float = 2.0) -> bool:
    """Check whether a TCP connection to ``hostname:port`` can be opened.

    Args:
        hostname: Host to check
        port: Port to connect to, normally the SSH port
        timeout: Connection timeout in seconds

    Returns:
        True if the port accepted a connection
    """
    try:
        _, writer = await asyncio.wait_for(
            asyncio.open_connection(hostname, port),
            timeout=timeout,
        )
    except (TimeoutError, OSError):
        return False
    writer.close()
    await writer.wait_closed()
    return True


async def check_hosts_online(
    hosts: dict[str, "SSHHost"],
    timeout: float = 2.0,
) -> dict[str, bool]:
    """Check the SSH port of several hosts concurrently.

    Localhost entries are reported online without a connection attempt.

    Returns:
        Mapping of host name to reachability
    """
    names = [name for name, host in hosts.items() if not host.is_localhost]
    results = await asyncio.gather(
        *(
            check_host_online(hosts[name].connection_hostname, hosts[name].port, timeout)
            for name in names
        )
    )
    status = {name: True for name, host in hosts.items() if host.is_localhost}
    status.update(zip(names, results))
    return status
