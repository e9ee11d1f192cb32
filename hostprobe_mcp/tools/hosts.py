"""MCP tools exposing host facts and the idempotent primitives.

Handlers never raise for expected failures: they return an ``Error: ...``
string naming the innermost cause and, when one ran, the remote command.
"""

import asyncio
import json
import logging

from hostprobe_mcp.models import CommandError
from hostprobe_mcp.services import (
    daemon_reload,
    disable_service,
    enable_service,
    ensure_mount,
    get_config,
    get_connector,
    get_facts,
    is_mounted,
    is_service_active,
    is_service_enabled,
    restart_service,
    run_in_background,
    run_retry,
    start_service,
    stop_service,
    unmount,
)

logger = logging.getLogger(__name__)

SERVICE_ACTIONS = ("start", "stop", "restart", "enable", "disable", "status", "reload")
MOUNT_ACTIONS = ("status", "ensure", "unmount")


def describe_error(error: BaseException) -> str:
    """Render an error as its deepest cause plus the command that failed."""
    command = None
    deepest = error
    current: BaseException | None = error
    # wait_for chains its TimeoutError onto the CancelledError of the inner task
    while current is not None and not isinstance(current, asyncio.CancelledError):
        if isinstance(current, CommandError) and command is None:
            command = current.command
        deepest = current
        current = current.__cause__

    text = str(deepest) or type(deepest).__name__
    if command and command not in text:
        return f"Error: {text} (command: {command})"
    return f"Error: {text}"


async def host_facts(host: str, refresh: bool = False) -> str:
    """Probe a host's OS, resources, network and tooling.

    Results are cached per host for the lifetime of the server.

    Args:
        host: Host name from ~/.ssh/config, or "localhost"
        refresh: Discard the cached snapshot and OS identity and probe again

    Returns:
        JSON object describing the host, or an error message
    """
    timeout = get_config().settings.command_timeout
    try:
        facts = await asyncio.wait_for(get_facts(host, refresh=refresh), timeout=timeout)
    except Exception as e:
        logger.warning("host_facts failed for %s: %s", host, e)
        return describe_error(e)
    return json.dumps(facts.to_dict(), indent=2)


async def service(host: str, name: str, action: str = "status") -> str:
    """Control a service through the host's init system.

    Args:
        host: Host name from ~/.ssh/config, or "localhost"
        name: Service name (ignored for "reload")
        action: One of start, stop, restart, enable, disable, status, reload

    Returns:
        Outcome description, or an error message
    """
    if action not in SERVICE_ACTIONS:
        return f"Error: Unknown action '{action}'. Use one of: {', '.join(SERVICE_ACTIONS)}"

    timeout = get_config().settings.command_timeout
    try:
        facts = await asyncio.wait_for(get_facts(host), timeout=timeout)
        conn = get_connector(host)

        if action == "status":
            active, enabled = await asyncio.wait_for(
                asyncio.gather(
                    is_service_active(conn, facts, name),
                    is_service_enabled(conn, facts, name),
                ),
                timeout=timeout,
            )
            return (
                f"{name} on {host}: {'active' if active else 'inactive'}, "
                f"{'enabled' if enabled else 'disabled'}"
            )

        if action == "reload":
            await asyncio.wait_for(daemon_reload(conn, facts), timeout=timeout)
            return f"Reloaded init system on {host}"

        operation = {
            "start": start_service,
            "stop": stop_service,
            "restart": restart_service,
            "enable": enable_service,
            "disable": disable_service,
        }[action]
        await asyncio.wait_for(operation(conn, facts, name), timeout=timeout)
    except Exception as e:
        logger.warning("service %s %s failed on %s: %s", action, name, host, e)
        return describe_error(e)

    return f"{action} {name} on {host}: ok"


async def mount(
    host: str,
    mount_point: str,
    action: str = "status",
    device: str = "",
    fs_type: str = "",
    options: str = "",
    persistent: bool = False,
    force: bool = False,
) -> str:
    """Inspect or converge a mount point.

    Args:
        host: Host name from ~/.ssh/config, or "localhost"
        mount_point: Absolute path of the mount target
        action: "status", "ensure" (mount if needed) or "unmount"
        device: Device or export to mount (ensure only)
        fs_type: Filesystem type (ensure only)
        options: Comma separated mount options (ensure only)
        persistent: Also record the mount in /etc/fstab (ensure only)
        force: Force the unmount (unmount only)

    Returns:
        Outcome description, or an error message
    """
    if action not in MOUNT_ACTIONS:
        return f"Error: Unknown action '{action}'. Use one of: {', '.join(MOUNT_ACTIONS)}"

    timeout = get_config().settings.command_timeout
    try:
        conn = get_connector(host)
        if action == "status":
            mounted = await asyncio.wait_for(is_mounted(conn, mount_point), timeout=timeout)
            return f"{mount_point} on {host}: {'mounted' if mounted else 'not mounted'}"

        if action == "unmount":
            await asyncio.wait_for(unmount(conn, mount_point, force=force), timeout=timeout)
            return f"{mount_point} on {host}: not mounted"

        await asyncio.wait_for(
            ensure_mount(
                conn,
                device,
                mount_point,
                fs_type,
                options=options or None,
                persistent=persistent,
            ),
            timeout=timeout,
        )
    except Exception as e:
        logger.warning("mount %s %s failed on %s: %s", action, mount_point, host, e)
        return describe_error(e)

    return f"{device} mounted on {mount_point} ({host})"


async def run(
    host: str,
    command: str,
    sudo: bool = False,
    retries: int | None = None,
    delay: float | None = None,
    background: bool = False,
) -> str:
    """Run a shell command on a host.

    Args:
        host: Host name from ~/.ssh/config, or "localhost"
        command: Shell command line
        sudo: Run with elevated privileges (passwordless sudo required)
        retries: Extra attempts on failure (default: HOSTPROBE_RETRY_COUNT)
        delay: Seconds between attempts (default: HOSTPROBE_RETRY_DELAY)
        background: Launch detached and return immediately

    Returns:
        Combined stdout/stderr, or an error message
    """
    config = get_config()
    retries = config.settings.retry_count if retries is None else retries
    delay = config.settings.retry_delay if delay is None else delay

    try:
        conn = get_connector(host)
        if background:
            await asyncio.wait_for(
                run_in_background(conn, command, sudo=sudo),
                timeout=config.settings.command_timeout,
            )
            return f"Started in background on {host}"

        # One timeout per attempt plus the waits between them
        attempts = 1 + max(retries, 0)
        output = await asyncio.wait_for(
            run_retry(conn, command, sudo=sudo, retries=retries, delay=delay),
            timeout=config.settings.command_timeout * attempts + delay * (attempts - 1),
        )
    except Exception as e:
        logger.warning("run failed on %s: %s", host, e)
        return describe_error(e)

    return output or "(no output)"
