"""Service control through the host's init system templates."""

import logging
import re
from typing import TYPE_CHECKING

from hostprobe_mcp.models import ExecOptions, InitSystemInfo, InitSystemKind
from hostprobe_mcp.services.executors import check, run_with_options
from hostprobe_mcp.utils.shell import quote_arg, render_template
from hostprobe_mcp.utils.validation import (
    PolicyError,
    is_single_placeholder_template,
    validate_name,
)

if TYPE_CHECKING:
    from hostprobe_mcp.models import Facts
    from hostprobe_mcp.protocols import Connector

logger = logging.getLogger(__name__)


def _init_system(facts: "Facts") -> InitSystemInfo:
    if facts.init_system is None:
        raise PolicyError(f"no supported init system detected on {facts.hostname}")
    return facts.init_system


def _service_command(facts: "Facts", field: str, name: str, action: str) -> str:
    """Render one init system template for a service.

    Raises:
        PolicyError: If the init system lacks a usable template for the action
    """
    init = _init_system(facts)
    name = validate_name(name, "service name")
    template = getattr(init, field)
    if not is_single_placeholder_template(template):
        raise PolicyError(
            f"{action} is not reliably supported for init system "
            f"'{init.kind.value}' on {facts.hostname}"
        )
    return render_template(template, name)


async def _run_service(
    conn: "Connector", facts: "Facts", field: str, name: str, action: str
) -> None:
    command = _service_command(facts, field, name, action)
    await run_with_options(conn, command, ExecOptions(sudo=True))
    logger.info("%s %s on %s", action, name, facts.hostname)


async def start_service(conn: "Connector", facts: "Facts", name: str) -> None:
    """Start a service."""
    await _run_service(conn, facts, "start_cmd", name, "start")


async def stop_service(conn: "Connector", facts: "Facts", name: str) -> None:
    """Stop a service."""
    await _run_service(conn, facts, "stop_cmd", name, "stop")


async def restart_service(conn: "Connector", facts: "Facts", name: str) -> None:
    """Restart a service."""
    await _run_service(conn, facts, "restart_cmd", name, "restart")


async def enable_service(conn: "Connector", facts: "Facts", name: str) -> None:
    """Enable a service at boot.

    Raises:
        PolicyError: On init systems without a usable enable template; no
            command is sent in that case
    """
    await _run_service(conn, facts, "enable_cmd", name, "enable")


async def disable_service(conn: "Connector", facts: "Facts", name: str) -> None:
    """Disable a service at boot."""
    await _run_service(conn, facts, "disable_cmd", name, "disable")


async def is_service_active(conn: "Connector", facts: "Facts", name: str) -> bool:
    """Check whether a service is running. A non-zero exit means inactive."""
    command = _service_command(facts, "is_active_cmd", name, "status")
    return await check(conn, command)


async def is_service_enabled(conn: "Connector", facts: "Facts", name: str) -> bool:
    """Check whether a service starts at boot."""
    init = _init_system(facts)
    name = validate_name(name, "service name")
    if init.kind is InitSystemKind.SYSTEMD:
        return await check(conn, f"systemctl is-enabled --quiet {quote_arg(name)}")
    pattern = quote_arg(f"/S[0-9]+{re.escape(name)}$")
    return await check(conn, f"ls /etc/rc?.d/S* 2>/dev/null | grep -qE {pattern}")


async def daemon_reload(conn: "Connector", facts: "Facts") -> None:
    """Reload init system unit definitions. A no-op when there is nothing to reload."""
    init = _init_system(facts)
    if not init.daemon_reload_cmd:
        logger.debug("daemon-reload not needed for %s", init.kind.value)
        return
    await run_with_options(conn, init.daemon_reload_cmd, ExecOptions(sudo=True))
