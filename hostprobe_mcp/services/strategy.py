"""Package manager and init system selection."""

import logging
from typing import TYPE_CHECKING

from hostprobe_mcp.models import (
    APT,
    DNF,
    SYSTEMD,
    SYSV,
    YUM,
    InitSystemInfo,
    OSInfo,
    PackageManagerInfo,
)

if TYPE_CHECKING:
    from hostprobe_mcp.protocols import Connector

logger = logging.getLogger(__name__)

DEBIAN_FAMILY = frozenset({"ubuntu", "debian", "raspbian", "linuxmint"})
RHEL_FAMILY = frozenset({"centos", "rhel", "fedora", "almalinux", "rocky"})

# Probe order for hosts whose OS id is not in a known family
_GENERIC_PACKAGE_MANAGERS: tuple[tuple[str, PackageManagerInfo], ...] = (
    ("apt-get", APT),
    ("dnf", DNF),
    ("yum", YUM),
)


class StrategyError(Exception):
    """No supported package manager or init system was found on a host."""

    def __init__(self, concern: str, os_id: str) -> None:
        self.concern = concern
        self.os_id = os_id
        super().__init__(f"no supported {concern} found for os '{os_id}'")


async def detect_package_manager(
    conn: "Connector", os_info: OSInfo
) -> PackageManagerInfo:
    """Select the package manager for a host.

    Debian-family hosts always get apt. RHEL-family hosts get dnf when it is
    installed, otherwise yum. Anything else is probed for apt-get, dnf and
    yum, in that order.

    Args:
        conn: Connector to the host
        os_info: Identity returned by the OS probe

    Returns:
        Command table for the selected package manager

    Raises:
        StrategyError: If no supported package manager is present
    """
    os_id = os_info.id

    if os_id in DEBIAN_FAMILY:
        return APT

    if os_id in RHEL_FAMILY:
        if await conn.look_path("dnf"):
            return DNF
        if await conn.look_path("yum"):
            return YUM
        raise StrategyError("package manager", os_id)

    for executable, info in _GENERIC_PACKAGE_MANAGERS:
        if await conn.look_path(executable):
            logger.debug("Selected %s for unrecognized os '%s'", info.kind.value, os_id)
            return info

    raise StrategyError("package manager", os_id)


async def detect_init_system(conn: "Connector", os_info: OSInfo) -> InitSystemInfo:
    """Select the init system for a host.

    ``systemctl`` on the path means systemd; ``service`` or an
    ``/etc/init.d`` directory means SysV.

    Raises:
        StrategyError: If neither init system is detected
    """
    if await conn.look_path("systemctl"):
        return SYSTEMD
    if await conn.look_path("service"):
        return SYSV

    init_d = await conn.stat("/etc/init.d")
    if init_d.exists and init_d.is_dir:
        return SYSV

    raise StrategyError("init system", os_info.id)
