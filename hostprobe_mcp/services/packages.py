"""Package operations through the host's package manager templates."""

import logging
from typing import TYPE_CHECKING

from hostprobe_mcp.models import (
    CommandError,
    ExecOptions,
    PackageManagerInfo,
    PackageManagerKind,
)
from hostprobe_mcp.services.executors import check, run_with_options
from hostprobe_mcp.utils.shell import render_template
from hostprobe_mcp.utils.validation import PolicyError, validate_name

if TYPE_CHECKING:
    from hostprobe_mcp.models import Facts
    from hostprobe_mcp.protocols import Connector

logger = logging.getLogger(__name__)

DPKG_INSTALLED = "install ok installed"


def _package_manager(facts: "Facts") -> PackageManagerInfo:
    if facts.package_manager is None:
        raise PolicyError(f"no supported package manager detected on {facts.hostname}")
    return facts.package_manager


def _validate_packages(packages: list[str]) -> list[str]:
    names = [validate_name(p, "package name") for p in packages]
    if not names:
        raise PolicyError("no packages given")
    return names


async def install_packages(conn: "Connector", facts: "Facts", packages: list[str]) -> None:
    """Install one or more packages."""
    pm = _package_manager(facts)
    command = render_template(pm.install_cmd, *_validate_packages(packages))
    await run_with_options(conn, command, ExecOptions(sudo=True))
    logger.info("Installed %s on %s", ", ".join(packages), facts.hostname)


async def remove_packages(conn: "Connector", facts: "Facts", packages: list[str]) -> None:
    """Remove one or more packages."""
    pm = _package_manager(facts)
    command = render_template(pm.remove_cmd, *_validate_packages(packages))
    await run_with_options(conn, command, ExecOptions(sudo=True))
    logger.info("Removed %s on %s", ", ".join(packages), facts.hostname)


async def update_package_cache(conn: "Connector", facts: "Facts") -> None:
    """Refresh the package index."""
    await run_with_options(conn, _package_manager(facts).update_cmd, ExecOptions(sudo=True))


async def clean_package_cache(conn: "Connector", facts: "Facts") -> None:
    """Drop cached package downloads."""
    await run_with_options(conn, _package_manager(facts).clean_cmd, ExecOptions(sudo=True))


async def is_package_installed(conn: "Connector", facts: "Facts", package: str) -> bool:
    """Check whether a package is installed.

    dpkg-query also knows about removed-but-configured packages, so apt hosts
    look at the reported status rather than the exit code alone.
    """
    pm = _package_manager(facts)
    command = render_template(pm.query_cmd, validate_name(package, "package name"))

    if pm.kind is not PackageManagerKind.APT:
        return await check(conn, command)

    try:
        stdout, _ = await run_with_options(conn, command, ExecOptions())
    except CommandError:
        return False
    return DPKG_INSTALLED in stdout
