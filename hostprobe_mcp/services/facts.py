"""Concurrent host facts collection.

:func:`gather_facts` fans a fixed set of read-only probes out against one
connector and merges them into an immutable :class:`Facts` snapshot.

Ordering:
- The OS probe is load-bearing. If it fails, every sibling task is cancelled
  and the collection fails with that error.
- Hostname and kernel probes do not need the OS identity and start at once.
- Resource and network probes await the OS task before issuing commands, so
  their choice of command is never made against a missing identity.

Each probe task writes only its own field of :class:`_ProbeResults`.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from hostprobe_mcp.models import ExecOptions, Facts, OSInfo
from hostprobe_mcp.services.executors import run_with_options
from hostprobe_mcp.services.strategy import (
    StrategyError,
    detect_init_system,
    detect_package_manager,
)
from hostprobe_mcp.utils.parser import parse_int, parse_route_source

if TYPE_CHECKING:
    from hostprobe_mcp.protocols import Connector

logger = logging.getLogger(__name__)

LINUX_FAMILY = frozenset(
    {
        "linux",
        "ubuntu",
        "debian",
        "centos",
        "rhel",
        "fedora",
        "almalinux",
        "rocky",
        "raspbian",
        "linuxmint",
    }
)

# (command, divisor) pairs; the divisor converts the output to the fact's unit
LINUX_CPU = ("nproc", 1)
DARWIN_CPU = ("sysctl -n hw.ncpu", 1)
LINUX_MEMORY = ("grep MemTotal /proc/meminfo | awk '{print $2}'", 1024)
DARWIN_MEMORY = ("sysctl -n hw.memsize", 1024 * 1024)

IPV4_ROUTE = "ip -4 route get 8.8.8.8"
IPV6_ROUTE = "ip -6 route get 2001:4860:4860::8888"


class FactsError(Exception):
    """Facts could not be collected for a host."""

    pass


@dataclass
class _ProbeResults:
    os: OSInfo | None = None
    hostname: str = ""
    kernel: str = ""
    total_cpu: int = 0
    total_memory: int = 0
    ipv4_default: str = ""
    ipv6_default: str = ""


async def _stdout(conn: "Connector", command: str) -> str:
    stdout, _ = await run_with_options(conn, command, ExecOptions())
    return stdout.strip()


async def _probe_os(conn: "Connector", results: _ProbeResults) -> OSInfo:
    results.os = await conn.get_os()
    return results.os


async def _probe_hostname(conn: "Connector", results: _ProbeResults) -> None:
    try:
        hostname = await _stdout(conn, "hostname -f")
    except Exception as e:
        logger.debug("hostname -f failed on %r, falling back: %s", conn, e)
        hostname = ""
    if not hostname:
        hostname = await _stdout(conn, "hostname")
    results.hostname = hostname


async def _probe_kernel(conn: "Connector", results: _ProbeResults) -> None:
    results.kernel = await _stdout(conn, "uname -r")


async def _first_int(
    conn: "Connector", probes: tuple[tuple[str, int], ...], what: str
) -> int:
    """Return the first probe that yields an integer, or 0 if none does."""
    for command, divisor in probes:
        try:
            return parse_int(await _stdout(conn, command)) // divisor
        except Exception as e:
            logger.debug("%s probe %r failed on %r: %s", what, command, conn, e)
    logger.warning("Could not determine %s on %r, using 0", what, conn)
    return 0


async def _probe_cpu(
    conn: "Connector", os_task: "asyncio.Task[OSInfo]", results: _ProbeResults
) -> None:
    os_info = await asyncio.shield(os_task)
    if os_info.id == "darwin":
        probes = (DARWIN_CPU, LINUX_CPU)
    else:
        probes = (LINUX_CPU, DARWIN_CPU)
    results.total_cpu = await _first_int(conn, probes, "cpu count")


async def _probe_memory(
    conn: "Connector", os_task: "asyncio.Task[OSInfo]", results: _ProbeResults
) -> None:
    os_info = await asyncio.shield(os_task)
    if os_info.id == "darwin":
        probes = (DARWIN_MEMORY, LINUX_MEMORY)
    else:
        probes = (LINUX_MEMORY, DARWIN_MEMORY)
    results.total_memory = await _first_int(conn, probes, "memory")


async def _default_route_source(conn: "Connector", command: str) -> str:
    try:
        return parse_route_source(await _stdout(conn, command))
    except Exception as e:
        logger.debug("Route probe %r failed on %r: %s", command, conn, e)
        return ""


async def _probe_ipv4(
    conn: "Connector", os_task: "asyncio.Task[OSInfo]", results: _ProbeResults
) -> None:
    os_info = await asyncio.shield(os_task)
    if os_info.id in LINUX_FAMILY:
        results.ipv4_default = await _default_route_source(conn, IPV4_ROUTE)


async def _probe_ipv6(
    conn: "Connector", os_task: "asyncio.Task[OSInfo]", results: _ProbeResults
) -> None:
    os_info = await asyncio.shield(os_task)
    if os_info.id in LINUX_FAMILY:
        results.ipv6_default = await _default_route_source(conn, IPV6_ROUTE)


async def gather_facts(conn: "Connector") -> Facts:
    """Probe a host and build its facts snapshot.

    Args:
        conn: Connector to the host; must tolerate concurrent calls

    Returns:
        Fully populated facts. ``package_manager`` and ``init_system`` are
        None when no supported strategy was found.

    Raises:
        FactsError: If the OS, hostname or kernel probe failed
        ConnectionError: If a strategy probe lost the transport
    """
    results = _ProbeResults()

    os_task = asyncio.create_task(_probe_os(conn, results), name="probe-os")
    siblings = [
        asyncio.create_task(_probe_hostname(conn, results), name="probe-hostname"),
        asyncio.create_task(_probe_kernel(conn, results), name="probe-kernel"),
        asyncio.create_task(_probe_cpu(conn, os_task, results), name="probe-cpu"),
        asyncio.create_task(_probe_memory(conn, os_task, results), name="probe-memory"),
        asyncio.create_task(_probe_ipv4(conn, os_task, results), name="probe-ipv4"),
        asyncio.create_task(_probe_ipv6(conn, os_task, results), name="probe-ipv6"),
    ]

    def _cancel_siblings(task: "asyncio.Task[OSInfo]") -> None:
        if task.cancelled() or task.exception() is not None:
            for sibling in siblings:
                sibling.cancel()

    os_task.add_done_callback(_cancel_siblings)

    outcomes = await asyncio.gather(os_task, *siblings, return_exceptions=True)

    os_outcome = outcomes[0]
    if isinstance(os_outcome, BaseException):
        raise FactsError(f"failed to detect OS on {conn!r}: {os_outcome}") from os_outcome
    if results.os is None:
        raise FactsError(f"OS detection returned nothing for {conn!r}")

    for task, outcome in zip(siblings, outcomes[1:]):
        if isinstance(outcome, BaseException):
            raise FactsError(
                f"{task.get_name()} failed on {conn!r}: {outcome}"
            ) from outcome

    package_manager = None
    try:
        package_manager = await detect_package_manager(conn, results.os)
    except StrategyError as e:
        logger.warning("%s on %r", e, conn)

    init_system = None
    try:
        init_system = await detect_init_system(conn, results.os)
    except StrategyError as e:
        logger.warning("%s on %r", e, conn)

    facts = Facts(
        os=results.os,
        hostname=results.hostname,
        kernel=results.kernel,
        total_cpu=results.total_cpu,
        total_memory=results.total_memory,
        ipv4_default=results.ipv4_default,
        ipv6_default=results.ipv6_default,
        package_manager=package_manager,
        init_system=init_system,
    )
    logger.info(
        "Gathered facts for %s: os=%s cpu=%d mem=%dMiB pm=%s init=%s",
        facts.hostname,
        facts.os.id,
        facts.total_cpu,
        facts.total_memory,
        package_manager.kind.value if package_manager else None,
        init_system.kind.value if init_system else None,
    )
    return facts
