"""Idempotent mount primitives.

Each operation probes the current state first and only acts when the host is
not already where the caller wants it.
"""

import logging
import re
from typing import TYPE_CHECKING

from hostprobe_mcp.models import CommandError, ExecOptions
from hostprobe_mcp.services.executors import check, mkdirp, run_with_options
from hostprobe_mcp.utils.parser import parse_mount_targets
from hostprobe_mcp.utils.shell import quote_arg, quote_path, sh_c
from hostprobe_mcp.utils.validation import PolicyError, validate_name, validate_path

if TYPE_CHECKING:
    from hostprobe_mcp.protocols import Connector

logger = logging.getLogger(__name__)

MOUNT_TABLE = "/proc/mounts"
FSTAB = "/etc/fstab"

_NOT_MOUNTED_MARKERS = ("not mounted", "not currently mounted")


def is_not_mounted_error(error: CommandError) -> bool:
    """Whether a failed ``umount`` says the target was not mounted anyway."""
    text = f"{error.stderr}\n{error}".lower()
    return any(marker in text for marker in _NOT_MOUNTED_MARKERS)


async def is_mounted(conn: "Connector", path: str) -> bool:
    """Check whether ``path`` is a mount target on the host.

    Uses ``mountpoint -q`` when available, otherwise scans the mount table
    for an exact match on the target column.
    """
    path = validate_path(path)

    if await conn.look_path("mountpoint"):
        return await check(conn, f"mountpoint -q {quote_path(path)}")

    logger.debug("mountpoint not found on %r, scanning %s", conn, MOUNT_TABLE)
    table = (await conn.read_file(MOUNT_TABLE)).decode("utf-8", errors="replace")
    return path in parse_mount_targets(table)


async def unmount(
    conn: "Connector",
    mount_point: str,
    force: bool = False,
    sudo: bool = True,
) -> None:
    """Unmount ``mount_point`` if it is mounted.

    A failure whose message says the target is not mounted is treated as
    success; any other failure propagates.
    """
    mount_point = validate_path(mount_point)

    if not await is_mounted(conn, mount_point):
        logger.debug("%s is not mounted on %r, nothing to do", mount_point, conn)
        return

    command = f"umount {'-f ' if force else ''}{quote_path(mount_point)}"
    try:
        await run_with_options(conn, command, ExecOptions(sudo=sudo))
    except CommandError as e:
        if not is_not_mounted_error(e):
            raise
        logger.info("%s was already unmounted on %r", mount_point, conn)
        return
    logger.info("Unmounted %s on %r", mount_point, conn)


async def _in_fstab(conn: "Connector", mount_point: str) -> bool:
    pattern = rf"^[[:space:]]*[^#]+[[:space:]]+{re.escape(mount_point)}[[:space:]]"
    return await check(conn, f"grep -qE {quote_arg(pattern)} {FSTAB}")


async def ensure_mount(
    conn: "Connector",
    device: str,
    mount_point: str,
    fs_type: str,
    options: str | None = None,
    persistent: bool = False,
) -> None:
    """Make sure ``device`` is mounted on ``mount_point``.

    Args:
        conn: Connector to the host
        device: Block device or remote export to mount
        mount_point: Target directory, created if missing
        fs_type: Filesystem type passed to ``mount -t``
        options: Comma separated mount options
        persistent: Also add an /etc/fstab entry when none exists

    Raises:
        PolicyError: If an argument is empty or unsafe
    """
    if not device or not device.strip():
        raise PolicyError("device cannot be empty")
    mount_point = validate_path(mount_point)
    fs_type = validate_name(fs_type, "filesystem type")
    if options is not None and options.strip():
        options = validate_name(options, "mount options")
    else:
        options = None

    if await is_mounted(conn, mount_point):
        logger.debug("%s already mounted on %r", mount_point, conn)
    else:
        await mkdirp(conn, mount_point, sudo=True)
        opts = f"-o {quote_arg(options)} " if options else ""
        command = (
            f"mount {opts}-t {quote_arg(fs_type)} "
            f"{quote_arg(device)} {quote_path(mount_point)}"
        )
        await run_with_options(conn, command, ExecOptions(sudo=True))
        logger.info("Mounted %s on %s (%r)", device, mount_point, conn)

    if not persistent:
        return

    if await _in_fstab(conn, mount_point):
        logger.debug("%s already present in %s on %r", mount_point, FSTAB, conn)
        return

    entry = f"{device} {mount_point} {fs_type} {options or 'defaults'} 0 0"
    await run_with_options(
        conn,
        sh_c(f"echo {quote_arg(entry)} >> {FSTAB}"),
        ExecOptions(sudo=True),
    )
    logger.info("Added %s to %s on %r", mount_point, FSTAB, conn)
