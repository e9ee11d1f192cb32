"""Command executors built on a :class:`Connector`.

Every function takes the connector first and delegates to
:func:`run_with_options`, so the connector's error contract carries through
unchanged: ``CommandError`` for a non-zero exit, anything else for transport
or cancellation.
"""

import asyncio
import logging
from typing import TYPE_CHECKING

from hostprobe_mcp.models import CommandError, ExecOptions, RetryError, join_output
from hostprobe_mcp.utils.shell import quote_arg, quote_path, sh_c
from hostprobe_mcp.utils.validation import PolicyError, validate_path

if TYPE_CHECKING:
    from hostprobe_mcp.protocols import Connector

logger = logging.getLogger(__name__)


async def run_with_options(
    conn: "Connector",
    command: str,
    options: ExecOptions | None = None,
) -> tuple[str, str]:
    """Run a command with explicit options and return (stdout, stderr)."""
    logger.debug("exec on %r: %s (sudo=%s)", conn, command, bool(options and options.sudo))
    return await conn.exec(command, options)


async def run(conn: "Connector", command: str, sudo: bool = False) -> str:
    """Run a command and return its combined output.

    Args:
        conn: Connector to the host
        command: Shell command line
        sudo: Run with elevated privileges

    Returns:
        stdout followed by stderr, separated by a newline when both are set

    Raises:
        CommandError: If the command exited non-zero (output is on the error)
    """
    stdout, stderr = await run_with_options(conn, command, ExecOptions(sudo=sudo))
    return join_output(stdout, stderr)


async def check(conn: "Connector", command: str, sudo: bool = False) -> bool:
    """Run a command as a predicate.

    Returns:
        True on exit 0, False on a non-zero exit

    Raises:
        Exception: Transport and cancellation errors propagate
    """
    try:
        await run_with_options(conn, command, ExecOptions(sudo=sudo))
    except CommandError as e:
        logger.debug("check %r returned false (exit %d)", command, e.exit_code)
        return False
    return True


async def run_in_background(conn: "Connector", command: str, sudo: bool = False) -> None:
    """Launch a detached command and return once it has been started.

    Output is discarded. The job is wrapped with ``nohup`` when the host has
    it so that it survives the session closing.

    Raises:
        PolicyError: If the command is empty
    """
    if not command or not command.strip():
        raise PolicyError("background command cannot be empty")

    nohup = await conn.look_path("nohup")
    if nohup:
        launch = f"{nohup} {sh_c(command)} > /dev/null 2>&1 &"
    else:
        launch = sh_c(f"{command} > /dev/null 2>&1 &")

    await run_with_options(conn, launch, ExecOptions(sudo=sudo))
    logger.info("Started background command on %r: %s", conn, command)


async def run_retry(
    conn: "Connector",
    command: str,
    sudo: bool = False,
    retries: int = 0,
    delay: float = 0.0,
) -> str:
    """Run a command, retrying on any failure.

    Makes ``1 + max(retries, 0)`` attempts and sleeps ``delay`` seconds
    between failed attempts. There is no sleep after the final attempt.

    Args:
        conn: Connector to the host
        command: Shell command line
        sudo: Run with elevated privileges
        retries: Additional attempts after the first
        delay: Seconds to wait between attempts

    Returns:
        Combined output of the first successful attempt

    Raises:
        PolicyError: If the command is empty
        RetryError: If every attempt failed, chained from the last error
        asyncio.CancelledError: If cancelled, chained from the last error
    """
    if not command or not command.strip():
        raise PolicyError("command cannot be empty")

    attempts = 1 + max(retries, 0)
    last_error: Exception | None = None

    for attempt in range(1, attempts + 1):
        try:
            return await run(conn, command, sudo=sudo)
        except asyncio.CancelledError:
            if last_error is not None:
                raise asyncio.CancelledError(
                    f"cancelled during attempt {attempt} of '{command}'"
                ) from last_error
            raise
        except Exception as e:
            last_error = e
            logger.warning(
                "Attempt %d/%d of %r failed: %s", attempt, attempts, command, e
            )

        if attempt == attempts:
            break

        try:
            await asyncio.sleep(delay)
        except asyncio.CancelledError:
            raise asyncio.CancelledError(
                f"cancelled while waiting to retry '{command}'"
            ) from last_error

    assert last_error is not None
    raise RetryError(command, attempts, last_error) from last_error


async def look_path(conn: "Connector", executable: str) -> str | None:
    """Resolve an executable on the host, None when absent."""
    return await conn.look_path(executable)


async def exists(conn: "Connector", path: str) -> bool:
    """Check whether a path exists on the host."""
    return (await conn.stat(validate_path(path))).exists


async def is_dir(conn: "Connector", path: str) -> bool:
    """Check whether a path is an existing directory on the host."""
    stat = await conn.stat(validate_path(path))
    return stat.exists and stat.is_dir


async def read_file(conn: "Connector", path: str) -> bytes:
    """Read a file from the host."""
    return await conn.read_file(validate_path(path))


async def write_file(
    conn: "Connector",
    content: bytes,
    path: str,
    permissions: str | None = None,
    sudo: bool = False,
) -> None:
    """Write a file on the host, replacing any existing content."""
    await conn.write_file(content, validate_path(path), permissions, sudo)


async def mkdirp(
    conn: "Connector",
    path: str,
    permissions: str | None = None,
    sudo: bool = False,
) -> None:
    """Create a directory and its parents; existing directories are fine."""
    target = quote_path(validate_path(path))
    command = f"mkdir -p {target}"
    if permissions:
        command += f" && chmod {quote_arg(permissions)} {target}"
    await run_with_options(conn, command, ExecOptions(sudo=sudo))
