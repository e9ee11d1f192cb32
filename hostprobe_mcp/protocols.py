"""Protocol interfaces for dependency inversion.

The core never talks to SSH or subprocesses directly: every probe and
operation goes through a :class:`Connector`. Concrete implementations live
in :mod:`hostprobe_mcp.services.connectors`; tests substitute scripted fakes.

Usage Example:

    from hostprobe_mcp.protocols import Connector
    from hostprobe_mcp.services.executors import check

    async def has_docker(conn: Connector) -> bool:
        return await check(conn, "docker info")

    class FakeConnector:
        async def exec(self, command, options=None):
            return ("", "")
        ...

    await has_docker(FakeConnector())  # Works with any implementation
"""

from typing import Protocol, runtime_checkable

from hostprobe_mcp.models import ExecOptions, FileStat, OSInfo


@runtime_checkable
class Connector(Protocol):
    """Transport to a single host.

    Implementations must be safe for concurrent use: the facts collector
    issues several calls at once against the same connector.
    """

    async def exec(
        self,
        command: str,
        options: ExecOptions | None = None,
    ) -> tuple[str, str]:
        """Run a shell command on the host.

        Args:
            command: Shell command line
            options: Privilege, timeout and stdin settings

        Returns:
            Tuple of (stdout, stderr)

        Raises:
            CommandError: If the command exited non-zero
            ConnectionError: If the host could not be reached
            TimeoutError: If ``options.timeout`` elapsed
        """
        ...

    async def look_path(self, executable: str) -> str | None:
        """Resolve an executable on the host's PATH.

        Returns:
            Absolute path, or None if the executable is absent
        """
        ...

    async def get_os(self) -> OSInfo:
        """Identify the host operating system.

        Raises:
            RuntimeError: If no OS identity could be determined
        """
        ...

    def forget_os(self) -> None:
        """Discard any cached OS identity."""
        ...

    async def read_file(self, path: str) -> bytes:
        """Read a file from the host."""
        ...

    async def write_file(
        self,
        content: bytes,
        path: str,
        permissions: str | None = None,
        sudo: bool = False,
    ) -> None:
        """Write a file on the host, replacing any existing content."""
        ...

    async def stat(self, path: str) -> FileStat:
        """Stat a path. A missing path yields ``exists=False``."""
        ...


__all__ = ["Connector"]
