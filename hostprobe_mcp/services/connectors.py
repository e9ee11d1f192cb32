"""Connector implementations: SSH (asyncssh) and the local machine.

Both follow the same contract (:class:`hostprobe_mcp.protocols.Connector`):
a non-zero exit raises :class:`CommandError`, transport failures raise
:class:`ConnectionError` (or ``TimeoutError`` when a per-call timeout
elapses), and cancellation propagates untouched.
"""

import asyncio
import logging
import os
import platform
import shutil
import stat as stat_module
from pathlib import Path
from typing import TYPE_CHECKING, Any

import asyncssh

from hostprobe_mcp.models import CommandError, ExecOptions, FileStat, OSInfo
from hostprobe_mcp.services.connection import ConnectionError, get_connection_with_retry
from hostprobe_mcp.utils.parser import parse_key_values
from hostprobe_mcp.utils.shell import quote_arg, quote_path, sh_c
from hostprobe_mcp.utils.validation import SHELL_METACHARACTERS, PolicyError

if TYPE_CHECKING:
    from hostprobe_mcp.models import SSHHost
    from hostprobe_mcp.services.pool import ConnectionPool

logger = logging.getLogger(__name__)

OS_PROBE_TIMEOUT = 10.0


def _decode(data: str | bytes | None) -> str:
    """Normalize process output to text."""
    if data is None:
        return ""
    if isinstance(data, bytes):
        return data.decode("utf-8", errors="replace")
    return data


def _wrap_sudo(command: str) -> str:
    """Run the whole command line, pipes and redirections included, as root."""
    return f"sudo -n -E -- {sh_c(command)}"


def _check_executable_name(executable: str) -> None:
    if not executable or any(c in SHELL_METACHARACTERS for c in executable):
        raise PolicyError(f"invalid characters in executable name: {executable!r}")


class SSHConnector:
    """Connector for a remote host reached over SSH."""

    def __init__(self, host: "SSHHost", pool: "ConnectionPool") -> None:
        """Initialize SSH connector.

        Args:
            host: Target host
            pool: Pool that owns the underlying asyncssh connection
        """
        self.host = host
        self.pool = pool
        self._os: OSInfo | None = None
        self._os_lock = asyncio.Lock()

    def __repr__(self) -> str:
        return f"SSHConnector({self.host.name!r})"

    async def exec(
        self,
        command: str,
        options: ExecOptions | None = None,
    ) -> tuple[str, str]:
        """Run a command over SSH.

        Raises:
            CommandError: If the command exited non-zero
            ConnectionError: If the SSH transport failed
            TimeoutError: If ``options.timeout`` elapsed
        """
        result = await self._run(command, options or ExecOptions())
        return _decode(result.stdout), _decode(result.stderr)

    async def _run(
        self, command: str, opts: ExecOptions, **run_kwargs: Any
    ) -> asyncssh.SSHCompletedProcess:
        final_command = _wrap_sudo(command) if opts.sudo else command

        conn = await get_connection_with_retry(self.host, self.pool)
        try:
            result = await asyncio.wait_for(
                conn.run(final_command, check=False, input=opts.stdin, **run_kwargs),
                timeout=opts.timeout,
            )
        except TimeoutError:
            # Only the channel timed out, the shared connection stays pooled
            logger.warning(
                "Timed out after %ss on %s running %r", opts.timeout, self.host.name, command
            )
            raise
        except (asyncssh.Error, OSError) as e:
            logger.warning("Transport failure on %s running %r: %s", self.host.name, command, e)
            await self.pool.remove_connection(self.host.name)
            raise ConnectionError(self.host.name, e) from e

        # exit_status is None when the remote process was killed by a signal
        returncode = result.exit_status if result.exit_status is not None else -1
        if returncode != 0:
            raise CommandError(command, returncode, _decode(result.stdout), _decode(result.stderr))
        return result

    async def look_path(self, executable: str) -> str | None:
        """Resolve an executable with ``command -v``."""
        _check_executable_name(executable)
        try:
            stdout, _ = await self.exec(f"command -v {quote_arg(executable)}")
        except CommandError:
            return None
        return stdout.strip() or None

    async def get_os(self) -> OSInfo:
        """Identify the remote OS, caching the result for this connector.

        Tries /etc/os-release, then ``lsb_release -a``, then ``uname -s``.

        Raises:
            RuntimeError: If neither an OS id nor arch/kernel could be found
        """
        async with self._os_lock:
            if self._os is None:
                self._os = await self._detect_os()
            return self._os

    def forget_os(self) -> None:
        """Drop the cached OS so the next :meth:`get_os` probes again."""
        self._os = None

    async def _probe(self, command: str) -> str | None:
        """Run a read-only OS probe; None when it exits non-zero."""
        try:
            stdout, _ = await self.exec(command, ExecOptions(timeout=OS_PROBE_TIMEOUT))
        except CommandError as e:
            logger.debug("OS probe %r failed on %s: %s", command, self.host.name, e)
            return None
        return stdout

    async def _detect_os(self) -> OSInfo:
        fields = {"id": "", "version_id": "", "pretty_name": "", "codename": ""}

        content = await self._probe("cat /etc/os-release")
        if content is not None:
            values = parse_key_values(content)
            fields.update(
                id=values.get("ID", ""),
                version_id=values.get("VERSION_ID", ""),
                pretty_name=values.get("PRETTY_NAME", ""),
                codename=values.get("VERSION_CODENAME", ""),
            )

        if not fields["id"]:
            content = await self._probe("lsb_release -a")
            if content is not None:
                values = parse_key_values(content, separator=":", quote="")
                fields.update(
                    id=values.get("Distributor ID", "").lower(),
                    version_id=values.get("Release", ""),
                    pretty_name=values.get("Description", ""),
                    codename=values.get("Codename", ""),
                )

        if not fields["id"]:
            kernel_name = (await self._probe("uname -s") or "").strip().lower()
            if kernel_name.startswith("linux"):
                fields["id"] = "linux"
            elif kernel_name.startswith("darwin"):
                fields["id"] = "darwin"

        arch = (await self._probe("uname -m") or "").strip()
        kernel = (await self._probe("uname -r") or "").strip()

        if not fields["id"]:
            raise RuntimeError(
                f"failed to determine OS id for {self.host.name} "
                f"(arch={arch or '?'}, kernel={kernel or '?'})"
            )

        return OSInfo(
            id=fields["id"].strip().lower(),
            version_id=fields["version_id"].strip(),
            pretty_name=fields["pretty_name"].strip(),
            codename=fields["codename"].strip(),
            arch=arch,
            kernel=kernel,
        )

    async def read_file(self, path: str) -> bytes:
        """Read a remote file with ``cat``, returning its raw bytes."""
        result = await self._run(f"cat {quote_path(path)}", ExecOptions(), encoding=None)
        return result.stdout or b""

    async def write_file(
        self,
        content: bytes,
        path: str,
        permissions: str | None = None,
        sudo: bool = False,
    ) -> None:
        """Write a remote file by streaming content to ``cat`` on stdin."""
        target = quote_path(path)
        command = f"cat > {target}"
        if permissions:
            command += f" && chmod {quote_arg(permissions)} {target}"
        await self._run(command, ExecOptions(sudo=sudo, stdin=content), encoding=None)

    async def stat(self, path: str) -> FileStat:
        """Stat a remote path with GNU ``stat``."""
        name = os.path.basename(path.rstrip("/")) or path
        try:
            stdout, _ = await self.exec(f"stat -L -c '%s %f' {quote_path(path)}")
        except CommandError:
            return FileStat(name=name, exists=False)

        size_text, mode_text = stdout.split()[:2]
        mode = int(mode_text, 16)
        return FileStat(
            name=name,
            exists=True,
            is_dir=stat_module.S_ISDIR(mode),
            size=int(size_text),
            mode=stat_module.S_IMODE(mode),
        )


class LocalConnector:
    """Connector for the machine hostprobe itself runs on."""

    name = "localhost"

    def __init__(self) -> None:
        self._os: OSInfo | None = None

    def __repr__(self) -> str:
        return "LocalConnector()"

    async def exec(
        self,
        command: str,
        options: ExecOptions | None = None,
    ) -> tuple[str, str]:
        """Run a command through ``/bin/sh``.

        Raises:
            CommandError: If the command exited non-zero
            ConnectionError: If the shell could not be spawned
            TimeoutError: If ``options.timeout`` elapsed
        """
        opts = options or ExecOptions()
        final_command = _wrap_sudo(command) if opts.sudo else command

        try:
            process = await asyncio.create_subprocess_shell(
                final_command,
                stdin=asyncio.subprocess.PIPE if opts.stdin is not None else None,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise ConnectionError(self.name, e) from e

        stdin = opts.stdin.encode("utf-8") if isinstance(opts.stdin, str) else opts.stdin
        try:
            out, err = await asyncio.wait_for(
                process.communicate(stdin), timeout=opts.timeout
            )
        except BaseException:
            # Timeout or cancellation: do not leave the child running
            if process.returncode is None:
                process.kill()
                await process.wait()
            raise

        stdout = _decode(out)
        stderr = _decode(err)
        returncode = process.returncode if process.returncode is not None else -1
        if returncode != 0:
            raise CommandError(command, returncode, stdout, stderr)
        return stdout, stderr

    async def look_path(self, executable: str) -> str | None:
        """Resolve an executable with :func:`shutil.which`."""
        _check_executable_name(executable)
        return shutil.which(executable)

    async def get_os(self) -> OSInfo:
        """Identify the local OS from /etc/os-release and :mod:`platform`."""
        if self._os is not None:
            return self._os

        system = platform.system().lower()
        values: dict[str, str] = {}
        os_release = Path("/etc/os-release")
        if system == "linux" and os_release.exists():
            values = parse_key_values(os_release.read_text())

        self._os = OSInfo(
            id=(values.get("ID") or system or "linux").lower(),
            version_id=values.get("VERSION_ID", platform.release() if system == "darwin" else ""),
            pretty_name=values.get("PRETTY_NAME", platform.platform()),
            codename=values.get("VERSION_CODENAME", ""),
            arch=platform.machine(),
            kernel=platform.release(),
        )
        return self._os

    def forget_os(self) -> None:
        self._os = None

    async def read_file(self, path: str) -> bytes:
        """Read a local file."""
        return await asyncio.to_thread(Path(path).read_bytes)

    async def write_file(
        self,
        content: bytes,
        path: str,
        permissions: str | None = None,
        sudo: bool = False,
    ) -> None:
        """Write a local file, going through the shell when sudo is needed."""
        if sudo:
            target = quote_path(path)
            command = f"cat > {target}"
            if permissions:
                command += f" && chmod {quote_arg(permissions)} {target}"
            await self.exec(command, ExecOptions(sudo=True, stdin=content))
            return

        await asyncio.to_thread(Path(path).write_bytes, content)
        if permissions:
            os.chmod(path, int(permissions, 8))

    async def stat(self, path: str) -> FileStat:
        """Stat a local path, following symlinks."""
        name = os.path.basename(path.rstrip("/")) or path
        try:
            st = os.stat(path)
        except FileNotFoundError:
            return FileStat(name=name, exists=False)
        return FileStat(
            name=name,
            exists=True,
            is_dir=stat_module.S_ISDIR(st.st_mode),
            size=st.st_size,
            mode=stat_module.S_IMODE(st.st_mode),
        )
