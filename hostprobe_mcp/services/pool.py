"""Shared asyncssh connections keyed by host name.

The facts collector fans several probes out against one host at once. They
all go through :meth:`ConnectionPool.get_connection`, which hands every
caller the same multiplexed connection instead of dialling once per probe.

- One ``asyncio.Lock`` per host serializes dialling. Callers that arrive
  while a host is being dialled wait, then reuse the new connection.
- ``_entries`` is kept in least-recently-used order. Once ``max_size`` hosts
  are connected, the oldest entry is closed to make room.
- A background reaper closes entries idle for longer than ``idle_timeout``
  and exits when the pool is empty.
"""

import asyncio
import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

import asyncssh

if TYPE_CHECKING:
    from hostprobe_mcp.models import SSHHost

logger = logging.getLogger(__name__)


@dataclass
class _Entry:
    connection: asyncssh.SSHClientConnection
    last_used: datetime = field(default_factory=datetime.now)

    @property
    def closed(self) -> bool:
        return bool(self.connection.is_closed)


class ConnectionPool:
    """At most one SSH connection per host, bounded by ``max_size``."""

    def __init__(
        self,
        idle_timeout: int = 60,
        max_size: int = 100,
        known_hosts: str | None = None,
        strict_host_key_checking: bool = True,
        connect_timeout: float = 10.0,
    ) -> None:
        """Initialize an empty pool.

        Args:
            idle_timeout: Seconds a connection may sit unused before it is closed
            max_size: Maximum number of hosts connected at once (must be > 0)
            known_hosts: known_hosts file to verify against, None to skip verification
            strict_host_key_checking: Fail instead of retrying unverified on unknown keys
            connect_timeout: Seconds allowed for dialling and the SSH handshake

        Raises:
            ValueError: If max_size is not positive
        """
        if max_size <= 0:
            raise ValueError(f"max_size must be > 0, got {max_size}")

        self.idle_timeout = idle_timeout
        self.max_size = max_size
        self.connect_timeout = connect_timeout
        self.known_hosts = known_hosts
        self.strict_host_key_checking = strict_host_key_checking

        self._entries: OrderedDict[str, _Entry] = OrderedDict()
        self._locks: dict[str, asyncio.Lock] = {}
        self._reaper: asyncio.Task[None] | None = None

        if known_hosts is None:
            logger.warning(
                "SSH host key verification DISABLED - vulnerable to MITM attacks. "
                "Set HOSTPROBE_KNOWN_HOSTS to a valid known_hosts file path."
            )
        logger.info(
            "ConnectionPool ready (idle_timeout=%ds, max_size=%d, connect_timeout=%ss)",
            idle_timeout,
            max_size,
            connect_timeout,
        )

    def _lock(self, host_name: str) -> asyncio.Lock:
        return self._locks.setdefault(host_name, asyncio.Lock())

    def _checkout(self, host_name: str) -> asyncssh.SSHClientConnection | None:
        """Return the live connection for a host and mark it most recently used."""
        entry = self._entries.get(host_name)
        if entry is None:
            return None
        if entry.closed:
            logger.info("Connection to %s was closed by the peer, redialling", host_name)
            del self._entries[host_name]
            return None
        entry.last_used = datetime.now()
        self._entries.move_to_end(host_name)
        return entry.connection

    def _make_room(self) -> None:
        while len(self._entries) >= self.max_size:
            victim, entry = self._entries.popitem(last=False)
            logger.info(
                "Pool full (pool_size=%d/%d), closing least recently used %s",
                len(self._entries) + 1,
                self.max_size,
                victim,
            )
            entry.connection.close()

    async def _dial(
        self, host: "SSHHost", known_hosts: str | None
    ) -> asyncssh.SSHClientConnection:
        return await asyncio.wait_for(
            asyncssh.connect(
                host.connection_hostname,
                port=host.port,
                username=host.user,
                known_hosts=known_hosts,
                client_keys=[host.identity_file] if host.identity_file else None,
            ),
            timeout=self.connect_timeout,
        )

    async def _open(self, host: "SSHHost") -> asyncssh.SSHClientConnection:
        try:
            return await self._dial(host, self.known_hosts)
        except asyncssh.HostKeyNotVerifiable as e:
            if self.strict_host_key_checking:
                logger.error(
                    "Host key for %s not in %s: %s. Add it with ssh-keyscan or set "
                    "HOSTPROBE_STRICT_HOST_KEY_CHECKING=false",
                    host.name,
                    self.known_hosts,
                    e,
                )
                raise
            logger.warning("Host key for %s not verified (strict mode off): %s", host.name, e)
            return await self._dial(host, None)

    async def get_connection(self, host: "SSHHost") -> asyncssh.SSHClientConnection:
        """Return the pooled connection for a host, dialling it if needed.

        Raises:
            asyncssh.HostKeyNotVerifiable: If the host key is unknown in strict mode
            TimeoutError: If dialling took longer than ``connect_timeout``
        """
        async with self._lock(host.name):
            conn = self._checkout(host.name)
            if conn is not None:
                logger.debug("Reusing connection to %s", host.name)
                return conn

            self._make_room()
            logger.info("Opening SSH connection to %s (%s)", host.name, host.address)
            conn = await self._open(host)
            self._entries[host.name] = _Entry(connection=conn)
            logger.info(
                "SSH connection established to %s (pool_size=%d/%d)",
                host.name,
                len(self._entries),
                self.max_size,
            )

        if self._reaper is None or self._reaper.done():
            self._reaper = asyncio.create_task(self._reap(), name="pool-reaper")
        return conn

    async def _reap(self) -> None:
        interval = max(self.idle_timeout // 2, 1)
        while self._entries:
            await asyncio.sleep(interval)
            self.close_idle()
        logger.debug("Pool empty, reaper stopped")

    def close_idle(self) -> int:
        """Close connections that are closed or idle past ``idle_timeout``.

        Returns:
            Number of connections removed
        """
        cutoff = datetime.now() - timedelta(seconds=self.idle_timeout)
        expired = [
            name
            for name, entry in self._entries.items()
            if entry.closed or entry.last_used < cutoff
        ]
        for name in expired:
            self._entries.pop(name).connection.close()
            logger.info("Closed idle connection to %s (pool_size=%d)", name, len(self._entries))
        return len(expired)

    async def remove_connection(self, host_name: str) -> None:
        """Close and forget a host's connection. Unknown hosts are ignored."""
        async with self._lock(host_name):
            entry = self._entries.pop(host_name, None)
        if entry is not None:
            logger.info("Dropped connection to %s (pool_size=%d)", host_name, len(self._entries))
            entry.connection.close()

    async def close_all(self) -> None:
        """Close every connection and stop the reaper."""
        for host_name in list(self._entries):
            await self.remove_connection(host_name)
        if self._reaper is not None and not self._reaper.done():
            self._reaper.cancel()

    @property
    def pool_size(self) -> int:
        """Number of hosts currently connected."""
        return len(self._entries)

    @property
    def active_hosts(self) -> list[str]:
        """Connected host names, least recently used first."""
        return list(self._entries)
