"""Application configuration.

Combines three sources:
- Settings: ``HOSTPROBE_*`` environment variables
- SSHConfigParser: probe targets from ~/.ssh/config
- HostKeyVerifier: which known_hosts file the pool verifies against
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Any

from hostprobe_mcp.config.host_keys import HostKeyVerifier
from hostprobe_mcp.config.parser import SSHConfigParser
from hostprobe_mcp.config.settings import ENV_PREFIX, Settings
from hostprobe_mcp.models import SSHHost

logger = logging.getLogger(__name__)


def _get_list_env(key: str) -> list[str] | None:
    """Split a comma separated variable; None when unset or blank."""
    items = [item.strip() for item in os.getenv(key, "").split(",")]
    return [item for item in items if item] or None


@dataclass
class Config:
    """Settings, SSH targets and host key policy for one server process.

    Hosts are parsed from the SSH config on first use and cached.
    """

    settings: Settings
    parser: SSHConfigParser
    host_keys: HostKeyVerifier
    _hosts: dict[str, SSHHost] | None = field(default=None, init=False, repr=False)

    @classmethod
    def from_env(cls) -> "Config":
        """Build the configuration from the environment.

        Raises:
            FileNotFoundError: If strict host key checking is on and the
                known_hosts file is missing
        """
        strict = os.getenv(f"{ENV_PREFIX}STRICT_HOST_KEY_CHECKING", "true").lower() != "false"
        return cls(
            settings=Settings.from_env(),
            parser=SSHConfigParser(
                allowlist=_get_list_env(f"{ENV_PREFIX}ALLOWLIST"),
                blocklist=_get_list_env(f"{ENV_PREFIX}BLOCKLIST"),
            ),
            host_keys=HostKeyVerifier(
                known_hosts_path=os.getenv(f"{ENV_PREFIX}KNOWN_HOSTS"),
                strict_checking=strict,
            ),
        )

    def get_hosts(self) -> dict[str, SSHHost]:
        """All probe targets, keyed by their ``Host`` alias."""
        if self._hosts is None:
            self._hosts = self.parser.parse()
            logger.debug("Loaded %d host(s) from %s", len(self._hosts), self.parser.config_path)
        return self._hosts

    def get_host(self, name: str) -> SSHHost | None:
        """Look up one target by alias."""
        return self.get_hosts().get(name)

    def pool_options(self) -> dict[str, Any]:
        """Keyword arguments for :class:`~hostprobe_mcp.services.pool.ConnectionPool`."""
        return {
            "idle_timeout": self.settings.idle_timeout,
            "max_size": self.settings.max_pool_size,
            "connect_timeout": self.settings.connect_timeout,
            "known_hosts": self.host_keys.get_known_hosts_path(),
            "strict_host_key_checking": self.host_keys.strict_checking,
        }
