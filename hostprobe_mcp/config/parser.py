"""SSH config file parser.

Reads ~/.ssh/config and turns its ``Host`` blocks into probe targets,
filtered by the allowlist/blocklist.
"""

import logging
import os
import re
from pathlib import Path

from hostprobe_mcp.models import SSHHost
from hostprobe_mcp.utils.hostname import is_localhost_target

logger = logging.getLogger(__name__)

_HOST_RE = re.compile(r"^Host\s+(\S+)", re.IGNORECASE)
_OPTION_RE = re.compile(r"^(\w+)\s*=?\s*(.+)$")

# Name used internally for "Host *" and other wildcard blocks
_WILDCARD = "*"


class SSHConfigParser:
    """Parser for SSH config files.

    Only concrete hosts with a ``HostName`` become targets. Options set under
    ``Host *`` apply as defaults to every host declared after it.
    """

    def __init__(
        self,
        config_path: Path | str | None = None,
        allowlist: list[str] | None = None,
        blocklist: list[str] | None = None,
    ):
        """Initialize SSH config parser.

        Args:
            config_path: Path to SSH config file (default: ~/.ssh/config)
            allowlist: Only include these hosts (if set)
            blocklist: Exclude these hosts
        """
        if config_path is None:
            config_path = Path.home() / ".ssh" / "config"

        self.config_path = Path(config_path)
        self.allowlist = set(allowlist) if allowlist else None
        self.blocklist = set(blocklist) if blocklist else set()

    def parse(self) -> dict[str, SSHHost]:
        """Parse SSH config and return host definitions.

        Returns:
            Dictionary mapping host alias to SSHHost
        """
        if not self.config_path.exists():
            logger.warning("SSH config not found: %s", self.config_path)
            return {}

        try:
            content = self.config_path.read_text()
        except OSError as e:
            logger.warning("Cannot read SSH config %s: %s", self.config_path, e)
            return {}

        hosts: dict[str, SSHHost] = {}
        defaults: dict[str, str] = {}
        current: str | None = None
        options: dict[str, str] = {}

        for raw in content.splitlines():
            line = raw.strip()
            if not line or line.startswith("#"):
                continue

            host_match = _HOST_RE.match(line)
            if host_match:
                self._add_host(hosts, current, options)
                current = host_match.group(1)
                if "*" in current or "?" in current:
                    current = _WILDCARD
                options = {} if current == _WILDCARD else dict(defaults)
                continue

            option_match = _OPTION_RE.match(line)
            if option_match is None or current is None:
                continue
            key = option_match.group(1).lower()
            value = option_match.group(2).strip()
            if key == "identityfile":
                value = os.path.expanduser(value)
            options[key] = value
            if current == _WILDCARD:
                defaults[key] = value

        self._add_host(hosts, current, options)

        logger.info("Parsed %d hosts from %s", len(hosts), self.config_path)
        return hosts

    def _add_host(
        self, hosts: dict[str, SSHHost], name: str | None, options: dict[str, str]
    ) -> None:
        if not name or name == _WILDCARD or not options.get("hostname"):
            return
        if not self._is_host_allowed(name):
            logger.debug("Skipping filtered host %s", name)
            return

        try:
            port = int(options.get("port", "22"))
        except ValueError:
            logger.warning("Invalid port for %s: %s, using 22", name, options["port"])
            port = 22

        hosts[name] = SSHHost(
            name=name,
            hostname=options["hostname"],
            user=options.get("user", "root"),
            port=port,
            identity_file=options.get("identityfile"),
            is_localhost=is_localhost_target(name),
        )

    def _is_host_allowed(self, name: str) -> bool:
        """Check if host passes allowlist/blocklist filters.

        The allowlist takes precedence when set.
        """
        if self.allowlist:
            return name in self.allowlist
        return name not in self.blocklist
