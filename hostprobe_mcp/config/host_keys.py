"""SSH host key verification settings."""

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

DISABLED = "none"


class HostKeyVerifier:
    """Resolves which known_hosts file the connection pool verifies against.

    ``HOSTPROBE_KNOWN_HOSTS=none`` disables verification. In strict mode a
    missing known_hosts file is a startup error rather than a silent downgrade.
    """

    def __init__(
        self,
        known_hosts_path: str | None = None,
        strict_checking: bool = True,
    ):
        """Initialize host key verifier.

        Args:
            known_hosts_path: Path to known_hosts file or 'none' to disable
            strict_checking: Reject unknown host keys

        Raises:
            FileNotFoundError: If strict mode and file missing
        """
        self.strict_checking = strict_checking
        self._known_hosts = self._resolve(known_hosts_path)

    def _resolve(self, configured: str | None) -> str | None:
        if configured and configured.lower() == DISABLED:
            logger.critical(
                "SSH host key verification DISABLED (HOSTPROBE_KNOWN_HOSTS=none); "
                "connections are vulnerable to MITM attacks"
            )
            return None

        if configured:
            path = Path(os.path.expanduser(configured))
        else:
            path = Path.home() / ".ssh" / "known_hosts"

        if path.exists():
            return str(path)

        if self.strict_checking:
            raise FileNotFoundError(
                f"SSH host key verification required but known_hosts not found "
                f"at {path}. Add host keys with 'ssh-keyscan <host> >> {path}', "
                f"point HOSTPROBE_KNOWN_HOSTS at an existing file, or set "
                f"HOSTPROBE_KNOWN_HOSTS=none (not recommended)."
            )

        logger.warning("known_hosts not found at %s, verification disabled", path)
        return None

    def get_known_hosts_path(self) -> str | None:
        """Get path to known_hosts file, or None if verification is disabled."""
        return self._known_hosts

    def is_enabled(self) -> bool:
        """Check if host key verification is enabled."""
        return self._known_hosts is not None
