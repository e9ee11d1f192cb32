"""SSH host model."""

from dataclasses import dataclass


@dataclass(frozen=True)
class SSHHost:
    """A probe target declared by a ``Host`` block in ~/.ssh/config."""

    name: str
    hostname: str
    user: str = "root"
    port: int = 22
    identity_file: str | None = None
    is_localhost: bool = False

    @property
    def connection_hostname(self) -> str:
        """Address to dial: loopback when the entry names this machine."""
        return "127.0.0.1" if self.is_localhost else self.hostname

    @property
    def address(self) -> str:
        """``user@host:port`` form used in log lines."""
        return f"{self.user}@{self.connection_hostname}:{self.port}"
