"""Dependency injection container for hostprobe MCP."""

from dataclasses import dataclass

from hostprobe_mcp.config import Config
from hostprobe_mcp.services.pool import ConnectionPool


@dataclass
class Dependencies:
    """Configuration and connection pool for one server instance.

    Example:
        deps = Dependencies.create()
        try:
            ...
        finally:
            await deps.cleanup()
    """

    config: Config
    pool: ConnectionPool

    @classmethod
    def create(cls) -> "Dependencies":
        """Create dependencies from ``HOSTPROBE_*`` environment variables."""
        return cls.from_config(Config.from_env())

    @classmethod
    def from_config(cls, config: Config) -> "Dependencies":
        """Create dependencies with a pool sized and secured from ``config``."""
        return cls(config=config, pool=ConnectionPool(**config.pool_options()))

    async def cleanup(self) -> None:
        """Close all pooled SSH connections."""
        await self.pool.close_all()
