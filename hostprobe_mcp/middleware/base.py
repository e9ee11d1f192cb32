"""Base middleware class for hostprobe MCP."""

import logging

from fastmcp.server.middleware import Middleware


class HostprobeMiddleware(Middleware):
    """FastMCP middleware with a configurable logger."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        """Initialize middleware.

        Args:
            logger: Optional custom logger. Defaults to the subclass module logger.
        """
        self.logger = logger or logging.getLogger(type(self).__module__)
