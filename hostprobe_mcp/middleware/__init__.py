"""hostprobe MCP middleware components."""

from hostprobe_mcp.middleware.base import HostprobeMiddleware
from hostprobe_mcp.middleware.errors import ErrorHandlingMiddleware, classify_error
from hostprobe_mcp.middleware.logging import LoggingMiddleware

__all__ = [
    "classify_error",
    "ErrorHandlingMiddleware",
    "HostprobeMiddleware",
    "LoggingMiddleware",
]
