"""hostprobe MCP FastMCP server.

A thin wrapper that wires the MCP server to tools and resources. All host
logic lives in services/.
"""

import logging
import os
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastmcp import FastMCP
from starlette.requests import Request
from starlette.responses import PlainTextResponse

from hostprobe_mcp.config import Settings
from hostprobe_mcp.dependencies import Dependencies
from hostprobe_mcp.middleware import ErrorHandlingMiddleware, LoggingMiddleware
from hostprobe_mcp.resources import list_hosts_resource
from hostprobe_mcp.services import get_config, set_pool
from hostprobe_mcp.tools import host_facts, mount, run, service
from hostprobe_mcp.utils.console import MCPRequestFormatter

NOISY_LOGGERS = (
    "uvicorn",
    "uvicorn.access",
    "uvicorn.error",
    "asyncssh",
    "httpx",
    "httpcore",
    "fastmcp",
    "starlette",
    "anyio",
)


def _configure_logging() -> None:
    """Configure colour logging for the hostprobe_mcp package.

    Runs at import time so that loggers are set up however the server is
    started.
    """
    log_level = os.getenv("HOSTPROBE_LOG_LEVEL", "INFO").upper()
    use_colors = os.getenv("HOSTPROBE_LOG_COLORS", "true").lower() != "false"
    if not sys.stderr.isatty():
        use_colors = False

    package_logger = logging.getLogger("hostprobe_mcp")
    package_logger.setLevel(getattr(logging, log_level, logging.INFO))

    if not package_logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(MCPRequestFormatter(use_colors=use_colors))
        package_logger.addHandler(handler)
        package_logger.propagate = False

    for name in NOISY_LOGGERS:
        noisy = logging.getLogger(name)
        noisy.setLevel(logging.WARNING)
        noisy.handlers = []
        noisy.propagate = False

    root_logger = logging.getLogger()
    root_logger.handlers = []
    root_logger.setLevel(logging.WARNING)


_configure_logging()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def app_lifespan(server: FastMCP) -> AsyncIterator[dict[str, Any]]:
    """Create the connection pool at startup and close it on shutdown.

    Yields:
        Dict with the configured host names
    """
    logger.info("hostprobe MCP server starting up")

    deps = Dependencies.from_config(get_config())
    set_pool(deps.pool)

    hosts = deps.config.get_hosts()
    logger.info(
        "Loaded %d SSH host(s): %s",
        len(hosts),
        ", ".join(sorted(hosts)) if hosts else "(none)",
    )

    try:
        yield {"hosts": list(hosts)}
    finally:
        logger.info("hostprobe MCP server shutting down")
        if deps.pool.pool_size > 0:
            logger.info(
                "Closing %d active SSH connection(s): %s",
                deps.pool.pool_size,
                ", ".join(deps.pool.active_hosts),
            )
        await deps.cleanup()
        logger.info("hostprobe MCP server shutdown complete")


def configure_middleware(server: FastMCP) -> None:
    """Add middleware: ErrorHandling (innermost) then Logging with timing."""
    settings = Settings.from_env()
    server.add_middleware(ErrorHandlingMiddleware(include_traceback=settings.include_traceback))
    server.add_middleware(
        LoggingMiddleware(
            include_payloads=settings.log_payloads,
            slow_threshold_ms=float(settings.slow_threshold_ms),
        )
    )


def create_server() -> FastMCP:
    """Create and configure the MCP server.

    Returns:
        Configured FastMCP server instance
    """
    server = FastMCP("hostprobe_mcp", lifespan=app_lifespan)

    configure_middleware(server)

    server.tool()(host_facts)
    server.tool()(service)
    server.tool()(mount)
    server.tool()(run)

    server.resource("hosts://list")(list_hosts_resource)

    @server.custom_route("/health", methods=["GET"])
    async def health_check(request: Request) -> PlainTextResponse:
        """Health check endpoint."""
        client_host = request.client.host if request.client else "unknown"
        logger.debug("Health check from %s", client_host)
        return PlainTextResponse("OK")

    return server


# Default server instance
mcp = create_server()
