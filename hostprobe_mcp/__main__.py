"""Entry point for the hostprobe MCP server."""

import logging

from hostprobe_mcp.server import mcp  # importing also configures logging
from hostprobe_mcp.services import get_config

logger = logging.getLogger(__name__)


def run_server() -> None:
    """Serve over stdio or streamable HTTP, per ``HOSTPROBE_TRANSPORT``."""
    settings = get_config().settings

    if settings.transport == "stdio":
        logger.info("Starting hostprobe MCP server on stdio")
        mcp.run(transport="stdio")
        return

    logger.info(
        "Starting hostprobe MCP server on http://%s:%d/mcp",
        settings.http_host,
        settings.http_port,
    )
    mcp.run(transport="http", host=settings.http_host, port=settings.http_port)


if __name__ == "__main__":
    run_server()
