"""MCP resources for hostprobe MCP."""

from hostprobe_mcp.resources.hosts import list_hosts_resource

__all__ = ["list_hosts_resource"]
