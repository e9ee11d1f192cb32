"""MCP tools for hostprobe MCP."""

from hostprobe_mcp.tools.hosts import describe_error, host_facts, mount, run, service

__all__ = ["describe_error", "host_facts", "mount", "run", "service"]
