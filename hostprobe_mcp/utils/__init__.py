"""Utilities for hostprobe MCP."""

from hostprobe_mcp.utils.console import ColorfulFormatter, MCPRequestFormatter
from hostprobe_mcp.utils.hostname import get_server_hostname, is_localhost_target
from hostprobe_mcp.utils.parser import (
    parse_int,
    parse_key_values,
    parse_mount_targets,
    parse_route_source,
)
from hostprobe_mcp.utils.ping import check_host_online, check_hosts_online
from hostprobe_mcp.utils.shell import quote_arg, quote_path, render_template, sh_c
from hostprobe_mcp.utils.validation import (
    PathTraversalError,
    PolicyError,
    is_single_placeholder_template,
    validate_host,
    validate_name,
    validate_path,
)

__all__ = [
    "check_host_online",
    "check_hosts_online",
    "ColorfulFormatter",
    "get_server_hostname",
    "is_localhost_target",
    "is_single_placeholder_template",
    "MCPRequestFormatter",
    "parse_int",
    "parse_key_values",
    "parse_mount_targets",
    "parse_route_source",
    "PathTraversalError",
    "PolicyError",
    "quote_arg",
    "quote_path",
    "render_template",
    "sh_c",
    "validate_host",
    "validate_name",
    "validate_path",
]
