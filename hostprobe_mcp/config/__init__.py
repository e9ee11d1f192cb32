"""Configuration for hostprobe MCP.

- Config: Main configuration class (aggregates all components)
- SSHConfigParser: Parses ~/.ssh/config files
- HostKeyVerifier: Manages SSH host key verification
- Settings: ``HOSTPROBE_*`` environment variables
"""

from hostprobe_mcp.config.host_keys import HostKeyVerifier
from hostprobe_mcp.config.main import Config
from hostprobe_mcp.config.parser import SSHConfigParser
from hostprobe_mcp.config.settings import Settings

__all__ = ["Config", "HostKeyVerifier", "SSHConfigParser", "Settings"]
