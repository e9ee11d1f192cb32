"""Data models for hostprobe MCP."""

from hostprobe_mcp.models.command import (
    CommandError,
    ExecOptions,
    RetryError,
    join_output,
)
from hostprobe_mcp.models.facts import Facts, FileStat, OSInfo
from hostprobe_mcp.models.ssh import SSHHost
from hostprobe_mcp.models.strategy import (
    APT,
    DNF,
    SYSTEMD,
    SYSV,
    YUM,
    InitSystemInfo,
    InitSystemKind,
    PackageManagerInfo,
    PackageManagerKind,
)

__all__ = [
    "APT",
    "CommandError",
    "DNF",
    "ExecOptions",
    "Facts",
    "FileStat",
    "InitSystemInfo",
    "InitSystemKind",
    "OSInfo",
    "PackageManagerInfo",
    "PackageManagerKind",
    "RetryError",
    "SSHHost",
    "SYSTEMD",
    "SYSV",
    "YUM",
    "join_output",
]
