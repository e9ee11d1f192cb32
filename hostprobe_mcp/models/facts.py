"""Host facts data models."""

from dataclasses import dataclass

from hostprobe_mcp.models.strategy import InitSystemInfo, PackageManagerInfo


@dataclass(frozen=True)
class OSInfo:
    """Operating system identity of a host."""

    id: str
    version_id: str = ""
    pretty_name: str = ""
    codename: str = ""
    arch: str = ""
    kernel: str = ""


@dataclass(frozen=True)
class FileStat:
    """Result of a stat probe. A missing path is ``exists=False``."""

    name: str
    exists: bool
    is_dir: bool = False
    size: int = 0
    mode: int = 0


@dataclass(frozen=True)
class Facts:
    """Immutable snapshot of a host's identity and capabilities.

    Built once per host by :func:`hostprobe_mcp.services.facts.gather_facts`
    and read-only afterwards. Numeric fields use 0 for "undetermined" and the
    default-route addresses use "" for "no route".
    """

    os: OSInfo
    hostname: str
    kernel: str
    total_cpu: int = 0
    total_memory: int = 0
    ipv4_default: str = ""
    ipv6_default: str = ""
    package_manager: PackageManagerInfo | None = None
    init_system: InitSystemInfo | None = None

    def to_dict(self) -> dict[str, object]:
        """Flatten the snapshot for display."""
        return {
            "hostname": self.hostname,
            "os": self.os.id,
            "os_version": self.os.version_id,
            "os_name": self.os.pretty_name,
            "arch": self.os.arch,
            "kernel": self.kernel,
            "total_cpu": self.total_cpu,
            "total_memory_mib": self.total_memory,
            "ipv4_default": self.ipv4_default,
            "ipv6_default": self.ipv6_default,
            "package_manager": (
                self.package_manager.kind.value if self.package_manager else None
            ),
            "init_system": self.init_system.kind.value if self.init_system else None,
        }
