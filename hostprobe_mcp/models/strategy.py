"""Package manager and init system strategy records.

Each record is a kind tag plus the command templates for that kind. Templates
that act on a package or service carry exactly one ``%s`` placeholder.
"""

from dataclasses import dataclass
from enum import Enum


class PackageManagerKind(str, Enum):
    """Supported package managers."""

    APT = "apt"
    YUM = "yum"
    DNF = "dnf"


class InitSystemKind(str, Enum):
    """Supported init systems."""

    SYSTEMD = "systemd"
    SYSV = "sysv"


@dataclass(frozen=True)
class PackageManagerInfo:
    """Command templates for a package manager."""

    kind: PackageManagerKind
    update_cmd: str
    install_cmd: str
    remove_cmd: str
    query_cmd: str
    clean_cmd: str


@dataclass(frozen=True)
class InitSystemInfo:
    """Command templates for an init system."""

    kind: InitSystemKind
    start_cmd: str
    stop_cmd: str
    enable_cmd: str
    disable_cmd: str
    restart_cmd: str
    is_active_cmd: str
    daemon_reload_cmd: str


APT = PackageManagerInfo(
    kind=PackageManagerKind.APT,
    update_cmd="apt-get update -y",
    install_cmd="apt-get install -y %s",
    remove_cmd="apt-get remove -y %s",
    query_cmd="dpkg-query -W -f='${Status}' %s",
    clean_cmd="apt-get clean",
)

YUM = PackageManagerInfo(
    kind=PackageManagerKind.YUM,
    update_cmd="yum update -y",
    install_cmd="yum install -y %s",
    remove_cmd="yum remove -y %s",
    query_cmd="rpm -q %s",
    clean_cmd="yum clean all",
)

DNF = PackageManagerInfo(
    kind=PackageManagerKind.DNF,
    update_cmd="dnf update -y",
    install_cmd="dnf install -y %s",
    remove_cmd="dnf remove -y %s",
    query_cmd="rpm -q %s",
    clean_cmd="dnf clean all",
)

SYSTEMD = InitSystemInfo(
    kind=InitSystemKind.SYSTEMD,
    start_cmd="systemctl start %s",
    stop_cmd="systemctl stop %s",
    enable_cmd="systemctl enable %s",
    disable_cmd="systemctl disable %s",
    restart_cmd="systemctl restart %s",
    is_active_cmd="systemctl is-active --quiet %s",
    daemon_reload_cmd="systemctl daemon-reload",
)

# Enabling services on SysV hosts is distribution specific (chkconfig,
# update-rc.d, rc-update), so the generic table leaves it unset.
SYSV = InitSystemInfo(
    kind=InitSystemKind.SYSV,
    start_cmd="service %s start",
    stop_cmd="service %s stop",
    enable_cmd="",
    disable_cmd="",
    restart_cmd="service %s restart",
    is_active_cmd="service %s status",
    daemon_reload_cmd="",
)
