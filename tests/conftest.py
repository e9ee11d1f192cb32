"""Shared fixtures."""

from collections.abc import Iterator

import pytest

from hostprobe_mcp.models import OSInfo
from hostprobe_mcp.services.state import reset_state

from fakes import FakeConnector


@pytest.fixture(autouse=True)
def clean_state() -> Iterator[None]:
    """Start each test with empty global state and caches."""
    reset_state()
    yield
    reset_state()


@pytest.fixture
def ubuntu() -> OSInfo:
    return OSInfo(
        id="ubuntu",
        version_id="22.04",
        pretty_name="Ubuntu 22.04.4 LTS",
        codename="jammy",
        arch="x86_64",
        kernel="5.15.0-101-generic",
    )


@pytest.fixture
def fake(ubuntu: OSInfo) -> FakeConnector:
    """Ubuntu host with systemd, apt and a working route table."""
    conn = FakeConnector(os_info=ubuntu, executables={"systemctl", "apt-get", "nohup"})
    conn.on("hostname -f", "node1.example.com\n")
    conn.on("uname -r", "5.15.0-101-generic\n")
    conn.on("nproc", "4\n")
    conn.on("MemTotal", "8048576\n")
    conn.on("ip -4 route get", "8.8.8.8 via 10.0.0.1 dev eth0 src 10.0.0.5 uid 0\n")
    conn.on(
        "ip -6 route get",
        "2001:4860:4860::8888 from :: via fe80::1 dev eth0 src 2001:db8::5 metric 1024\n",
    )
    return conn
