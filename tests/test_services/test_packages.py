"""Tests for package operations."""

import pytest

from hostprobe_mcp.models import APT, DNF, Facts, OSInfo
from hostprobe_mcp.services.packages import (
    clean_package_cache,
    install_packages,
    is_package_installed,
    remove_packages,
    update_package_cache,
)
from hostprobe_mcp.utils.validation import PolicyError

from fakes import FakeConnector


def make_facts(package_manager=APT) -> Facts:
    return Facts(
        os=OSInfo(id="ubuntu"),
        hostname="web1",
        kernel="6.8.0",
        package_manager=package_manager,
    )


@pytest.mark.asyncio
async def test_install_and_remove_quote_each_package() -> None:
    conn = FakeConnector()

    await install_packages(conn, make_facts(), ["curl", "jq"])
    await remove_packages(conn, make_facts(DNF), ["nano"])

    assert conn.commands == ["apt-get install -y curl jq", "dnf remove -y nano"]
    assert all(opts.sudo for opts in conn.options)


@pytest.mark.asyncio
async def test_cache_commands() -> None:
    conn = FakeConnector()

    await update_package_cache(conn, make_facts())
    await clean_package_cache(conn, make_facts(DNF))

    assert conn.commands == ["apt-get update -y", "dnf clean all"]


@pytest.mark.asyncio
async def test_apt_installed_status_is_read_from_output() -> None:
    conn = FakeConnector()
    conn.on("curl", "install ok installed")
    conn.on("vim", "deinstall ok config-files")
    conn.fail("ghost", stderr="dpkg-query: no packages found matching ghost")

    assert await is_package_installed(conn, make_facts(), "curl") is True
    assert await is_package_installed(conn, make_facts(), "vim") is False
    assert await is_package_installed(conn, make_facts(), "ghost") is False


@pytest.mark.asyncio
async def test_rpm_query_uses_exit_code() -> None:
    conn = FakeConnector().fail("rpm -q ghost")

    assert await is_package_installed(conn, make_facts(DNF), "bash") is True
    assert await is_package_installed(conn, make_facts(DNF), "ghost") is False


@pytest.mark.asyncio
async def test_empty_package_list_rejected() -> None:
    conn = FakeConnector()

    with pytest.raises(PolicyError):
        await install_packages(conn, make_facts(), [])

    assert conn.commands == []


@pytest.mark.asyncio
async def test_missing_package_manager_rejected() -> None:
    with pytest.raises(PolicyError, match="no supported package manager"):
        await install_packages(FakeConnector(), make_facts(None), ["curl"])
