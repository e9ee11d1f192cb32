"""Tests for service control."""

import pytest

from hostprobe_mcp.models import SYSTEMD, SYSV, Facts, OSInfo
from hostprobe_mcp.services.service_manager import (
    daemon_reload,
    disable_service,
    enable_service,
    is_service_active,
    is_service_enabled,
    restart_service,
    start_service,
    stop_service,
)
from hostprobe_mcp.utils.validation import PolicyError

from fakes import FakeConnector


def make_facts(init_system=SYSTEMD) -> Facts:
    return Facts(
        os=OSInfo(id="debian"),
        hostname="db1",
        kernel="6.1.0",
        init_system=init_system,
    )


@pytest.mark.asyncio
async def test_start_stop_restart_render_templates_with_sudo() -> None:
    conn = FakeConnector()
    facts = make_facts()

    await start_service(conn, facts, "nginx")
    await stop_service(conn, facts, "nginx")
    await restart_service(conn, facts, "nginx")

    assert conn.commands == [
        "systemctl start nginx",
        "systemctl stop nginx",
        "systemctl restart nginx",
    ]
    assert all(opts.sudo for opts in conn.options)


@pytest.mark.asyncio
async def test_start_has_no_precheck() -> None:
    conn = FakeConnector()

    await start_service(conn, make_facts(SYSV), "cron")

    assert conn.commands == ["service cron start"]


@pytest.mark.asyncio
async def test_enable_on_systemd() -> None:
    conn = FakeConnector()

    await enable_service(conn, make_facts(), "docker")
    await disable_service(conn, make_facts(), "docker")

    assert conn.commands == ["systemctl enable docker", "systemctl disable docker"]


@pytest.mark.asyncio
async def test_enable_on_sysv_is_not_reliably_supported() -> None:
    """SysV enable fails locally with a policy error and sends nothing."""
    conn = FakeConnector(executables={"service"})

    with pytest.raises(PolicyError, match="not reliably supported"):
        await enable_service(conn, make_facts(SYSV), "x")

    with pytest.raises(PolicyError, match="not reliably supported"):
        await disable_service(conn, make_facts(SYSV), "x")

    assert conn.commands == []


@pytest.mark.asyncio
async def test_is_active_uses_check_semantics() -> None:
    conn = FakeConnector().fail("is-active", exit_code=3)
    facts = make_facts()

    assert await is_service_active(conn, facts, "nginx") is False
    assert conn.commands == ["systemctl is-active --quiet nginx"]
    assert not conn.options[0].sudo


@pytest.mark.asyncio
async def test_is_active_true_on_sysv() -> None:
    conn = FakeConnector()

    assert await is_service_active(conn, make_facts(SYSV), "ssh") is True
    assert conn.commands == ["service ssh status"]


@pytest.mark.asyncio
async def test_is_enabled_systemd_and_sysv() -> None:
    conn = FakeConnector().fail("is-enabled")

    assert await is_service_enabled(conn, make_facts(), "nginx") is False
    assert await is_service_enabled(conn, make_facts(SYSV), "ssh") is True
    assert "grep -qE '/S[0-9]+ssh$'" in conn.commands[1]


@pytest.mark.asyncio
async def test_daemon_reload_is_noop_on_sysv() -> None:
    conn = FakeConnector()

    await daemon_reload(conn, make_facts(SYSV))
    await daemon_reload(conn, make_facts())

    assert conn.commands == ["systemctl daemon-reload"]


@pytest.mark.asyncio
async def test_missing_init_system_is_policy_error() -> None:
    conn = FakeConnector()

    with pytest.raises(PolicyError, match="no supported init system"):
        await start_service(conn, make_facts(None), "nginx")

    assert conn.commands == []


@pytest.mark.asyncio
@pytest.mark.parametrize("name", ["", "  ", "nginx; rm -rf /", "$(id)"])
async def test_invalid_service_names_rejected(name: str) -> None:
    conn = FakeConnector()

    with pytest.raises(PolicyError):
        await stop_service(conn, make_facts(), name)

    assert conn.commands == []
