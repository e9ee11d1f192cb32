"""Tests for environment settings and the aggregated Config."""

from pathlib import Path

import pytest

from hostprobe_mcp.config import Config, Settings


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in ("COMMAND_TIMEOUT", "TRANSPORT", "RETRY_COUNT", "RETRY_DELAY"):
        monkeypatch.delenv(f"HOSTPROBE_{key}", raising=False)

    settings = Settings.from_env()

    assert settings.command_timeout == 30
    assert settings.transport == "http"
    assert settings.retry_count == 0
    assert settings.retry_delay == 1.0


def test_values_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("HOSTPROBE_COMMAND_TIMEOUT", "90")
    monkeypatch.setenv("HOSTPROBE_MAX_POOL_SIZE", "5")
    monkeypatch.setenv("HOSTPROBE_TRANSPORT", "STDIO")
    monkeypatch.setenv("HOSTPROBE_LOG_LEVEL", "debug")
    monkeypatch.setenv("HOSTPROBE_LOG_PAYLOADS", "yes")
    monkeypatch.setenv("HOSTPROBE_RETRY_COUNT", "3")
    monkeypatch.setenv("HOSTPROBE_RETRY_DELAY", "0.5")

    settings = Settings.from_env()

    assert settings.command_timeout == 90
    assert settings.max_pool_size == 5
    assert settings.transport == "stdio"
    assert settings.log_level == "DEBUG"
    assert settings.log_payloads is True
    assert settings.retry_count == 3
    assert settings.retry_delay == 0.5


@pytest.mark.parametrize("value", ["abc", "-4", "1.5"])
def test_invalid_ints_fall_back_to_default(monkeypatch: pytest.MonkeyPatch, value: str) -> None:
    monkeypatch.setenv("HOSTPROBE_RETRY_COUNT", value)

    assert Settings.from_env().retry_count == 0


def test_negative_delay_is_clamped(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("HOSTPROBE_RETRY_DELAY", "-2")

    assert Settings.from_env().retry_delay == 0.0


def test_unknown_transport_defaults_to_http(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("HOSTPROBE_TRANSPORT", "carrier-pigeon")

    assert Settings.from_env().transport == "http"


def test_config_from_env_applies_filters(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.setenv("HOSTPROBE_KNOWN_HOSTS", "none")
    monkeypatch.setenv("HOSTPROBE_BLOCKLIST", "db1, cache1")
    monkeypatch.setenv("HOSTPROBE_CONNECT_TIMEOUT", "3")
    monkeypatch.setenv("HOME", str(tmp_path))
    ssh_dir = tmp_path / ".ssh"
    ssh_dir.mkdir()
    (ssh_dir / "config").write_text(
        "Host web1\n  HostName 10.0.0.5\nHost db1\n  HostName 10.0.0.6\n"
    )

    config = Config.from_env()

    assert config.parser.blocklist == {"db1", "cache1"}
    assert list(config.get_hosts()) == ["web1"]
    assert config.get_host("db1") is None
    assert config.pool_options()["known_hosts"] is None
    assert config.pool_options()["connect_timeout"] == 3


def test_config_parses_ssh_config_once(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("HOSTPROBE_KNOWN_HOSTS", "none")
    config = Config.from_env()
    calls = []
    monkeypatch.setattr(config.parser, "parse", lambda: calls.append(1) or {})

    config.get_hosts()
    config.get_hosts()

    assert calls == [1]
