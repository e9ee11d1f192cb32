"""Tests for SSH config parsing."""

from pathlib import Path

from hostprobe_mcp.config import SSHConfigParser


def write_config(tmp_path: Path, content: str) -> Path:
    path = tmp_path / "config"
    path.write_text(content)
    return path


def test_parses_hosts(tmp_path: Path) -> None:
    path = write_config(
        tmp_path,
        """
# production
Host web1
    HostName 10.0.0.5
    User deploy
    Port 2222
    IdentityFile ~/.ssh/web_ed25519

Host db1
    HostName=db1.internal
""",
    )

    hosts = SSHConfigParser(config_path=path).parse()

    assert set(hosts) == {"web1", "db1"}
    web = hosts["web1"]
    assert web.hostname == "10.0.0.5"
    assert web.user == "deploy"
    assert web.port == 2222
    assert web.identity_file == str(Path.home() / ".ssh" / "web_ed25519")
    assert hosts["db1"].hostname == "db1.internal"
    assert hosts["db1"].user == "root"
    assert hosts["db1"].port == 22


def test_wildcard_block_provides_defaults(tmp_path: Path) -> None:
    path = write_config(
        tmp_path,
        """
Host *
    User admin
    Port 2200

Host web1
    HostName 10.0.0.5

Host web2
    HostName 10.0.0.6
    User ops
""",
    )

    hosts = SSHConfigParser(config_path=path).parse()

    assert set(hosts) == {"web1", "web2"}
    assert hosts["web1"].user == "admin"
    assert hosts["web1"].port == 2200
    assert hosts["web2"].user == "ops"


def test_skips_hosts_without_hostname_and_patterns(tmp_path: Path) -> None:
    path = write_config(
        tmp_path,
        "Host bastion\n    User jump\nHost *.internal\n    User x\nHost web1\n    HostName a\n",
    )

    assert list(SSHConfigParser(config_path=path).parse()) == ["web1"]


def test_invalid_port_falls_back_to_22(tmp_path: Path) -> None:
    path = write_config(tmp_path, "Host web1\n    HostName a\n    Port ssh\n")

    assert SSHConfigParser(config_path=path).parse()["web1"].port == 22


def test_allowlist_takes_precedence(tmp_path: Path) -> None:
    path = write_config(
        tmp_path, "Host a\n  HostName a\nHost b\n  HostName b\nHost c\n  HostName c\n"
    )

    allowed = SSHConfigParser(config_path=path, allowlist=["a"], blocklist=["a"]).parse()
    blocked = SSHConfigParser(config_path=path, blocklist=["b"]).parse()

    assert list(allowed) == ["a"]
    assert set(blocked) == {"a", "c"}


def test_missing_config_yields_no_hosts(tmp_path: Path) -> None:
    assert SSHConfigParser(config_path=tmp_path / "absent").parse() == {}


def test_localhost_alias_is_flagged(tmp_path: Path) -> None:
    path = write_config(tmp_path, "Host localhost\n    HostName 127.0.0.1\n")

    host = SSHConfigParser(config_path=path).parse()["localhost"]

    assert host.is_localhost
    assert host.connection_hostname == "127.0.0.1"
