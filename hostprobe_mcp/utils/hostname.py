"""Hostname detection utilities for localhost identification."""

import socket

LOCAL_ALIASES = frozenset({"localhost", "local", "127.0.0.1", "::1"})


def get_server_hostname() -> str:
    """Get the hostname of the machine running hostprobe (lowercase)."""
    return socket.gethostname().lower()


def is_localhost_target(target_host: str) -> bool:
    """Check if target host is the machine we are running on.

    Matches loopback aliases and the server hostname, comparing short and
    fully-qualified forms case-insensitively.
    """
    if not target_host:
        return False

    target_lower = target_host.lower()
    if target_lower in LOCAL_ALIASES:
        return True

    server_hostname = get_server_hostname()
    if target_lower == server_hostname:
        return True

    # FQDN on one side, short name on the other
    return target_lower.split(".")[0] == server_hostname.split(".")[0] and (
        "." in target_lower or "." in server_hostname
    )
