"""Parsers for remote command output."""

import re

OCTAL_ESCAPE = re.compile(r"\\([0-7]{3})")


def parse_key_values(content: str, separator: str = "=", quote: str = '"') -> dict[str, str]:
    """Parse ``KEY<sep>VALUE`` lines such as /etc/os-release or lsb_release.

    Blank lines and ``#`` comments are skipped; surrounding quotes are removed
    from values.

    Args:
        content: Text to parse
        separator: Separator between key and value
        quote: Quote character to strip from values (empty to keep values)

    Returns:
        Mapping of key to value
    """
    values: dict[str, str] = {}
    for line in content.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or separator not in line:
            continue
        key, value = line.split(separator, 1)
        value = value.strip()
        if quote:
            value = value.strip(quote).strip("'")
        values[key.strip()] = value
    return values


def parse_mount_targets(content: str) -> list[str]:
    """Return the mount-point column of a /proc/mounts style table.

    The kernel writes whitespace and backslashes in paths as ``\\ooo`` octal
    escapes (``/mnt/my\\040disk``); they are decoded here.
    """
    targets = []
    for line in content.splitlines():
        fields = line.split()
        if len(fields) >= 2:
            targets.append(OCTAL_ESCAPE.sub(lambda m: chr(int(m.group(1), 8)), fields[1]))
    return targets


def parse_route_source(output: str) -> str:
    """Extract the source address from ``ip route get`` output.

    Example input::

        8.8.8.8 via 10.0.0.1 dev eth0 src 10.0.0.5 uid 0

    Returns:
        The address after ``src``, or "" when there is none.
    """
    tokens = output.split()
    for index, token in enumerate(tokens[:-1]):
        if token == "src":
            return tokens[index + 1]
    return ""


def parse_int(output: str) -> int:
    """Parse a single integer from command output.

    Raises:
        ValueError: If the output is not one non-negative integer
    """
    value = int(output.strip())
    if value < 0:
        raise ValueError(f"negative value: {value}")
    return value
