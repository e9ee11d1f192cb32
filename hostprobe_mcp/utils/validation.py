"""Input validation for remote operations.

Every check here runs before anything is sent to a host; failures raise
:class:`PolicyError` and are never retried.
"""

import os
import re
from typing import Final


class PolicyError(ValueError):
    """Input rejected locally before any remote call was made."""

    pass


class PathTraversalError(PolicyError):
    """Attempted path traversal detected."""

    pass


# Path traversal patterns to reject
TRAVERSAL_PATTERNS: Final[list[str]] = [
    r"\.\./",  # ../
    r"/\.\.",  # /..
    r"^\.\.$",  # Just ..
    r"^\.\./",  # Starts with ../
]

# Characters that would let a name break out of a templated command
SHELL_METACHARACTERS: Final[str] = " \t\n\r`;&|$<>()!{}[]*?^~\\\"'\x00"

PLACEHOLDER: Final[str] = "%s"


def validate_path(path: str, allow_absolute: bool = True) -> str:
    """Validate a remote path for safety.

    Args:
        path: The path to validate
        allow_absolute: Whether to allow absolute paths (default: True)

    Returns:
        Normalized path

    Raises:
        PathTraversalError: If path contains traversal sequences
        PolicyError: If path is empty or otherwise invalid
    """
    if not path or not path.strip():
        raise PolicyError("Path cannot be empty")

    # Check for null bytes (can bypass validation in some systems)
    if "\x00" in path:
        raise PathTraversalError(f"Path contains null byte: {path!r}")

    for pattern in TRAVERSAL_PATTERNS:
        if re.search(pattern, path):
            raise PathTraversalError(f"Path traversal not allowed: {path}")

    normalized = os.path.normpath(path)

    if normalized.startswith(".."):
        raise PathTraversalError(f"Path escapes root after normalization: {path}")

    if not allow_absolute and os.path.isabs(normalized):
        raise PolicyError(f"Absolute paths not allowed: {path}")

    return normalized


def validate_name(name: str, kind: str = "name") -> str:
    """Validate a service, package or executable name.

    Args:
        name: Name to validate
        kind: What the name refers to, used in error messages

    Returns:
        The stripped name

    Raises:
        PolicyError: If the name is empty or contains shell metacharacters
    """
    stripped = name.strip() if name else ""
    if not stripped:
        raise PolicyError(f"{kind} cannot be empty")
    if any(char in SHELL_METACHARACTERS for char in stripped):
        raise PolicyError(f"invalid characters in {kind}: {stripped!r}")
    return stripped


def validate_host(host: str) -> str:
    """Validate a host name.

    Args:
        host: The host name to validate

    Returns:
        Validated host name

    Raises:
        PolicyError: If host name is invalid
    """
    if not host:
        raise PolicyError("Host cannot be empty")

    if len(host) > 253:
        raise PolicyError(f"Host name too long: {len(host)} chars")

    suspicious_chars = ["/", "\\", ";", "&", "|", "$", "`", "\n", "\r", "\x00"]
    for char in suspicious_chars:
        if char in host:
            raise PolicyError(f"Host contains invalid characters: {host!r}")

    return host


def is_single_placeholder_template(template: str) -> bool:
    """Check that a command template takes exactly one ``%s`` argument.

    Other ``%`` directives are rejected; a literal percent must be written
    as ``%%``.
    """
    if not template or not template.strip():
        return False
    remainder = template.replace("%%", "")
    return remainder.count("%") == 1 and PLACEHOLDER in remainder
