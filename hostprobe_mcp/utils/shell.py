"""Shell command safety utilities."""

import shlex

from hostprobe_mcp.utils.validation import PolicyError, is_single_placeholder_template


def quote_path(path: str) -> str:
    """Safely quote a path for shell commands.

    Args:
        path: File system path to quote

    Returns:
        Shell-safe quoted path
    """
    return shlex.quote(path)


def quote_arg(arg: str) -> str:
    """Safely quote a shell argument.

    Args:
        arg: Argument to quote

    Returns:
        Shell-safe quoted argument
    """
    return shlex.quote(arg)


def render_template(template: str, *args: str) -> str:
    """Substitute quoted arguments into a single-placeholder template.

    Several arguments are quoted individually and joined with spaces, so
    ``render_template("apt-get install -y %s", "curl", "jq")`` yields
    ``apt-get install -y curl jq``.

    Raises:
        PolicyError: If the template is not a valid single-placeholder template
    """
    if not is_single_placeholder_template(template):
        raise PolicyError(f"invalid command template: {template!r}")
    return template % " ".join(quote_arg(a) for a in args)


def sh_c(command: str) -> str:
    """Wrap a command so that it runs under its own ``sh -c``."""
    return f"sh -c {shlex.quote(command)}"
