"""Tests for the console log formatters."""

import logging

from hostprobe_mcp.utils.console import COLORS, ColorfulFormatter, MCPRequestFormatter


def make_record(name: str, message: str, level: int = logging.INFO) -> logging.LogRecord:
    return logging.LogRecord(name, level, __file__, 1, message, None, None)


def test_plain_format_has_columns():
    formatter = ColorfulFormatter(use_colors=False)

    line = formatter.format(make_record("hostprobe_mcp.services.facts", "Gathered facts"))

    _, level, component, message = (part.strip() for part in line.split("|"))
    assert level == "INFO"
    assert component == "services.facts"
    assert message == "Gathered facts"


def test_colors_highlight_exit_codes():
    formatter = ColorfulFormatter(use_colors=True)

    line = formatter.format(
        make_record("hostprobe_mcp.tools", "command 'x' exited with exit code 3", logging.ERROR)
    )

    assert f"{COLORS['bright_red']}exit code 3{COLORS['reset']}" in line


def test_request_formatter_marks_events():
    formatter = MCPRequestFormatter(use_colors=True)

    opening = formatter.format(make_record("hostprobe_mcp.services.pool", "Opening SSH connection"))
    plain = formatter.format(make_record("hostprobe_mcp.server", "Loaded 2 host(s)"))

    assert opening.startswith(f"{COLORS['bright_cyan']}+  {COLORS['reset']} ")
    assert plain.startswith("    ")


def test_request_formatter_without_colors_adds_no_marker():
    formatter = MCPRequestFormatter(use_colors=False)

    line = formatter.format(make_record("hostprobe_mcp.server", "shutting down"))

    assert not line.startswith("<<<")
    assert "\033[" not in line
