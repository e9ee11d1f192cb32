"""Colorful console logging formatter."""

import logging
import re
from datetime import datetime

# ANSI color codes
COLORS = {
    "reset": "\033[0m",
    "bold": "\033[1m",
    "dim": "\033[2m",
    "white": "\033[37m",
    "cyan": "\033[36m",
    "green": "\033[32m",
    "yellow": "\033[33m",
    "bright_black": "\033[90m",
    "bright_red": "\033[91m",
    "bright_green": "\033[92m",
    "bright_yellow": "\033[93m",
    "bright_blue": "\033[94m",
    "bright_magenta": "\033[95m",
    "bright_cyan": "\033[96m",
    "bg_red": "\033[41m",
}

LEVEL_COLORS = {
    "DEBUG": COLORS["bright_black"],
    "INFO": COLORS["bright_green"],
    "WARNING": COLORS["bright_yellow"],
    "ERROR": COLORS["bright_red"],
    "CRITICAL": COLORS["bg_red"] + COLORS["white"] + COLORS["bold"],
}

# Component colors for logger names
COMPONENT_COLORS = {
    "hostprobe_mcp.server": COLORS["bright_cyan"],
    "hostprobe_mcp.services.pool": COLORS["bright_magenta"],
    "hostprobe_mcp.services.facts": COLORS["bright_blue"],
    "hostprobe_mcp.services": COLORS["cyan"],
    "hostprobe_mcp.tools": COLORS["bright_blue"],
    "hostprobe_mcp.middleware": COLORS["yellow"],
    "hostprobe_mcp.config": COLORS["green"],
    "default": COLORS["white"],
}

PACKAGE_PREFIX = "hostprobe_mcp."

# Patterns highlighted inside messages, in application order
HIGHLIGHTS = [
    (re.compile(r"(\d+\.?\d*ms)"), COLORS["bright_yellow"]),
    (re.compile(r"(\w+@[\w.\-]+:\d+)"), COLORS["bright_magenta"]),
    (re.compile(r"(exit code -?\d+)"), COLORS["bright_red"]),
    (re.compile(r"(pool_size=\d+(?:/\d+)?)"), COLORS["cyan"]),
    (re.compile(r"(\w+://\S+)"), COLORS["bright_blue"]),
]


class ColorfulFormatter(logging.Formatter):
    """Colorful log formatter with component highlighting."""

    def __init__(self, use_colors: bool = True) -> None:
        """Initialize the formatter.

        Args:
            use_colors: Whether to use ANSI colors.
        """
        super().__init__()
        self.use_colors = use_colors

    def _colorize(self, text: str, color: str) -> str:
        """Apply color to text if colors are enabled."""
        if not self.use_colors:
            return text
        return f"{color}{text}{COLORS['reset']}"

    def _get_component_color(self, name: str) -> str:
        """Get color for a logger name, longest matching prefix wins."""
        matches = [
            prefix
            for prefix in COMPONENT_COLORS
            if prefix != "default" and name.startswith(prefix)
        ]
        if not matches:
            return COMPONENT_COLORS["default"]
        return COMPONENT_COLORS[max(matches, key=len)]

    def _format_timestamp(self, record: logging.LogRecord) -> str:
        dt = datetime.fromtimestamp(record.created).astimezone()
        return f"{dt.strftime('%H:%M:%S')}.{int(record.msecs):03d} {dt.strftime('%m/%d')}"

    def _format_level(self, record: logging.LogRecord) -> str:
        color = LEVEL_COLORS.get(record.levelname, COLORS["white"])
        return self._colorize(f"{record.levelname:<8}", color)

    def _format_component(self, record: logging.LogRecord) -> str:
        name = record.name
        if name.startswith(PACKAGE_PREFIX):
            name = name[len(PACKAGE_PREFIX):]
        color = self._get_component_color(record.name)
        return self._colorize(f"{name:<20}", color)

    def _highlight_message(self, message: str) -> str:
        """Highlight durations, SSH addresses, exit codes and URIs."""
        if not self.use_colors:
            return message
        for pattern, color in HIGHLIGHTS:
            message = pattern.sub(f"{color}\\1{COLORS['reset']}", message)
        return message

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record as ``time | level | component | message``."""
        timestamp = self._colorize(self._format_timestamp(record), COLORS["dim"])
        level = self._format_level(record)
        component = self._format_component(record)
        sep = self._colorize("|", COLORS["dim"])
        message = self._highlight_message(record.getMessage())
        line = f"{timestamp} {sep} {level} {sep} {component} {sep} {message}"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


class MCPRequestFormatter(ColorfulFormatter):
    """Extended formatter with a leading marker per event type."""

    MARKERS = [
        (("starting", "ready"), "bright_green", ">>>"),
        (("shutting down", "shutdown"), "bright_red", "<<<"),
        (("error", "failed"), "bright_red", "!! "),
        (("warning", "slow", "degraded"), "bright_yellow", "!  "),
        (("completed", "succeeded", "collected"), "bright_green", "OK "),
        (("opening", "creating"), "bright_cyan", "+  "),
        (("closing", "removing"), "bright_yellow", "-  "),
        (("reusing",), "bright_magenta", "~  "),
    ]

    def format(self, record: logging.LogRecord) -> str:
        """Format with a marker chosen from the message text."""
        base = super().format(record)
        if not self.use_colors:
            return base

        message = record.getMessage().lower()
        for keywords, color, marker in self.MARKERS:
            if any(keyword in message for keyword in keywords):
                return f"{COLORS[color]}{marker}{COLORS['reset']} {base}"
        return f"    {base}"
