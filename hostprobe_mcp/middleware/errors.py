"""Error handling middleware.

Every failure reaching the MCP layer is counted by type and by category
(transport, command, policy, strategy, facts, retry, internal), logged once,
and re-raised.
"""

import asyncio
import logging
import traceback
from collections import defaultdict
from collections.abc import Callable
from typing import Any

from fastmcp.server.middleware import MiddlewareContext

from hostprobe_mcp.middleware.base import HostprobeMiddleware
from hostprobe_mcp.models import CommandError, RetryError
from hostprobe_mcp.services.connection import ConnectionError
from hostprobe_mcp.services.facts import FactsError
from hostprobe_mcp.services.strategy import StrategyError
from hostprobe_mcp.utils.validation import PolicyError

ErrorCallback = Callable[[Exception, MiddlewareContext], None]

# Checked in order; the first matching class wins
_CATEGORIES: tuple[tuple[type[BaseException] | tuple[type[BaseException], ...], str], ...] = (
    (PolicyError, "policy"),
    (CommandError, "command"),
    (StrategyError, "strategy"),
    (FactsError, "facts"),
    (RetryError, "retry"),
    ((ConnectionError, TimeoutError, asyncio.TimeoutError, OSError), "transport"),
)


def classify_error(error: BaseException) -> str:
    """Map an exception onto its error category."""
    for types, category in _CATEGORIES:
        if isinstance(error, types):
            return category
    return "internal"


class ErrorHandlingMiddleware(HostprobeMiddleware):
    """Logs and counts errors, then re-raises them.

    Example:
        >>> def on_error(exc, ctx):
        ...     print(f"Error in {ctx.method}: {exc}")
        >>> mcp.add_middleware(ErrorHandlingMiddleware(error_callback=on_error))
    """

    def __init__(
        self,
        logger: logging.Logger | None = None,
        include_traceback: bool = False,
        error_callback: ErrorCallback | None = None,
    ) -> None:
        """Initialize error handling middleware.

        Args:
            logger: Optional custom logger.
            include_traceback: Whether to include full traceback in logs.
            error_callback: Optional callback receiving (exception, context).
        """
        super().__init__(logger=logger)
        self.include_traceback = include_traceback
        self.error_callback = error_callback
        self._error_counts: dict[str, int] = defaultdict(int)
        self._category_counts: dict[str, int] = defaultdict(int)

    def get_error_stats(self) -> dict[str, int]:
        """Get error counts by exception type name."""
        return dict(self._error_counts)

    def get_category_stats(self) -> dict[str, int]:
        """Get error counts by category."""
        return dict(self._category_counts)

    def reset_stats(self) -> None:
        """Reset error statistics."""
        self._error_counts.clear()
        self._category_counts.clear()

    async def on_message(
        self,
        context: MiddlewareContext,
        call_next: Any,
    ) -> Any:
        """Run the next handler, recording any exception it raises."""
        try:
            return await call_next(context)
        except Exception as e:
            error_type = type(e).__name__
            category = classify_error(e)
            self._error_counts[error_type] += 1
            self._category_counts[category] += 1

            message = "Error in %s [%s]: %s: %s"
            args: tuple[Any, ...] = (context.method, category, error_type, e)
            if self.include_traceback:
                message += "\n%s"
                args += (traceback.format_exc(),)
            self.logger.error(message, *args)

            if self.error_callback:
                try:
                    self.error_callback(e, context)
                except Exception as callback_error:
                    self.logger.warning("Error callback failed: %s", callback_error)

            raise
