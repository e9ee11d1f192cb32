"""Logging middleware for request/response tracking with timing."""

import json
import logging
import time
from typing import Any

from fastmcp.server.middleware import MiddlewareContext

from hostprobe_mcp.middleware.base import HostprobeMiddleware

# Methods with dedicated hooks below; on_message skips them
_HANDLED_METHODS = frozenset({"tools/call", "resources/read", "tools/list", "resources/list"})


class LoggingMiddleware(HostprobeMiddleware):
    """Logs tool calls and resource reads with arguments, result size and duration.

    Requests slower than ``slow_threshold_ms`` are logged at WARNING.

    Example:
        >>> mcp.add_middleware(LoggingMiddleware(include_payloads=True))
    """

    def __init__(
        self,
        logger: logging.Logger | None = None,
        include_payloads: bool = False,
        max_payload_length: int = 1000,
        slow_threshold_ms: float = 1000.0,
    ) -> None:
        """Initialize logging middleware.

        Args:
            logger: Optional custom logger.
            include_payloads: Whether to log request/response payloads.
            max_payload_length: Maximum payload length before truncation.
            slow_threshold_ms: Threshold in ms for slow request warnings.
        """
        super().__init__(logger=logger)
        self.include_payloads = include_payloads
        self.max_payload_length = max_payload_length
        self.slow_threshold_ms = slow_threshold_ms

    def _truncate(self, data: Any) -> str:
        try:
            text = json.dumps(data, default=str)
        except (TypeError, ValueError):
            text = str(data)
        if len(text) > self.max_payload_length:
            return text[: self.max_payload_length] + "... [truncated]"
        return text

    def _format_args(self, args: dict[str, Any] | None) -> str:
        if not args:
            return "()"
        parts = []
        for key, value in args.items():
            if isinstance(value, str) and len(value) > 50:
                value = value[:50] + "..."
            parts.append(f"{key}={value!r}")
        return f"({', '.join(parts)})"

    def _format_duration(self, duration_ms: float) -> str:
        if duration_ms >= self.slow_threshold_ms:
            return f"{duration_ms:.1f}ms SLOW!"
        return f"{duration_ms:.1f}ms"

    async def _timed(
        self,
        label: str,
        context: MiddlewareContext,
        call_next: Any,
        level: int = logging.INFO,
    ) -> Any:
        """Call the next handler, logging entry, result and duration."""
        start = time.perf_counter()
        self.logger.log(level, ">>> %s", label)
        try:
            result = await call_next(context)
        except Exception as e:
            duration_ms = (time.perf_counter() - start) * 1000
            self.logger.error(
                "!!! %s -> %s: %s [%s]",
                label,
                type(e).__name__,
                e,
                self._format_duration(duration_ms),
            )
            raise

        duration_ms = (time.perf_counter() - start) * 1000
        if duration_ms >= self.slow_threshold_ms:
            level = logging.WARNING
        self.logger.log(
            level,
            "<<< %s -> %s [%s]",
            label,
            self._summarize_result(result),
            self._format_duration(duration_ms),
        )
        if self.include_payloads and result is not None:
            self.logger.debug("    Result: %s", self._truncate(result))
        return result

    async def on_call_tool(self, context: MiddlewareContext, call_next: Any) -> Any:
        """Log tool calls with name, arguments, and timing."""
        tool_name = getattr(context.message, "name", "unknown")
        args = getattr(context.message, "arguments", None)
        if self.include_payloads and args:
            self.logger.debug("    Args: %s", self._truncate(args))
        return await self._timed(
            f"TOOL: {tool_name}{self._format_args(args)}", context, call_next
        )

    async def on_read_resource(self, context: MiddlewareContext, call_next: Any) -> Any:
        """Log resource reads with URI and timing."""
        uri = getattr(context.message, "uri", "unknown")
        return await self._timed(f"RESOURCE: {uri}", context, call_next)

    async def on_list_tools(self, context: MiddlewareContext, call_next: Any) -> Any:
        """Log tool listing requests."""
        return await self._timed("LIST TOOLS", context, call_next)

    async def on_list_resources(self, context: MiddlewareContext, call_next: Any) -> Any:
        """Log resource listing requests."""
        return await self._timed("LIST RESOURCES", context, call_next)

    async def on_message(self, context: MiddlewareContext, call_next: Any) -> Any:
        """Log other MCP messages at DEBUG."""
        if context.method in _HANDLED_METHODS:
            return await call_next(context)
        return await self._timed(f"MCP: {context.method}", context, call_next, logging.DEBUG)

    def _summarize_result(self, result: Any) -> str:
        """Create a brief summary of a result for logging."""
        if result is None:
            return "null"
        if isinstance(result, str):
            lines = result.count("\n") + 1
            if lines > 1:
                return f"{len(result)} chars, {lines} lines"
            return f"{len(result)} chars"
        if isinstance(result, (list, tuple)):
            return f"{len(result)} items"
        if isinstance(result, dict):
            return f"{len(result)} keys"
        for attr in ("tools", "resources", "content"):
            items = getattr(result, attr, None)
            if isinstance(items, (list, tuple)):
                return f"{len(items)} {attr}"
        return type(result).__name__
