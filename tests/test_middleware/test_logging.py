"""Tests for logging middleware."""

import logging
from unittest.mock import AsyncMock, MagicMock

import pytest

from hostprobe_mcp.middleware.logging import LoggingMiddleware


@pytest.fixture
def mock_logger() -> MagicMock:
    return MagicMock()


@pytest.fixture
def mock_tool_context() -> MagicMock:
    """Create a mock middleware context for tool calls."""
    context = MagicMock()
    context.method = "tools/call"
    context.message = MagicMock()
    context.message.name = "service"
    context.message.arguments = {"host": "web1", "name": "nginx", "action": "status"}
    return context


@pytest.fixture
def mock_resource_context() -> MagicMock:
    context = MagicMock()
    context.method = "resources/read"
    context.message = MagicMock()
    context.message.uri = "hosts://list"
    return context


@pytest.mark.asyncio
async def test_logs_tool_call_with_arguments(
    mock_logger: MagicMock, mock_tool_context: MagicMock
) -> None:
    middleware = LoggingMiddleware(logger=mock_logger)
    call_next = AsyncMock(return_value="nginx on web1: active, enabled")

    result = await middleware.on_call_tool(mock_tool_context, call_next)

    assert result == "nginx on web1: active, enabled"
    messages = [call.args[1] % call.args[2:] for call in mock_logger.log.call_args_list]
    assert messages[0].startswith(">>> TOOL: service(host='web1'")
    assert messages[1].startswith("<<< TOOL: service")
    assert "chars" in messages[1]


@pytest.mark.asyncio
async def test_logs_resource_read(
    mock_logger: MagicMock, mock_resource_context: MagicMock
) -> None:
    middleware = LoggingMiddleware(logger=mock_logger)

    await middleware.on_read_resource(mock_resource_context, AsyncMock(return_value="a\nb"))

    assert "RESOURCE: hosts://list" in mock_logger.log.call_args_list[0].args[2]


@pytest.mark.asyncio
async def test_slow_requests_are_warnings(
    mock_logger: MagicMock, mock_tool_context: MagicMock
) -> None:
    middleware = LoggingMiddleware(logger=mock_logger, slow_threshold_ms=0)

    await middleware.on_call_tool(mock_tool_context, AsyncMock(return_value="ok"))

    assert mock_logger.log.call_args_list[-1].args[0] == logging.WARNING
    assert "SLOW!" in mock_logger.log.call_args_list[-1].args[4]


@pytest.mark.asyncio
async def test_errors_are_logged_and_reraised(
    mock_logger: MagicMock, mock_tool_context: MagicMock
) -> None:
    middleware = LoggingMiddleware(logger=mock_logger)

    with pytest.raises(TimeoutError):
        await middleware.on_call_tool(mock_tool_context, AsyncMock(side_effect=TimeoutError()))

    assert mock_logger.error.call_args.args[2] == "TimeoutError"


@pytest.mark.asyncio
async def test_generic_messages_logged_at_debug(mock_logger: MagicMock) -> None:
    middleware = LoggingMiddleware(logger=mock_logger)
    context = MagicMock()
    context.method = "prompts/list"

    await middleware.on_message(context, AsyncMock(return_value=None))

    assert mock_logger.log.call_args_list[0].args[0] == logging.DEBUG


@pytest.mark.asyncio
async def test_handled_methods_skip_generic_logging(
    mock_logger: MagicMock, mock_tool_context: MagicMock
) -> None:
    middleware = LoggingMiddleware(logger=mock_logger)

    await middleware.on_message(mock_tool_context, AsyncMock(return_value="ok"))

    mock_logger.log.assert_not_called()


@pytest.mark.parametrize(
    "result, summary",
    [
        (None, "null"),
        ("abc", "3 chars"),
        ("a\nb", "3 chars, 2 lines"),
        ([1, 2], "2 items"),
        ({"a": 1}, "1 keys"),
    ],
)
def test_summarize_result(result: object, summary: str) -> None:
    assert LoggingMiddleware()._summarize_result(result) == summary
