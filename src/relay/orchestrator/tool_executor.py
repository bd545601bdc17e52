"""
Tool Executor.

Handles dispatch of tool calls with error handling and result processing.
Resolves each call through the ToolRegistry and always produces a textual
result, so a failing tool never interrupts the conversation.
"""

from __future__ import annotations

import inspect
import json
import logging
import time
from typing import Any

from ..domain.entities import ToolCall, ToolOutcome, ToolResult
from ..exceptions import ToolArgumentsError
from ..tools.registry import ToolRegistry, parse_arguments

logger = logging.getLogger(__name__)


class ToolExecutor:
    """Executes tool calls with error handling.

    Usage:
        executor = ToolExecutor(tool_registry)

        result = await executor.execute_tool_call(tool_call)
        messages.append(result.to_message())

    Architecture:
        - Unknown tool names become a "not found" result
        - Unparseable arguments become an "invalid arguments" result and the
          handler is not invoked
        - Handler exceptions are caught and their message becomes the result
        - Every ToolCall yields exactly one ToolResult
    """

    GENERIC_ERROR = "Internal tool error"

    def __init__(self, tool_registry: ToolRegistry):
        """Initialize the tool executor.

        Args:
            tool_registry: Registry for tool lookup
        """
        self.tools = tool_registry

    async def execute_tool_call(self, tool_call: ToolCall) -> ToolResult:
        """Dispatch a single tool call.

        Args:
            tool_call: Tool call requested by the backend

        Returns:
            ToolResult carrying the text to feed back
        """
        tool = self.tools.lookup(tool_call.name)
        if tool is None:
            logger.warning(f"Tool not found: {tool_call.name}")
            return ToolResult(
                tool_call_id=tool_call.id,
                content=f"Tool '{tool_call.name}' not found",
                outcome=ToolOutcome.NOT_FOUND,
            )

        try:
            params = parse_arguments(tool_call.name, tool_call.arguments)
        except ToolArgumentsError as e:
            logger.warning(e.message)
            return ToolResult(
                tool_call_id=tool_call.id,
                content=e.message,
                outcome=ToolOutcome.INVALID_ARGUMENTS,
            )

        logger.info(f"Executing tool: {tool_call.name}")
        started = time.perf_counter()

        try:
            value = tool.handler(params)
            if inspect.isawaitable(value):
                value = await value
        except Exception as e:
            logger.error(f"Tool {tool_call.name} failed: {e}")
            return ToolResult(
                tool_call_id=tool_call.id,
                content=str(e) or self.GENERIC_ERROR,
                outcome=ToolOutcome.HANDLER_ERROR,
                latency_ms=self._elapsed_ms(started),
            )

        content = self._to_text(value)
        logger.debug(f"Tool {tool_call.name} result: {content[:200]}")
        return ToolResult(
            tool_call_id=tool_call.id,
            content=content,
            latency_ms=self._elapsed_ms(started),
        )

    async def execute_tool_calls(self, tool_calls: list[ToolCall]) -> list[ToolResult]:
        """Dispatch tool calls sequentially, in the order given.

        A failed tool call does not stop execution of subsequent tools, and
        a later call may rely on side effects of an earlier one.
        """
        results = []
        for tool_call in tool_calls:
            results.append(await self.execute_tool_call(tool_call))
        return results

    @staticmethod
    def _to_text(value: Any) -> str:
        if isinstance(value, str):
            return value
        if value is None:
            return ""
        try:
            return json.dumps(value)
        except (TypeError, ValueError):
            return str(value)

    @staticmethod
    def _elapsed_ms(started: float) -> int:
        return int((time.perf_counter() - started) * 1000)
