"""
Tool Registry.

Holds the named tools an agent exposes to its backends and resolves a
requested tool name to its handler at dispatch time.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

from ..domain.entities import Tool, ToolDefinition
from ..exceptions import ToolAlreadyExistsError, ToolArgumentsError

logger = logging.getLogger(__name__)


class ToolRegistry:
    """Name-keyed registry of agent tools.

    Usage:
        registry = ToolRegistry()
        registry.register(Tool(name="get_time", description="...", handler=fn))

        # Advertise to a backend
        schemas = registry.get_all_tools()

        # Resolve at dispatch time
        tool = registry.lookup("get_time")

    Lookup failure returns None rather than raising, because an unknown
    tool name becomes a conversation message, not an error.
    """

    def __init__(self):
        self._tools: dict[str, Tool] = {}

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    @property
    def names(self) -> list[str]:
        return list(self._tools)

    def register(self, tool: Tool) -> Tool:
        """Add a tool.

        Raises:
            ToolAlreadyExistsError: If a tool with the same name exists
        """
        if tool.name in self._tools:
            raise ToolAlreadyExistsError(tool.name)
        self._tools[tool.name] = tool
        logger.info(f"Registered tool: {tool.name}")
        return tool

    def unregister(self, name: str) -> bool:
        """Remove a tool by name.

        Returns:
            True if a tool was removed
        """
        removed = self._tools.pop(name, None)
        if removed is not None:
            logger.info(f"Unregistered tool: {name}")
        return removed is not None

    def lookup(self, name: str) -> Optional[Tool]:
        return self._tools.get(name)

    def get_all_tools(self) -> list[ToolDefinition]:
        """Schemas of every registered tool, in registration order."""
        return [tool.definition for tool in self._tools.values()]


def parse_arguments(tool_name: str, arguments: Optional[str]) -> dict[str, Any]:
    """Decode a tool call's raw argument text into a parameter map.

    Empty or whitespace-only text is an empty map.

    Raises:
        ToolArgumentsError: If the text is not a JSON object
    """
    if arguments is None or not arguments.strip():
        return {}

    try:
        params = json.loads(arguments)
    except json.JSONDecodeError as e:
        raise ToolArgumentsError(
            f"Failed to parse arguments for tool '{tool_name}': {e}",
            tool_name=tool_name,
            cause=e,
        )

    if not isinstance(params, dict):
        raise ToolArgumentsError(
            f"Failed to parse arguments for tool '{tool_name}': "
            f"expected a JSON object, got {type(params).__name__}",
            tool_name=tool_name,
        )

    return params
