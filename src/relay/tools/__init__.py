"""Tool system for the relay agent.

Provides:
- Tool registry with duplicate-name protection
- Argument decoding for dispatch
- Built-in time and HTTP tools
"""

from .builtin import RemoteTool, TimeTool
from .registry import ToolRegistry, parse_arguments

__all__ = [
    "RemoteTool",
    "TimeTool",
    "ToolRegistry",
    "parse_arguments",
]
