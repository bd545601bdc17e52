"""Domain entities and port interfaces."""

from .entities import (
    Choice,
    CompletionRequest,
    CompletionResponse,
    ErrorType,
    FinishReason,
    Message,
    MessageRole,
    Tool,
    ToolCall,
    ToolDefinition,
    ToolHandler,
    ToolOutcome,
    ToolResult,
)
from .ports import ICompletionTransport

__all__ = [
    "Choice",
    "CompletionRequest",
    "CompletionResponse",
    "ErrorType",
    "FinishReason",
    "Message",
    "MessageRole",
    "Tool",
    "ToolCall",
    "ToolDefinition",
    "ToolHandler",
    "ToolOutcome",
    "ToolResult",
    "ICompletionTransport",
]
