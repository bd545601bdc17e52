"""
Domain entities for the relay agent.

These are pure domain objects with no infrastructure dependencies.
They define the data that flows through the conversation loop:
messages, tool calls, tool definitions and the normalized shapes
exchanged with completion backends.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Awaitable, Callable, Mapping, Optional, Union

# ============================================
# Message Types
# ============================================


class MessageRole(str, Enum):
    """Role of a message in a conversation."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"
    TOOL = "tool"


def _new_call_id() -> str:
    return f"call_{uuid.uuid4().hex[:24]}"


@dataclass
class ToolCall:
    """A tool invocation requested by a backend.

    Attributes:
        id: Tool call identifier, echoed back by the tool message
        name: Name of the requested tool
        arguments: Raw serialized arguments as sent by the backend
    """

    name: str
    arguments: str = ""
    id: str = field(default_factory=_new_call_id)

    def __post_init__(self):
        # Some backends omit ids; tool messages must still reference one.
        if not self.id:
            self.id = _new_call_id()
        if self.arguments is None:
            self.arguments = ""

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "arguments": self.arguments}


@dataclass
class Message:
    """A single message in a conversation.

    Attributes:
        role: Message role (user, assistant, system, tool)
        content: Message text content (None for tool-call-only assistant turns)
        tool_calls: Tool calls requested by an assistant message
        tool_call_id: Tool call answered by a tool message
        id: Unique message identifier
        created_at: Creation timestamp
    """

    role: MessageRole
    content: Optional[str] = None
    tool_calls: Optional[list[ToolCall]] = None
    tool_call_id: Optional[str] = None
    id: Optional[uuid.UUID] = None
    created_at: Optional[datetime] = None

    def __post_init__(self):
        self.role = MessageRole(self.role)
        if self.role == MessageRole.TOOL and not self.tool_call_id:
            raise ValueError("tool messages require a tool_call_id")
        if self.id is None:
            self.id = uuid.uuid4()
        if self.created_at is None:
            self.created_at = datetime.now(timezone.utc)

    @classmethod
    def system(cls, content: str) -> Message:
        return cls(role=MessageRole.SYSTEM, content=content)

    @classmethod
    def user(cls, content: str) -> Message:
        return cls(role=MessageRole.USER, content=content)

    @classmethod
    def assistant(
        cls, content: Optional[str], tool_calls: Optional[list[ToolCall]] = None
    ) -> Message:
        return cls(role=MessageRole.ASSISTANT, content=content, tool_calls=tool_calls)

    @classmethod
    def tool(cls, tool_call_id: str, content: str) -> Message:
        return cls(role=MessageRole.TOOL, content=content, tool_call_id=tool_call_id)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {
            "role": self.role.value,
            "content": self.content,
            "id": str(self.id),
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
        if self.tool_calls is not None:
            result["tool_calls"] = [tc.to_dict() for tc in self.tool_calls]
        if self.tool_call_id is not None:
            result["tool_call_id"] = self.tool_call_id
        return result

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Message:
        """Rebuild a message from ``to_dict`` output or a plain role/content dict."""
        tool_calls = data.get("tool_calls")
        message_id = data.get("id")
        created_at = data.get("created_at")
        return cls(
            role=MessageRole(data["role"]),
            content=data.get("content"),
            tool_calls=(
                [
                    ToolCall(
                        id=tc["id"],
                        name=tc["name"],
                        arguments=tc.get("arguments") or "",
                    )
                    for tc in tool_calls
                ]
                if tool_calls is not None
                else None
            ),
            tool_call_id=data.get("tool_call_id"),
            id=uuid.UUID(message_id) if message_id else None,
            created_at=datetime.fromisoformat(created_at) if created_at else None,
        )


# ============================================
# Tool System
# ============================================

ToolHandler = Callable[[dict[str, Any]], Union[Awaitable[Any], Any]]


@dataclass
class ToolDefinition:
    """Schema of an available tool as advertised to backends.

    Attributes:
        name: Tool name (e.g., 'get_time')
        description: Human-readable description
        parameters: Parameter name -> description; every parameter is free text
    """

    name: str
    description: str
    parameters: dict[str, str] = field(default_factory=dict)

    def json_schema(self) -> dict[str, Any]:
        """Build the JSON Schema object for the parameters."""
        return {
            "type": "object",
            "properties": {
                key: {"type": "string", "description": description}
                for key, description in self.parameters.items()
            },
        }

    def to_openai_format(self) -> dict[str, Any]:
        """Convert to OpenAI function calling format."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.json_schema(),
            },
        }

    def to_anthropic_format(self) -> dict[str, Any]:
        """Convert to Anthropic tool use format."""
        return {
            "name": self.name,
            "description": self.description,
            "input_schema": self.json_schema(),
        }


@dataclass
class Tool:
    """A registered tool: its schema plus the handler that runs it."""

    name: str
    description: str
    handler: ToolHandler
    parameters: dict[str, str] = field(default_factory=dict)

    @property
    def definition(self) -> ToolDefinition:
        return ToolDefinition(
            name=self.name,
            description=self.description,
            parameters=dict(self.parameters),
        )


class ToolOutcome(str, Enum):
    """How a single tool dispatch ended."""

    SUCCESS = "success"
    NOT_FOUND = "not_found"
    INVALID_ARGUMENTS = "invalid_arguments"
    HANDLER_ERROR = "handler_error"


@dataclass
class ToolResult:
    """Result from a tool dispatch.

    Attributes:
        tool_call_id: ID of the tool call this is a result for
        content: Text fed back to the backend as the tool message
        outcome: Dispatch outcome
        latency_ms: Handler execution time in milliseconds
    """

    tool_call_id: str
    content: str
    outcome: ToolOutcome = ToolOutcome.SUCCESS
    latency_ms: Optional[int] = None

    @property
    def success(self) -> bool:
        return self.outcome == ToolOutcome.SUCCESS

    def to_message(self) -> Message:
        return Message.tool(self.tool_call_id, self.content)


# ============================================
# Completion Exchange
# ============================================


class FinishReason(str, Enum):
    """Normalized stop reasons reported by backends."""

    STOP = "stop"
    LENGTH = "length"
    TOOL_CALLS = "tool_calls"
    CONTENT_FILTER = "content_filter"


@dataclass
class Choice:
    """One candidate completion returned by a backend.

    Attributes:
        finish_reason: Stop reason as reported (normalized where known)
        content: Text content, if any
        tool_calls: Requested tool calls, in backend order
        index: Position of the choice in the response
    """

    finish_reason: Optional[str] = None
    content: Optional[str] = None
    tool_calls: list[ToolCall] = field(default_factory=list)
    index: int = 0

    @property
    def requests_tools(self) -> bool:
        return self.finish_reason == FinishReason.TOOL_CALLS.value


@dataclass
class CompletionRequest:
    """Request handed to a transport; the transport injects the model."""

    messages: list[Message]
    tools: list[ToolDefinition] = field(default_factory=list)
    tool_choice: str = "auto"


@dataclass
class CompletionResponse:
    """Normalized completion returned by a transport."""

    choices: list[Choice] = field(default_factory=list)
    id: Optional[str] = None
    model: Optional[str] = None


# ============================================
# Errors
# ============================================


class ErrorType(str, Enum):
    """Classification of backend errors."""

    RECOVERABLE = "recoverable"  # Can retry
    FATAL = "fatal"  # Must abort
    TIMEOUT = "timeout"  # Backend timeout
    RATE_LIMIT = "rate_limit"  # Rate limited, back off
