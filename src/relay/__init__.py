"""
Relay: conversational agent runtime.

Drives a multi-turn exchange between a user, interchangeable language-model
backends ("providers") and callable tools, until a final answer is produced
or the run's resources are exhausted.

Architecture:
- Domain: Messages, tool calls, tool schemas and completion shapes
- Providers: Backend transports (OpenAI-compatible, Anthropic) and the
  per-run provider pool
- Tools: Tool registry, argument decoding and built-in tools
- Orchestrator: Agent entry point and the bounded conversation loop

Environment-based setup lives in ``relay.config``.
"""

from .domain.entities import (
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
    ToolOutcome,
    ToolResult,
)
from .domain.ports import ICompletionTransport
from .exceptions import (
    ConfigurationError,
    EmptyResponseError,
    ProviderPoolExhaustedError,
    RelayError,
    ToolAlreadyExistsError,
    ToolArgumentsError,
    ToolError,
    TransportError,
)
from .orchestrator import (
    EXHAUSTED_MESSAGE,
    LOOP_LIMIT_MESSAGE,
    Agent,
    AgentConfig,
    ConversationLoop,
    LoopResult,
    TerminalState,
    ToolOptions,
)
from .providers import (
    ANTHROPIC_BASE_URL,
    DEEPSEEK_BASE_URL,
    GROQ_BASE_URL,
    OPENAI_BASE_URL,
    AnthropicTransport,
    ApiFormat,
    OpenAITransport,
    ProviderConfig,
    ProviderPool,
    TransportRouter,
)
from .tools import RemoteTool, TimeTool, ToolRegistry

__version__ = "0.1.0"

__all__ = [
    # Domain
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
    "ToolOutcome",
    "ToolResult",
    "ICompletionTransport",
    # Errors
    "ConfigurationError",
    "EmptyResponseError",
    "ProviderPoolExhaustedError",
    "RelayError",
    "ToolAlreadyExistsError",
    "ToolArgumentsError",
    "ToolError",
    "TransportError",
    # Orchestrator
    "EXHAUSTED_MESSAGE",
    "LOOP_LIMIT_MESSAGE",
    "Agent",
    "AgentConfig",
    "ConversationLoop",
    "LoopResult",
    "TerminalState",
    "ToolOptions",
    # Providers
    "ANTHROPIC_BASE_URL",
    "DEEPSEEK_BASE_URL",
    "GROQ_BASE_URL",
    "OPENAI_BASE_URL",
    "AnthropicTransport",
    "ApiFormat",
    "OpenAITransport",
    "ProviderConfig",
    "ProviderPool",
    "TransportRouter",
    # Tools
    "RemoteTool",
    "TimeTool",
    "ToolRegistry",
]
