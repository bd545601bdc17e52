"""Agent Orchestrator.

The orchestrator coordinates the components of the relay agent:
- Provider selection and failover per run
- Request assembly (identity, history, limits, tool schemas)
- Tool dispatch with error containment
- Bounded conversation loop with fixed terminal messages
"""

from .agent import Agent, AgentConfig, ToolOptions
from .conversation_loop import (
    DEFAULT_MAX_ITERATIONS,
    EXHAUSTED_MESSAGE,
    LOOP_LIMIT_MESSAGE,
    ConversationLoop,
    LoopResult,
    TerminalState,
)
from .prompt_builder import PromptBuilder
from .tool_executor import ToolExecutor

__all__ = [
    "Agent",
    "AgentConfig",
    "ToolOptions",
    "DEFAULT_MAX_ITERATIONS",
    "EXHAUSTED_MESSAGE",
    "LOOP_LIMIT_MESSAGE",
    "ConversationLoop",
    "LoopResult",
    "TerminalState",
    "PromptBuilder",
    "ToolExecutor",
]
