"""
Prompt Builder for the conversation loop.

Encapsulates request assembly:
- Identity system message from the agent's name and description
- Optional rules system message listing the agent's limits
- Tool schemas and tool choice

Every message is built fresh per request from the agent's configuration,
so a request never carries stale prompt state.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..domain.entities import CompletionRequest, Message, ToolDefinition

logger = logging.getLogger(__name__)


class PromptBuilder:
    """Builds completion requests for the agent.

    Usage:
        prompt_builder = PromptBuilder()

        request = prompt_builder.build_request(
            name=config.name,
            description=config.description,
            limits=config.limits,
            history=messages,
            tools=registry.get_all_tools(),
        )
    """

    LIMITS_HEADER = "You must always follow these rules:"

    def identity_message(self, name: str, description: str) -> Message:
        """System message introducing the agent."""
        return Message.system(f"Your name is {name}.\n\n{description}")

    def limits_message(self, limits: Sequence[str]) -> Optional[Message]:
        """System message with one line per limit, or None without limits."""
        if not limits:
            return None
        lines = "\n".join(f"- {limit}" for limit in limits)
        return Message.system(f"{self.LIMITS_HEADER}\n{lines}")

    def build_request(
        self,
        name: str,
        description: str,
        limits: Sequence[str],
        history: Sequence[Message],
        tools: Sequence[ToolDefinition],
    ) -> CompletionRequest:
        """Assemble identity, history and limits plus the tool schemas.

        Args:
            name: Agent name
            description: Agent description (system prompt body)
            limits: Behavioral rules, possibly empty
            history: Accumulated conversation, sent in full
            tools: Tool schemas to advertise

        Returns:
            Request letting the backend decide whether to call a tool
        """
        messages = [self.identity_message(name, description), *history]

        limits_msg = self.limits_message(limits)
        if limits_msg is not None:
            messages.append(limits_msg)

        return CompletionRequest(
            messages=messages,
            tools=list(tools),
            tool_choice="auto",
        )
