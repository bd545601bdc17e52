"""
Unit tests for the PromptBuilder.
"""

import pytest

from relay.domain.entities import Message, MessageRole, ToolDefinition
from relay.orchestrator.prompt_builder import PromptBuilder


@pytest.fixture
def builder():
    return PromptBuilder()


class TestPromptBuilder:
    """Tests for request assembly."""

    def test_identity_message(self, builder):
        message = builder.identity_message("Support_Agent", "You help users.")
        assert message.role == MessageRole.SYSTEM
        assert message.content == "Your name is Support_Agent.\n\nYou help users."

    def test_limits_message(self, builder):
        message = builder.limits_message(["Be polite", "No prices"])
        assert message.content == (
            "You must always follow these rules:\n- Be polite\n- No prices"
        )

    def test_no_limits_message(self, builder):
        assert builder.limits_message([]) is None

    def test_request_order(self, builder):
        history = [Message.user("Hi"), Message.assistant("Hello"), Message.user("Bye")]

        request = builder.build_request(
            name="A", description="B", limits=["L"], history=history, tools=[]
        )

        assert len(request.messages) == 5
        assert request.messages[1:4] == history
        assert request.messages[0].role == MessageRole.SYSTEM
        assert request.messages[-1].role == MessageRole.SYSTEM

    def test_request_does_not_mutate_history(self, builder):
        history = [Message.user("Hi")]

        builder.build_request(name="A", description="B", limits=["L"], history=history, tools=[])

        assert len(history) == 1

    def test_tools_and_choice(self, builder):
        tools = [ToolDefinition(name="get_time", description="Time")]

        request = builder.build_request(
            name="A", description="B", limits=[], history=[], tools=tools
        )

        assert request.tools == tools
        assert request.tools is not tools
        assert request.tool_choice == "auto"
