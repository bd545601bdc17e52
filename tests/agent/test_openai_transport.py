"""
Tests for the OpenAI-compatible transport.

Tests cover:
    - Message and tool conversion to chat/completions format
    - Response normalization
    - SDK error mapping to TransportError
    - Client caching and shutdown
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import httpx
import openai
import pytest

from relay.domain.entities import (
    CompletionRequest,
    ErrorType,
    Message,
    ToolCall,
    ToolDefinition,
)
from relay.exceptions import TransportError
from relay.providers.base import GROQ_BASE_URL, ProviderConfig
from relay.providers.openai import OpenAITransport


# ============================================
# Fixtures
# ============================================


@pytest.fixture
def provider():
    return ProviderConfig(
        endpoint=GROQ_BASE_URL,
        credential="gsk-test",
        model="llama-3.3-70b-versatile",
    )


@pytest.fixture
def request_with_tools():
    return CompletionRequest(
        messages=[
            Message.system("Your name is Relay."),
            Message.user("What time is it?"),
            Message.assistant(
                None,
                tool_calls=[ToolCall(name="get_time", arguments='{"time_zone": "UTC"}', id="call_1")],
            ),
            Message.tool("call_1", "10/18/2026, 09:00:00 AM UTC"),
        ],
        tools=[ToolDefinition(name="get_time", description="Current time", parameters={"time_zone": "IANA zone"})],
    )


def completion(*choices, response_id="chatcmpl-1", model="llama-3.3-70b-versatile"):
    return SimpleNamespace(id=response_id, model=model, choices=list(choices))


def text_choice(content, finish_reason="stop", index=0):
    return SimpleNamespace(
        index=index,
        finish_reason=finish_reason,
        message=SimpleNamespace(content=content, tool_calls=None),
    )


def tool_choice(*calls, index=0):
    return SimpleNamespace(
        index=index,
        finish_reason="tool_calls",
        message=SimpleNamespace(
            content=None,
            tool_calls=[
                SimpleNamespace(id=cid, function=SimpleNamespace(name=name, arguments=args))
                for cid, name, args in calls
            ],
        ),
    )


def http_request():
    return httpx.Request("POST", f"{GROQ_BASE_URL}/chat/completions")


# ============================================
# Formatting
# ============================================


class TestFormatting:
    """Tests for message conversion."""

    def test_format_messages(self, request_with_tools):
        transport = OpenAITransport()

        api_messages = transport._format_messages_for_api(request_with_tools.messages)

        assert api_messages[0] == {"role": "system", "content": "Your name is Relay."}
        assert api_messages[1] == {"role": "user", "content": "What time is it?"}
        assert api_messages[2] == {
            "role": "assistant",
            "content": None,
            "tool_calls": [
                {
                    "id": "call_1",
                    "type": "function",
                    "function": {"name": "get_time", "arguments": '{"time_zone": "UTC"}'},
                }
            ],
        }
        assert api_messages[3] == {
            "role": "tool",
            "tool_call_id": "call_1",
            "content": "10/18/2026, 09:00:00 AM UTC",
        }

    @pytest.mark.asyncio
    async def test_request_kwargs(self, provider, request_with_tools):
        with patch("relay.providers.openai.AsyncOpenAI") as mock_cls:
            create = AsyncMock(return_value=completion(text_choice("Hi")))
            mock_cls.return_value.chat.completions.create = create

            await OpenAITransport().complete(provider, request_with_tools)

        kwargs = create.call_args.kwargs
        assert kwargs["model"] == "llama-3.3-70b-versatile"
        assert kwargs["temperature"] == 1.0
        assert kwargs["tool_choice"] == "auto"
        assert kwargs["tools"][0]["function"]["name"] == "get_time"
        assert "max_tokens" not in kwargs

    @pytest.mark.asyncio
    async def test_no_tools_omits_tool_fields(self, provider):
        request = CompletionRequest(messages=[Message.user("Hi")])

        with patch("relay.providers.openai.AsyncOpenAI") as mock_cls:
            create = AsyncMock(return_value=completion(text_choice("Hi")))
            mock_cls.return_value.chat.completions.create = create

            await OpenAITransport().complete(provider, request)

        kwargs = create.call_args.kwargs
        assert "tools" not in kwargs
        assert "tool_choice" not in kwargs

    @pytest.mark.asyncio
    async def test_client_configuration(self, provider):
        request = CompletionRequest(messages=[Message.user("Hi")])

        with patch("relay.providers.openai.AsyncOpenAI") as mock_cls:
            mock_cls.return_value.chat.completions.create = AsyncMock(
                return_value=completion(text_choice("Hi"))
            )
            transport = OpenAITransport()
            await transport.complete(provider, request)
            await transport.complete(provider, request)

        mock_cls.assert_called_once()
        kwargs = mock_cls.call_args.kwargs
        assert kwargs["api_key"] == "gsk-test"
        assert kwargs["base_url"] == GROQ_BASE_URL
        assert kwargs["max_retries"] == 0

    @pytest.mark.asyncio
    async def test_aclose_closes_clients(self, provider):
        with patch("relay.providers.openai.AsyncOpenAI") as mock_cls:
            client = mock_cls.return_value
            client.chat.completions.create = AsyncMock(return_value=completion(text_choice("Hi")))
            client.close = AsyncMock()

            transport = OpenAITransport()
            await transport.complete(provider, CompletionRequest(messages=[Message.user("Hi")]))
            await transport.aclose()

        client.close.assert_awaited_once()


# ============================================
# Responses
# ============================================


class TestResponses:
    """Tests for response normalization."""

    def test_parse_text_choice(self):
        response = OpenAITransport()._parse_response(completion(text_choice("Hello")))

        assert response.id == "chatcmpl-1"
        assert len(response.choices) == 1
        assert response.choices[0].content == "Hello"
        assert response.choices[0].finish_reason == "stop"
        assert response.choices[0].tool_calls == []

    def test_parse_tool_choice(self):
        response = OpenAITransport()._parse_response(
            completion(tool_choice(("call_1", "get_time", '{"time_zone": "UTC"}'), ("call_2", "noop", None)))
        )

        choice = response.choices[0]
        assert choice.requests_tools
        assert [tc.id for tc in choice.tool_calls] == ["call_1", "call_2"]
        assert choice.tool_calls[0].arguments == '{"time_zone": "UTC"}'
        assert choice.tool_calls[1].arguments == ""

    def test_parse_multiple_choices_keeps_order(self):
        response = OpenAITransport()._parse_response(
            completion(text_choice("first", index=0), text_choice("second", index=1))
        )
        assert [c.content for c in response.choices] == ["first", "second"]

    def test_parse_no_choices(self):
        response = OpenAITransport()._parse_response(completion())
        assert response.choices == []

    @pytest.mark.asyncio
    async def test_malformed_response(self, provider):
        broken = completion(SimpleNamespace(index=0, finish_reason="stop", message=None))

        with patch("relay.providers.openai.AsyncOpenAI") as mock_cls:
            mock_cls.return_value.chat.completions.create = AsyncMock(return_value=broken)

            with pytest.raises(TransportError) as exc_info:
                await OpenAITransport().complete(provider, CompletionRequest(messages=[Message.user("Hi")]))

        assert "Malformed response" in exc_info.value.message


# ============================================
# Errors
# ============================================


class TestErrorMapping:
    """Tests for SDK error translation."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "make_error, error_type",
        [
            (
                lambda: openai.RateLimitError(
                    "Too many requests",
                    response=httpx.Response(429, request=http_request()),
                    body=None,
                ),
                ErrorType.RATE_LIMIT,
            ),
            (lambda: openai.APITimeoutError(request=http_request()), ErrorType.TIMEOUT),
            (lambda: openai.APIConnectionError(request=http_request()), ErrorType.RECOVERABLE),
            (
                lambda: openai.InternalServerError(
                    "Server error",
                    response=httpx.Response(500, request=http_request()),
                    body=None,
                ),
                ErrorType.RECOVERABLE,
            ),
        ],
    )
    async def test_sdk_errors_become_transport_errors(self, provider, make_error, error_type):
        error = make_error()

        with patch("relay.providers.openai.AsyncOpenAI") as mock_cls:
            mock_cls.return_value.chat.completions.create = AsyncMock(side_effect=error)

            with pytest.raises(TransportError) as exc_info:
                await OpenAITransport().complete(provider, CompletionRequest(messages=[Message.user("Hi")]))

        assert exc_info.value.error_type == error_type
        assert exc_info.value.endpoint == GROQ_BASE_URL
        assert exc_info.value.cause is error
