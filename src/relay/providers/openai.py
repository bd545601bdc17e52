"""
OpenAI-compatible Transport.

Implements the ICompletionTransport interface for any endpoint speaking
the chat/completions format: OpenAI itself, Groq, DeepSeek, Ollama and
other compatible gateways.
"""

from __future__ import annotations

import logging
from typing import Any

from ..domain.entities import (
    Choice,
    CompletionRequest,
    CompletionResponse,
    ErrorType,
    Message,
    MessageRole,
    ToolCall,
)
from .base import BaseTransport, ProviderConfig

logger = logging.getLogger(__name__)

# Lazy import to avoid requiring openai if not used
try:
    import openai
    from openai import AsyncOpenAI

    OPENAI_AVAILABLE = True
except ImportError:
    OPENAI_AVAILABLE = False
    openai = None
    AsyncOpenAI = None


class OpenAITransport(BaseTransport):
    """Chat/completions transport built on the official ``openai`` SDK.

    Usage:
        provider = ProviderConfig(
            endpoint=GROQ_BASE_URL,
            credential="gsk-...",
            model="llama-3.3-70b-versatile",
        )
        transport = OpenAITransport()
        response = await transport.complete(provider, request)
    """

    def __init__(self):
        """Initialize the transport.

        Raises:
            ImportError: If openai package is not installed
        """
        if not OPENAI_AVAILABLE:
            raise ImportError(
                "openai package is required for OpenAITransport. "
                "Install with: pip install openai"
            )
        super().__init__()

    def _create_client(self, provider: ProviderConfig) -> Any:
        return AsyncOpenAI(
            api_key=provider.credential or "not-needed",
            base_url=provider.endpoint,
            timeout=provider.timeout,
            max_retries=provider.max_retries,
            default_headers=dict(provider.headers) or None,
        )

    def _format_messages_for_api(
        self, messages: list[Message]
    ) -> list[dict[str, Any]]:
        """Convert messages to chat/completions format."""
        api_messages = []

        for msg in messages:
            if msg.role == MessageRole.TOOL:
                api_messages.append({
                    "role": "tool",
                    "tool_call_id": msg.tool_call_id,
                    "content": msg.content or "",
                })
            elif msg.role == MessageRole.ASSISTANT and msg.tool_calls:
                api_messages.append({
                    "role": "assistant",
                    "content": msg.content or None,
                    "tool_calls": [
                        {
                            "id": tc.id,
                            "type": "function",
                            "function": {
                                "name": tc.name,
                                "arguments": tc.arguments,
                            },
                        }
                        for tc in msg.tool_calls
                    ],
                })
            else:
                api_messages.append({
                    "role": msg.role.value,
                    "content": msg.content or "",
                })

        return api_messages

    def _parse_response(self, response: Any) -> CompletionResponse:
        """Normalize an SDK ChatCompletion into domain choices."""
        choices = []
        for position, choice in enumerate(response.choices or []):
            message = choice.message
            tool_calls = [
                ToolCall(
                    id=tc.id,
                    name=tc.function.name,
                    arguments=tc.function.arguments or "",
                )
                for tc in (message.tool_calls or [])
            ]
            choices.append(
                Choice(
                    finish_reason=choice.finish_reason,
                    content=message.content,
                    tool_calls=tool_calls,
                    index=getattr(choice, "index", position),
                )
            )
        return CompletionResponse(
            choices=choices,
            id=getattr(response, "id", None),
            model=getattr(response, "model", None),
        )

    async def complete(
        self,
        provider: ProviderConfig,
        request: CompletionRequest,
    ) -> CompletionResponse:
        """Send one non-streaming chat completion request.

        Args:
            provider: Target provider
            request: Messages, tools and tool choice

        Returns:
            Normalized completion response

        Raises:
            TransportError: On any API, network or protocol error
        """
        kwargs: dict[str, Any] = {
            "model": provider.model,
            "messages": self._format_messages_for_api(request.messages),
            "temperature": provider.temperature,
        }

        if provider.max_tokens:
            kwargs["max_tokens"] = provider.max_tokens

        if request.tools:
            kwargs["tools"] = [tool.to_openai_format() for tool in request.tools]
            kwargs["tool_choice"] = request.tool_choice

        client = self._client_for(provider)

        try:
            response = await client.chat.completions.create(**kwargs)
        except openai.RateLimitError as e:
            logger.warning(f"Rate limited by {provider.label}: {e}")
            raise self._transport_error(
                provider, f"Rate limited: {e}", ErrorType.RATE_LIMIT, e
            )
        except openai.APITimeoutError as e:
            logger.error(f"Timeout from {provider.label}: {e}")
            raise self._transport_error(
                provider, f"Request timed out: {e}", ErrorType.TIMEOUT, e
            )
        except openai.APIError as e:
            logger.error(f"API error from {provider.label}: {e}")
            raise self._transport_error(
                provider, f"API error: {e}", ErrorType.RECOVERABLE, e
            )

        try:
            return self._parse_response(response)
        except (AttributeError, TypeError) as e:
            raise self._transport_error(
                provider, f"Malformed response: {e}", ErrorType.RECOVERABLE, e
            )
