"""
Anthropic Claude Transport.

Implements the ICompletionTransport interface on top of Anthropic's
messages API and normalizes its responses into chat/completions-style
choices, so the conversation loop sees a single response shape.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

from ..domain.entities import (
    Choice,
    CompletionRequest,
    CompletionResponse,
    ErrorType,
    FinishReason,
    Message,
    MessageRole,
    ToolCall,
)
from .base import BaseTransport, ProviderConfig

logger = logging.getLogger(__name__)

# Lazy import to avoid requiring anthropic if not used
try:
    import anthropic
    from anthropic import AsyncAnthropic

    ANTHROPIC_AVAILABLE = True
except ImportError:
    ANTHROPIC_AVAILABLE = False
    anthropic = None
    AsyncAnthropic = None


# Anthropic stop_reason -> normalized finish reason
STOP_REASONS = {
    "end_turn": FinishReason.STOP.value,
    "stop_sequence": FinishReason.STOP.value,
    "tool_use": FinishReason.TOOL_CALLS.value,
    "max_tokens": FinishReason.LENGTH.value,
}


class AnthropicTransport(BaseTransport):
    """Messages API transport built on the official ``anthropic`` SDK.

    Usage:
        provider = ProviderConfig(
            endpoint=ANTHROPIC_BASE_URL,
            credential="sk-ant-...",
            model="claude-sonnet-4-5-20250929",
            api_format=ApiFormat.ANTHROPIC,
        )
        response = await AnthropicTransport().complete(provider, request)
    """

    DEFAULT_MAX_TOKENS = 1024

    def __init__(self):
        """Initialize the transport.

        Raises:
            ImportError: If anthropic package is not installed
        """
        if not ANTHROPIC_AVAILABLE:
            raise ImportError(
                "anthropic package is required for AnthropicTransport. "
                "Install with: pip install anthropic"
            )
        super().__init__()

    def _create_client(self, provider: ProviderConfig) -> Any:
        return AsyncAnthropic(
            api_key=provider.credential,
            base_url=provider.endpoint,
            timeout=provider.timeout,
            max_retries=provider.max_retries,
            default_headers=dict(provider.headers) or None,
        )

    def _format_messages_for_api(
        self, messages: list[Message]
    ) -> tuple[Optional[str], list[dict[str, Any]]]:
        """Convert messages to Anthropic format.

        Anthropic uses a separate system parameter, and every tool result
        of one assistant turn must travel in a single user message.
        Assistant turns without text or tool calls are dropped.

        Returns:
            Tuple of (system_prompt, messages_list)
        """
        system_parts: list[str] = []
        api_messages: list[dict[str, Any]] = []

        for msg in messages:
            if msg.role == MessageRole.SYSTEM:
                if msg.content:
                    system_parts.append(msg.content)
            elif msg.role == MessageRole.TOOL:
                block = {
                    "type": "tool_result",
                    "tool_use_id": msg.tool_call_id,
                    "content": msg.content or "",
                }
                previous = api_messages[-1] if api_messages else None
                if (
                    previous
                    and previous["role"] == "user"
                    and isinstance(previous["content"], list)
                    and previous["content"]
                    and previous["content"][0].get("type") == "tool_result"
                ):
                    previous["content"].append(block)
                else:
                    api_messages.append({"role": "user", "content": [block]})
            elif msg.role == MessageRole.ASSISTANT and msg.tool_calls:
                content_blocks: list[dict[str, Any]] = []
                if msg.content:
                    content_blocks.append({"type": "text", "text": msg.content})
                for tc in msg.tool_calls:
                    content_blocks.append({
                        "type": "tool_use",
                        "id": tc.id,
                        "name": tc.name,
                        "input": self._decode_arguments(tc),
                    })
                api_messages.append({"role": "assistant", "content": content_blocks})
            elif msg.role == MessageRole.ASSISTANT and not msg.content:
                # Messages API rejects empty non-final assistant turns
                continue
            else:
                api_messages.append({
                    "role": msg.role.value,
                    "content": msg.content or "",
                })

        system = "\n\n".join(system_parts) if system_parts else None
        return system, api_messages

    def _parse_response(self, response: Any) -> CompletionResponse:
        """Fold content blocks into a single normalized choice."""
        texts = []
        tool_calls = []
        for block in response.content or []:
            if block.type == "text":
                texts.append(block.text)
            elif block.type == "tool_use":
                tool_calls.append(
                    ToolCall(
                        id=block.id,
                        name=block.name,
                        arguments=json.dumps(block.input),
                    )
                )

        choice = Choice(
            finish_reason=STOP_REASONS.get(response.stop_reason, response.stop_reason),
            content="\n".join(texts) if texts else None,
            tool_calls=tool_calls,
        )
        return CompletionResponse(
            choices=[choice],
            id=getattr(response, "id", None),
            model=getattr(response, "model", None),
        )

    async def complete(
        self,
        provider: ProviderConfig,
        request: CompletionRequest,
    ) -> CompletionResponse:
        """Send one messages API request.

        Args:
            provider: Target provider
            request: Messages, tools and tool choice

        Returns:
            Normalized completion response with a single choice

        Raises:
            TransportError: On any API, network or protocol error
        """
        system, api_messages = self._format_messages_for_api(request.messages)

        kwargs: dict[str, Any] = {
            "model": provider.model,
            "messages": api_messages,
            "max_tokens": provider.max_tokens or self.DEFAULT_MAX_TOKENS,
            "temperature": provider.temperature,
        }

        if system:
            kwargs["system"] = system

        if request.tools:
            kwargs["tools"] = [tool.to_anthropic_format() for tool in request.tools]
            kwargs["tool_choice"] = {"type": request.tool_choice}

        client = self._client_for(provider)

        try:
            response = await client.messages.create(**kwargs)
        except anthropic.RateLimitError as e:
            logger.warning(f"Rate limited by {provider.label}: {e}")
            raise self._transport_error(
                provider, f"Rate limited: {e}", ErrorType.RATE_LIMIT, e
            )
        except anthropic.APITimeoutError as e:
            logger.error(f"Timeout from {provider.label}: {e}")
            raise self._transport_error(
                provider, f"Request timed out: {e}", ErrorType.TIMEOUT, e
            )
        except anthropic.APIError as e:
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
