"""
Base Transport Implementation.

Provides the provider configuration record and common functionality
for all completion transports.
"""

from __future__ import annotations

import json
import logging
from abc import abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from ..domain.entities import (
    CompletionRequest,
    CompletionResponse,
    ErrorType,
    ToolCall,
)
from ..domain.ports import ICompletionTransport
from ..exceptions import TransportError

logger = logging.getLogger(__name__)

# Well-known endpoints
OPENAI_BASE_URL = "https://api.openai.com/v1"
GROQ_BASE_URL = "https://api.groq.com/openai/v1"
DEEPSEEK_BASE_URL = "https://api.deepseek.com/v1"
ANTHROPIC_BASE_URL = "https://api.anthropic.com"


class ApiFormat(str, Enum):
    """Wire format spoken by a provider's endpoint."""

    OPENAI = "openai"  # chat/completions (OpenAI, Groq, DeepSeek, Ollama...)
    ANTHROPIC = "anthropic"  # messages API


@dataclass(frozen=True)
class ProviderConfig:
    """One backend endpoint the agent may talk to.

    Attributes:
        endpoint: Base URL of the backend API
        model: Model identifier injected into every request
        credential: Optional API key
        api_format: Wire format of the endpoint
        timeout: Request timeout in seconds
        max_retries: SDK-level retries before the call counts as failed
        temperature: Sampling temperature
        max_tokens: Max tokens to generate (None lets the backend decide)
        headers: Extra HTTP headers
    """

    endpoint: str
    model: str
    credential: Optional[str] = field(default=None, repr=False)
    api_format: ApiFormat = ApiFormat.OPENAI
    timeout: float = 60.0
    max_retries: int = 0
    temperature: float = 1.0
    max_tokens: Optional[int] = None
    headers: tuple[tuple[str, str], ...] = ()

    @property
    def label(self) -> str:
        """Short description for logs (never includes the credential)."""
        return f"{self.model}@{self.endpoint}"


class BaseTransport(ICompletionTransport):
    """Base class for transport implementations.

    Keeps one SDK client per provider and provides the shared argument
    decoding used when converting tool calls between wire formats.
    Subclasses implement ``_create_client`` and ``complete``.
    """

    def __init__(self):
        self._clients: dict[ProviderConfig, Any] = {}

    def _client_for(self, provider: ProviderConfig) -> Any:
        """Get or lazily create the SDK client for a provider."""
        client = self._clients.get(provider)
        if client is None:
            client = self._create_client(provider)
            self._clients[provider] = client
            logger.debug(f"Created {type(self).__name__} client for {provider.label}")
        return client

    @abstractmethod
    def _create_client(self, provider: ProviderConfig) -> Any:
        """Build the SDK client for a provider."""
        pass

    @abstractmethod
    async def complete(
        self,
        provider: ProviderConfig,
        request: CompletionRequest,
    ) -> CompletionResponse:
        """Generate a completion. Must be implemented by subclasses."""
        pass

    @staticmethod
    def _decode_arguments(tool_call: ToolCall) -> dict[str, Any]:
        """Best-effort decoding of raw arguments for formats needing objects."""
        if not tool_call.arguments.strip():
            return {}
        try:
            decoded = json.loads(tool_call.arguments)
        except json.JSONDecodeError:
            return {"raw": tool_call.arguments}
        return decoded if isinstance(decoded, dict) else {"raw": tool_call.arguments}

    @staticmethod
    def _transport_error(
        provider: ProviderConfig,
        message: str,
        error_type: ErrorType,
        cause: Optional[Exception] = None,
    ) -> TransportError:
        return TransportError(
            message,
            error_type=error_type,
            endpoint=provider.endpoint,
            cause=cause,
        )

    async def aclose(self) -> None:
        """Close all SDK clients."""
        for client in self._clients.values():
            close = getattr(client, "close", None)
            if close is not None:
                await close()
        self._clients.clear()
