"""Backend transports and provider selection."""

from .base import (
    ANTHROPIC_BASE_URL,
    DEEPSEEK_BASE_URL,
    GROQ_BASE_URL,
    OPENAI_BASE_URL,
    ApiFormat,
    BaseTransport,
    ProviderConfig,
)
from .anthropic import AnthropicTransport
from .openai import OpenAITransport
from .pool import ProviderPool
from .router import TransportRouter

__all__ = [
    "ANTHROPIC_BASE_URL",
    "DEEPSEEK_BASE_URL",
    "GROQ_BASE_URL",
    "OPENAI_BASE_URL",
    "ApiFormat",
    "BaseTransport",
    "ProviderConfig",
    "AnthropicTransport",
    "OpenAITransport",
    "ProviderPool",
    "TransportRouter",
]
