"""
Transport Router.

Routes each request to the transport matching the provider's wire format,
so a single agent can mix OpenAI-compatible and Anthropic backends.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from ..domain.entities import CompletionRequest, CompletionResponse, ErrorType
from ..domain.ports import ICompletionTransport
from ..exceptions import TransportError
from .anthropic import AnthropicTransport
from .base import ApiFormat, ProviderConfig
from .openai import OpenAITransport

logger = logging.getLogger(__name__)

TransportFactory = Callable[[], ICompletionTransport]

DEFAULT_FACTORIES: dict[ApiFormat, TransportFactory] = {
    ApiFormat.OPENAI: OpenAITransport,
    ApiFormat.ANTHROPIC: AnthropicTransport,
}


class TransportRouter(ICompletionTransport):
    """Dispatches requests by ``ProviderConfig.api_format``.

    Transports are created on first use, so an agent configured only with
    OpenAI-compatible providers never needs the anthropic package.
    """

    def __init__(self, factories: Optional[dict[ApiFormat, TransportFactory]] = None):
        self._factories = dict(factories or DEFAULT_FACTORIES)
        self._transports: dict[ApiFormat, ICompletionTransport] = {}

    def transport_for(self, provider: ProviderConfig) -> ICompletionTransport:
        api_format = ApiFormat(provider.api_format)
        transport = self._transports.get(api_format)
        if transport is None:
            factory = self._factories.get(api_format)
            if factory is None:
                raise TransportError(
                    f"No transport registered for format '{api_format.value}'",
                    error_type=ErrorType.FATAL,
                    endpoint=provider.endpoint,
                )
            try:
                transport = factory()
            except ImportError as e:
                raise TransportError(
                    str(e),
                    error_type=ErrorType.FATAL,
                    endpoint=provider.endpoint,
                    cause=e,
                )
            self._transports[api_format] = transport
        return transport

    async def complete(
        self,
        provider: ProviderConfig,
        request: CompletionRequest,
    ) -> CompletionResponse:
        return await self.transport_for(provider).complete(provider, request)

    async def aclose(self) -> None:
        for transport in self._transports.values():
            await transport.aclose()
        self._transports.clear()
