"""
Port interfaces (abstract base classes) for the relay agent.

These define the contracts that adapters must implement.
Following the Ports & Adapters (Hexagonal) architecture pattern.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..providers.base import ProviderConfig
    from .entities import CompletionRequest, CompletionResponse


# ============================================
# Completion Transport Interface
# ============================================


class ICompletionTransport(ABC):
    """Interface for backend transports (OpenAI-compatible, Anthropic, ...).

    A transport turns one request into one normalized response for a given
    provider. Implementations raise ``TransportError`` on network or protocol
    failures; the conversation loop discards the provider in that case.
    """

    @abstractmethod
    async def complete(
        self,
        provider: ProviderConfig,
        request: CompletionRequest,
    ) -> CompletionResponse:
        """Send the request to the provider's backend.

        Args:
            provider: Endpoint, credential and model to use
            request: Messages, tool schemas and tool choice

        Returns:
            Normalized completion response
        """
        pass

    async def aclose(self) -> None:
        """Release any underlying clients."""
        return None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()
