"""Shared fixtures: providers and a scripted in-memory transport."""

from __future__ import annotations

import pytest

from relay.domain.entities import CompletionRequest, CompletionResponse
from relay.domain.ports import ICompletionTransport
from relay.providers.base import ProviderConfig


class ScriptedTransport(ICompletionTransport):
    """Transport answering from a script instead of a network.

    ``script`` is either a list consumed one item per call (an exception
    instance is raised, anything else returned) or a callable
    ``(provider, request) -> CompletionResponse`` that may raise.
    """

    def __init__(self, script):
        self.script = script
        self.calls: list[tuple[ProviderConfig, CompletionRequest]] = []

    async def complete(
        self, provider: ProviderConfig, request: CompletionRequest
    ) -> CompletionResponse:
        self.calls.append((provider, request))
        if callable(self.script):
            return self.script(provider, request)
        item = self.script.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item

    @property
    def providers_called(self) -> list[ProviderConfig]:
        return [provider for provider, _ in self.calls]


@pytest.fixture
def make_provider():
    """Factory for distinct provider configs."""

    def _make(name: str = "primary") -> ProviderConfig:
        return ProviderConfig(
            endpoint=f"https://{name}.example.com/v1",
            credential=f"key-{name}",
            model=f"model-{name}",
        )

    return _make


@pytest.fixture
def providers(make_provider):
    """Three distinct providers."""
    return [make_provider("alpha"), make_provider("beta"), make_provider("gamma")]


@pytest.fixture
def scripted_transport():
    """Factory for ScriptedTransport instances."""
    return ScriptedTransport
