"""
Agent.

Entry point of the relay runtime. Holds the agent's identity, limits,
providers and tools, and runs a ConversationLoop for every ``answer`` call.
"""

from __future__ import annotations

import logging
import random
import uuid
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, Sequence, Union

from ..domain.entities import Message, Tool, ToolHandler
from ..domain.ports import ICompletionTransport
from ..exceptions import ConfigurationError
from ..providers.base import ProviderConfig
from ..providers.router import TransportRouter
from ..tools.registry import ToolRegistry
from .conversation_loop import DEFAULT_MAX_ITERATIONS, ConversationLoop, LoopResult

logger = logging.getLogger(__name__)

INPUT_PARAMETER_DESCRIPTION = "Free-form input for the tool"


@dataclass
class AgentConfig:
    """Configuration for an agent.

    Attributes:
        name: Agent name, embedded in the system prompt
        description: System prompt body
        limits: Behavioral rules, one line each in a trailing system message
        providers: Backends to choose from, in configuration order
        max_iterations: Outer iterations allowed per ``answer`` call
    """

    name: str
    description: str
    limits: Sequence[str] = ()
    providers: Sequence[ProviderConfig] = ()
    max_iterations: int = DEFAULT_MAX_ITERATIONS

    def __post_init__(self):
        self.limits = tuple(self.limits)
        self.providers = tuple(self.providers)

    def validate(self) -> None:
        """Check required options.

        Raises:
            ConfigurationError: If a required option is missing or invalid
        """
        missing = [
            key
            for key, value in (
                ("name", self.name),
                ("description", self.description),
                ("providers", self.providers),
            )
            if not value
        ]
        if missing:
            raise ConfigurationError(
                f"Agent configuration is missing: {', '.join(missing)}",
                missing_keys=missing,
            )
        if self.max_iterations < 1:
            raise ConfigurationError(
                "max_iterations must be at least 1",
                details={"max_iterations": self.max_iterations},
            )


@dataclass
class ToolOptions:
    """Options for registering a named tool.

    Attributes:
        description: What the tool does, shown to the backend
        handler: Callable receiving the (partial) parameter dict
        parameters: Parameter name -> description
    """

    description: str
    handler: ToolHandler
    parameters: Optional[dict[str, str]] = None


class Agent:
    """Conversational agent with provider failover and tool dispatch.

    Tool registration is expected to happen between runs. Registering or
    removing a tool while an ``answer`` call is in flight is undefined
    behaviour; it is logged as a warning but not prevented.

    Usage:
        agent = Agent(AgentConfig(
            name="Support_Agent",
            description="Technical support assistant",
            limits=["Never share credentials"],
            providers=[ProviderConfig(endpoint=OPENAI_BASE_URL,
                                      credential="sk-...", model="gpt-4o")],
        ))

        agent.tool("search_docs", ToolOptions(
            description="Search the documentation",
            parameters={"query": "Search terms"},
            handler=search_docs,
        ))

        history = await agent.ask("How do I reset my password?")
        print(history[-1].content)
    """

    def __init__(
        self,
        config: AgentConfig,
        transport: Optional[ICompletionTransport] = None,
        rng: Optional[random.Random] = None,
    ):
        """Initialize the agent.

        Args:
            config: Agent configuration
            transport: Backend transport (defaults to a TransportRouter)
            rng: Random source for provider selection

        Raises:
            ConfigurationError: If the configuration is invalid
        """
        config.validate()
        self.config = config
        self.transport = transport or TransportRouter()
        self._rng = rng
        self._registry = ToolRegistry()
        self._active_runs = 0

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def description(self) -> str:
        return self.config.description

    @property
    def providers(self) -> tuple[ProviderConfig, ...]:
        return tuple(self.config.providers)

    @property
    def tools(self) -> list[Tool]:
        return [self._registry.lookup(name) for name in self._registry.names]

    def tool(
        self,
        name_or_tool: Union[str, Tool],
        options: Union[ToolOptions, Mapping[str, Any], ToolHandler, None] = None,
    ) -> Callable[[], None]:
        """Register a tool.

        Accepted forms:
            agent.tool(name, ToolOptions(...))        named tool
            agent.tool(name, {"description": ..., "handler": ...})
            agent.tool(description, handler)          shorthand, random name,
                                                      single ``input`` parameter
            agent.tool(tool_instance)                 e.g. TimeTool()

        Returns:
            Callback removing the tool again (safe to call more than once)

        Raises:
            ToolAlreadyExistsError: If the name is already registered
            ConfigurationError: If the options are incomplete
        """
        tool = self._build_tool(name_or_tool, options)
        self._warn_if_running("register", tool.name)
        self._registry.register(tool)

        def deregister() -> None:
            if self._registry.lookup(tool.name) is tool:
                self.remove_tool(tool.name)

        return deregister

    def remove_tool(self, name: str) -> bool:
        """Remove a tool by name; returns True if it existed."""
        self._warn_if_running("remove", name)
        return self._registry.unregister(name)

    async def answer(self, messages: list[Message]) -> list[Message]:
        """Produce the next assistant answer for a history.

        The history is mutated in place and returned. This call never raises
        for provider or tool failures; those surface as assistant messages.
        """
        result = await self.run(messages)
        return result.messages

    async def ask(
        self, prompt: str, messages: Optional[list[Message]] = None
    ) -> list[Message]:
        """Append a user message and answer it."""
        history = messages if messages is not None else []
        history.append(Message.user(prompt))
        return await self.answer(history)

    async def run(self, messages: list[Message]) -> LoopResult:
        """Like ``answer`` but returns the full LoopResult."""
        loop = ConversationLoop(
            config=self.config,
            transport=self.transport,
            tool_registry=self._registry,
            rng=self._rng,
        )
        self._active_runs += 1
        try:
            return await loop.run(messages)
        finally:
            self._active_runs -= 1

    def _build_tool(
        self,
        name_or_tool: Union[str, Tool],
        options: Union[ToolOptions, Mapping[str, Any], ToolHandler, None],
    ) -> Tool:
        if isinstance(name_or_tool, Tool):
            if options is not None:
                raise ConfigurationError(
                    f"Tool '{name_or_tool.name}' is already built; options are not accepted",
                    details={"tool_name": name_or_tool.name},
                )
            return name_or_tool

        if not name_or_tool:
            raise ConfigurationError("Tool name or description is required")

        if isinstance(options, ToolOptions):
            return Tool(
                name=name_or_tool,
                description=options.description or name_or_tool,
                handler=options.handler,
                parameters=dict(options.parameters or {}),
            )

        if isinstance(options, Mapping):
            handler = options.get("handler")
            if not callable(handler):
                raise ConfigurationError(
                    f"Tool '{name_or_tool}' needs a callable handler",
                    missing_keys=["handler"],
                )
            return Tool(
                name=name_or_tool,
                description=options.get("description") or name_or_tool,
                handler=handler,
                parameters=dict(options.get("parameters") or {}),
            )

        if callable(options):
            return Tool(
                name=f"tool_{uuid.uuid4().hex[:12]}",
                description=name_or_tool,
                handler=options,
                parameters={"input": INPUT_PARAMETER_DESCRIPTION},
            )

        raise ConfigurationError(
            f"Tool '{name_or_tool}' needs options or a handler",
            missing_keys=["handler"],
        )

    def _warn_if_running(self, action: str, name: str) -> None:
        if self._active_runs:
            logger.warning(
                f"Tool '{name}' {action} requested during {self._active_runs} "
                "in-flight run(s); behaviour for those runs is undefined"
            )

    async def aclose(self) -> None:
        await self.transport.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()
