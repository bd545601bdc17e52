"""
Conversation Loop.

The state machine behind ``Agent.answer``. For a bounded number of outer
iterations it picks a live provider, sends the accumulated history plus
tool schemas, processes every returned choice and dispatches the requested
tool calls, mutating the caller's history in place.

States:
    SELECT_PROVIDER -> AWAIT_RESPONSE -> {PROVIDER_FAILED -> SELECT_PROVIDER
                                          | RESPONSE_EMPTY -> SELECT_PROVIDER
                                          | PROCESS_CHOICES}
    PROCESS_CHOICES -> {ANSWERED | DISPATCH_TOOLS -> next iteration}
    pool empty -> EXHAUSTED
    iteration bound reached -> LOOP_LIMIT

Provider failures are retried against another provider within the same
iteration; every response that is processed, even a tool-only one,
consumes exactly one iteration. Total backend calls are therefore bounded
by ``max_iterations + len(providers)``.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional

from ..domain.entities import Message
from ..domain.ports import ICompletionTransport
from ..exceptions import EmptyResponseError, TransportError
from ..providers.pool import ProviderPool
from ..tools.registry import ToolRegistry
from .prompt_builder import PromptBuilder
from .tool_executor import ToolExecutor

if TYPE_CHECKING:
    from .agent import AgentConfig

logger = logging.getLogger(__name__)

DEFAULT_MAX_ITERATIONS = 6

EXHAUSTED_MESSAGE = (
    "I'm sorry, I couldn't reach any of my language model providers right now. "
    "Please try again later."
)
LOOP_LIMIT_MESSAGE = "I'm sorry, I can't respond to that right now."


class TerminalState(str, Enum):
    """How a conversation run ended."""

    ANSWERED = "answered"  # Final natural-language answer produced
    EXHAUSTED = "exhausted"  # Every provider failed this iteration
    LOOP_LIMIT = "loop_limit"  # Iteration bound reached


@dataclass
class LoopResult:
    """Outcome of one conversation run.

    Attributes:
        messages: The caller's history, mutated in place
        state: Terminal state reached
        iterations: Outer iterations started
        backend_calls: Transport calls made, failed ones included
    """

    messages: list[Message]
    state: TerminalState
    iterations: int
    backend_calls: int


class ConversationLoop:
    """Runs one ``answer`` call to a terminal state.

    A loop instance is created per call. It owns the transient state of the
    run (iteration counter and provider working set) while the history stays
    owned by the caller.

    Usage:
        loop = ConversationLoop(config, transport, registry)
        result = await loop.run(messages)
        if result.state is TerminalState.ANSWERED:
            print(result.messages[-1].content)
    """

    def __init__(
        self,
        config: AgentConfig,
        transport: ICompletionTransport,
        tool_registry: ToolRegistry,
        rng: Optional[random.Random] = None,
        prompt_builder: Optional[PromptBuilder] = None,
        tool_executor: Optional[ToolExecutor] = None,
    ):
        """Initialize the loop.

        Args:
            config: Agent configuration (identity, limits, providers, bound)
            transport: Backend transport
            tool_registry: Registry used to advertise and resolve tools
            rng: Random source for provider selection
            prompt_builder: Request assembler
            tool_executor: Tool dispatcher
        """
        self.config = config
        self.transport = transport
        self.tools = tool_registry
        self.prompt_builder = prompt_builder or PromptBuilder()
        self.executor = tool_executor or ToolExecutor(tool_registry)
        self.pool = ProviderPool(config.providers, rng=rng)
        self.iteration = 0
        self.backend_calls = 0

    async def run(self, messages: list[Message]) -> LoopResult:
        """Drive the conversation until a terminal state.

        Never raises for transport or tool failures; those end up either
        as provider discards or as messages in the history.

        Args:
            messages: Caller-owned history, appended to in place

        Returns:
            LoopResult wrapping the same history object
        """
        logger.info(
            f"Conversation run started: {len(messages)} message(s), "
            f"{len(self.pool)} provider(s), {len(self.tools)} tool(s)"
        )

        while self.iteration < self.config.max_iterations:
            self.iteration += 1

            responded = False
            while not self.pool.is_empty():
                provider = self.pool.pick_one()
                request = self.prompt_builder.build_request(
                    name=self.config.name,
                    description=self.config.description,
                    limits=self.config.limits,
                    history=messages,
                    tools=self.tools.get_all_tools(),
                )

                self.backend_calls += 1
                try:
                    response = await self.transport.complete(provider, request)
                    if not response.choices:
                        raise EmptyResponseError(endpoint=provider.endpoint)
                except TransportError as e:
                    logger.warning(f"Discarding provider {provider.label}: {e.message}")
                    self.pool.discard(provider)
                    continue
                except Exception as e:
                    logger.exception(f"Unexpected error from provider {provider.label}: {e}")
                    self.pool.discard(provider)
                    continue

                responded = True
                for choice in response.choices:
                    if not choice.requests_tools:
                        messages.append(Message.assistant(choice.content or ""))
                        return self._finish(messages, TerminalState.ANSWERED)

                    tool_calls = list(choice.tool_calls)
                    messages.append(Message.assistant(choice.content, tool_calls=tool_calls))
                    results = await self.executor.execute_tool_calls(tool_calls)
                    messages.extend(result.to_message() for result in results)
                break

            if not responded:
                messages.append(Message.assistant(EXHAUSTED_MESSAGE))
                return self._finish(messages, TerminalState.EXHAUSTED)

        messages.append(Message.assistant(LOOP_LIMIT_MESSAGE))
        return self._finish(messages, TerminalState.LOOP_LIMIT)

    def _finish(self, messages: list[Message], state: TerminalState) -> LoopResult:
        log = logger.info if state == TerminalState.ANSWERED else logger.warning
        log(
            f"Conversation run finished: {state.value} after {self.iteration} "
            f"iteration(s), {self.backend_calls} backend call(s)"
        )
        return LoopResult(
            messages=messages,
            state=state,
            iterations=self.iteration,
            backend_calls=self.backend_calls,
        )
