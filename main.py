#!/usr/bin/env python3
"""Relay Agent CLI.

Asks a single question to an agent whose providers are configured from the
environment, and prints the final assistant message.

Environment Variables (at least one key required):
    - OPENAI_API_KEY, ANTHROPIC_API_KEY, GROQ_API_KEY, DEEPSEEK_API_KEY
    - *_MODEL / *_BASE_URL overrides, RELAY_TIMEOUT, RELAY_MAX_ITERATIONS

Example Usage:
    $ python main.py "What time is it in Tokyo?"
    $ python main.py --with-time-tool "What time is it in Tokyo?"
    $ python main.py --limit "Answer in one sentence" "Explain DNS"
    $ python main.py --transcript "Explain DNS"
"""
import argparse
import asyncio
import sys

from relay import Agent, Message, TerminalState, TimeTool
from relay.config import agent_config_from_env, configure_logging
from relay.exceptions import ConfigurationError


async def run_question(args: argparse.Namespace) -> int:
    """Run one question through the agent.

    Returns:
        Process exit code (0 when the agent produced an answer)
    """
    try:
        config = agent_config_from_env(
            name=args.name,
            description=args.description,
            limits=args.limit or (),
        )
    except ConfigurationError as e:
        print(f"[Main] {e}", file=sys.stderr)
        return 2

    async with Agent(config) as agent:
        if args.with_time_tool:
            agent.tool(TimeTool())

        result = await agent.run([Message.user(args.question)])

    if args.transcript:
        for message in result.messages:
            label = message.role.value
            if message.tool_calls:
                calls = ", ".join(tc.name for tc in message.tool_calls)
                print(f"[{label}] -> {calls}")
            else:
                print(f"[{label}] {message.content}")
    else:
        print(result.messages[-1].content)

    return 0 if result.state == TerminalState.ANSWERED else 1


def main():
    parser = argparse.ArgumentParser(
        description="Ask a question to a relay agent",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("question", help="Question to ask")

    agent_group = parser.add_argument_group("Agent Options")
    agent_group.add_argument(
        "--name",
        default="Relay",
        help="Agent name (default: Relay)",
    )
    agent_group.add_argument(
        "--description",
        default="You are a helpful assistant.",
        help="Agent description used as system prompt",
    )
    agent_group.add_argument(
        "--limit",
        action="append",
        help="Behavioral rule for the agent (repeatable)",
    )
    agent_group.add_argument(
        "--with-time-tool",
        action="store_true",
        help="Give the agent the built-in get_time tool",
    )

    output_group = parser.add_argument_group("Output Options")
    output_group.add_argument(
        "--transcript",
        action="store_true",
        help="Print the whole conversation instead of the final answer",
    )
    output_group.add_argument(
        "--log-level",
        default=None,
        help="Logging level (default: RELAY_LOG_LEVEL or INFO)",
    )

    args = parser.parse_args()
    configure_logging(args.log_level)
    sys.exit(asyncio.run(run_question(args)))


if __name__ == "__main__":
    main()
