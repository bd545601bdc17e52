"""Environment configuration for the relay agent.

Builds provider lists and agent configuration from environment variables
(optionally loaded from a ``.env`` file) and configures logging.

Environment Variables:
    - OPENAI_API_KEY / OPENAI_MODEL / OPENAI_BASE_URL
    - ANTHROPIC_API_KEY / ANTHROPIC_MODEL / ANTHROPIC_BASE_URL
    - GROQ_API_KEY / GROQ_MODEL
    - DEEPSEEK_API_KEY / DEEPSEEK_MODEL
    - RELAY_TIMEOUT: Request timeout in seconds (default 60)
    - RELAY_MAX_ITERATIONS: Outer iterations per answer (default 6)
    - RELAY_LOG_LEVEL: Logging level name (default INFO)
"""

from __future__ import annotations

import logging
import os
from typing import Optional, Sequence

from dotenv import load_dotenv

from .exceptions import ConfigurationError
from .orchestrator.agent import AgentConfig
from .orchestrator.conversation_loop import DEFAULT_MAX_ITERATIONS
from .providers.base import (
    ANTHROPIC_BASE_URL,
    DEEPSEEK_BASE_URL,
    GROQ_BASE_URL,
    OPENAI_BASE_URL,
    ApiFormat,
    ProviderConfig,
)

load_dotenv()

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# (key var, model var, default model, base url var, default base url, format)
PROVIDER_ENV = (
    ("OPENAI_API_KEY", "OPENAI_MODEL", "gpt-4o", "OPENAI_BASE_URL", OPENAI_BASE_URL, ApiFormat.OPENAI),
    ("ANTHROPIC_API_KEY", "ANTHROPIC_MODEL", "claude-sonnet-4-5-20250929", "ANTHROPIC_BASE_URL", ANTHROPIC_BASE_URL, ApiFormat.ANTHROPIC),
    ("GROQ_API_KEY", "GROQ_MODEL", "llama-3.3-70b-versatile", "GROQ_BASE_URL", GROQ_BASE_URL, ApiFormat.OPENAI),
    ("DEEPSEEK_API_KEY", "DEEPSEEK_MODEL", "deepseek-chat", "DEEPSEEK_BASE_URL", DEEPSEEK_BASE_URL, ApiFormat.OPENAI),
)


def _env_number(name: str, default: float, cast: type = float):
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return cast(raw)
    except ValueError:
        raise ConfigurationError(
            f"{name} must be a number, got {raw!r}",
            details={"variable": name},
        )


def providers_from_env() -> list[ProviderConfig]:
    """Build one provider per configured API key.

    Returns:
        Providers in a fixed order (OpenAI, Anthropic, Groq, DeepSeek)

    Raises:
        ConfigurationError: If no API key is configured
    """
    timeout = _env_number("RELAY_TIMEOUT", 60.0)
    providers = []

    for key_var, model_var, default_model, url_var, default_url, api_format in PROVIDER_ENV:
        credential = os.getenv(key_var)
        if not credential:
            continue
        provider = ProviderConfig(
            endpoint=os.getenv(url_var) or default_url,
            credential=credential,
            model=os.getenv(model_var) or default_model,
            api_format=api_format,
            timeout=timeout,
        )
        logger.info(f"Configured provider {provider.label}")
        providers.append(provider)

    if not providers:
        raise ConfigurationError(
            "No LLM API keys configured",
            missing_keys=[entry[0] for entry in PROVIDER_ENV],
        )

    return providers


def agent_config_from_env(
    name: str,
    description: str,
    limits: Sequence[str] = (),
) -> AgentConfig:
    """Build an AgentConfig whose providers come from the environment."""
    return AgentConfig(
        name=name,
        description=description,
        limits=limits,
        providers=providers_from_env(),
        max_iterations=_env_number("RELAY_MAX_ITERATIONS", DEFAULT_MAX_ITERATIONS, int),
    )


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging for scripts using the agent."""
    level_name = (level or os.getenv("RELAY_LOG_LEVEL") or "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format=LOG_FORMAT,
    )
