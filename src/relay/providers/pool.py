"""
Provider Pool.

Working set of live providers for a single conversation run.
"""

from __future__ import annotations

import logging
import random
from typing import Iterable, Optional

from ..exceptions import ProviderPoolExhaustedError
from .base import ProviderConfig

logger = logging.getLogger(__name__)


class ProviderPool:
    """Random selection with permanent removal, scoped to one run.

    The pool copies the configured providers, so discarding one never
    touches the agent's own list. A fresh pool is built for every
    ``answer`` call, which means failures are not remembered across calls.

    Usage:
        pool = ProviderPool(config.providers)
        while not pool.is_empty():
            provider = pool.pick_one()
            ...
            pool.discard(provider)
    """

    def __init__(
        self,
        providers: Iterable[ProviderConfig],
        rng: Optional[random.Random] = None,
    ):
        self._live: list[ProviderConfig] = list(providers)
        self._rng = rng or random.Random()

    def __len__(self) -> int:
        return len(self._live)

    def __contains__(self, provider: object) -> bool:
        return any(live is provider for live in self._live)

    def is_empty(self) -> bool:
        return not self._live

    def pick_one(self) -> ProviderConfig:
        """Return a uniformly random live provider without removing it.

        Raises:
            ProviderPoolExhaustedError: If the pool is empty
        """
        if not self._live:
            raise ProviderPoolExhaustedError()
        return self._live[self._rng.randrange(len(self._live))]

    def discard(self, provider: ProviderConfig) -> None:
        """Remove a provider (matched by identity) for the rest of the run.

        Every entry of a provider listed more than once is removed.
        """
        remaining = [live for live in self._live if live is not provider]
        if len(remaining) != len(self._live):
            self._live = remaining
            logger.debug(
                f"Discarded provider {provider.label}, {len(self._live)} left"
            )
