"""Bounded exponential back-off for async operations."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field, replace
from typing import Awaitable, Callable, TypeVar

from loguru import logger

T = TypeVar("T")

DEFAULT_MAX_DELAY = 4.0


@dataclass
class RetryPolicy:
    """Run an operation up to ``attempts`` times.

    The wait before attempt k+1 is ``min(max_delay, base_delay * 2**(k-1))``
    seconds. The last error is re-raised unchanged.
    """

    attempts: int
    base_delay: float
    max_delay: float = DEFAULT_MAX_DELAY
    label: str = "operation"
    sleep: Callable[[float], Awaitable[None]] = field(default=asyncio.sleep, repr=False)

    def with_label(self, label: str) -> "RetryPolicy":
        return replace(self, label=label)

    def delay_for(self, attempt: int) -> float:
        return min(self.max_delay, self.base_delay * 2 ** (attempt - 1))

    async def run(self, operation: Callable[[], Awaitable[T]]) -> T:
        attempts = max(1, self.attempts)

        for attempt in range(1, attempts + 1):
            try:
                return await operation()
            except Exception as e:
                if attempt >= attempts:
                    raise
                delay = self.delay_for(attempt)
                logger.debug(f"{self.label} failed (attempt {attempt}/{attempts}): {e}; retrying in {delay:.2f}s")
                await self.sleep(delay)

        raise RuntimeError("unreachable")
