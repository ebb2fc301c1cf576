"""Sliding-window rate limiter for outbound provider requests."""

from __future__ import annotations

import asyncio
import time
from collections import deque
from typing import TYPE_CHECKING

import structlog

from oxira.metrics import rate_limit_wait_seconds

if TYPE_CHECKING:
    from collections.abc import Callable

logger = structlog.get_logger()


class RateLimiter:
    """Allows at most *max_requests* per rolling *window_seconds*.

    Callers block in ``acquire`` until a slot frees. Single event loop only:
    the bookkeeping between awaits is not shared across threads.
    """

    def __init__(
        self,
        max_requests: int,
        window_seconds: float,
        name: str = "",
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.name = name
        self._clock = clock
        self._timestamps: deque[float] = deque()

    def _prune(self, now: float) -> None:
        while self._timestamps and now - self._timestamps[0] >= self.window_seconds:
            self._timestamps.popleft()

    def can_make_request(self) -> bool:
        self._prune(self._clock())
        return len(self._timestamps) < self.max_requests

    async def acquire(self) -> None:
        """Wait for a free slot, then claim it."""
        started = self._clock()
        while not self.can_make_request():
            wait = self.window_seconds - (self._clock() - self._timestamps[0])
            logger.debug("rate_limit_wait", limiter=self.name, wait_s=round(wait, 3))
            await asyncio.sleep(max(wait, 0.0))
        self._timestamps.append(self._clock())
        rate_limit_wait_seconds.labels(provider=self.name or "unknown").observe(
            max(self._clock() - started, 0.0)
        )


# Process-wide limiters: one request per second per provider.
brave_rate_limiter = RateLimiter(1, 1.0, name="brave")
tavily_rate_limiter = RateLimiter(1, 1.0, name="tavily")
