"""Exponential backoff retry for provider and page-fetch calls."""

from __future__ import annotations

import asyncio
import random
from typing import TYPE_CHECKING, TypeVar

import httpx
import structlog

from oxira.errors import FetchError, ProviderError
from oxira.metrics import retry_attempts_total, retry_exhausted_total

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

logger = structlog.get_logger()

T = TypeVar("T")

_RATE_LIMIT_STATUS = 429


class RetryExhaustedError(Exception):
    """All retry attempts failed."""


def is_transient_error(exc: BaseException) -> bool:
    """True for failures worth retrying: network errors, timeouts and rate limits."""
    if isinstance(exc, httpx.TransportError):
        return True
    if isinstance(exc, (ProviderError, FetchError)):
        return exc.status_code == _RATE_LIMIT_STATUS
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code == _RATE_LIMIT_STATUS
    return "rate limit" in str(exc).lower()


async def async_with_retry(
    fn: Callable[[], Awaitable[T]],
    max_retries: int = 2,
    base_delay: float = 1.0,
    max_delay: float = 30.0,
    jitter: bool = True,
    should_retry: Callable[[BaseException], bool] = is_transient_error,
    fn_name: str = "",
) -> T:
    """Await *fn* with exponential backoff retries.

    Only errors accepted by *should_retry* are retried; anything else
    propagates on the first attempt. Uses jitter (delay * random(0.5, 1.5))
    when *jitter* is True.

    Raises RetryExhaustedError after *max_retries* retries all failed.
    """
    label = fn_name or getattr(fn, "__name__", "fn")
    last_exc: Exception | None = None
    for attempt in range(max_retries + 1):
        try:
            return await fn()
        except Exception as exc:
            if not should_retry(exc):
                raise
            last_exc = exc
            if attempt == max_retries:
                break
            retry_attempts_total.labels(fn_name=label).inc()
            delay = min(base_delay * (2**attempt), max_delay)
            if jitter:
                delay = delay * (0.5 + random.random())
            logger.warning(
                "Async retry attempt",
                attempt=attempt + 1,
                max_retries=max_retries,
                fn=label,
                delay_s=round(delay, 2),
                error=str(exc),
            )
            await asyncio.sleep(delay)
    retry_exhausted_total.labels(fn_name=label).inc()
    raise RetryExhaustedError(
        f"Failed after {max_retries + 1} attempts: {last_exc}"
    ) from last_exc
