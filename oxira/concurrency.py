"""Settle-all concurrency: run awaitables together and keep every outcome."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import TYPE_CHECKING, Generic, TypeVar

if TYPE_CHECKING:
    from collections.abc import Awaitable

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Outcome(Generic[T]):
    """Result of one branch: either a value or the exception it raised."""

    value: T | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


async def gather_settled(*awaitables: Awaitable[T]) -> list[Outcome[T]]:
    """Await all *awaitables* concurrently; one failing never aborts the others.

    Outcomes come back in argument order. Non-``Exception`` base exceptions
    (cancellation, interpreter exit) are re-raised rather than captured.
    """
    results = await asyncio.gather(*awaitables, return_exceptions=True)
    outcomes: list[Outcome[T]] = []
    for result in results:
        if isinstance(result, Exception):
            outcomes.append(Outcome(error=result))
        elif isinstance(result, BaseException):
            raise result
        else:
            outcomes.append(Outcome(value=result))
    return outcomes
