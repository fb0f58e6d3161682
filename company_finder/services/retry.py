"""Retry policy value and the ``attempt`` combinator used around remote calls."""
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar

from company_finder.errors import RetryExhaustedError

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    max_attempts: int = 3
    base_delay: float = 1.0
    multiplier: float = 2.0

    def delay_for(self, attempt: int) -> float:
        """Seconds to wait after the given (1-based) failed attempt."""
        return self.base_delay * (self.multiplier ** (attempt - 1))

    def delays(self) -> list[float]:
        return [self.delay_for(n) for n in range(1, max(self.max_attempts, 1))]


async def attempt(
    fn: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    *,
    retry_on: tuple[type[BaseException], ...] = (Exception,),
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    on_retry: Callable[[int, BaseException, float], None] | None = None,
) -> T:
    """Await ``fn()`` until it succeeds or the policy runs out of attempts.

    Errors outside ``retry_on`` propagate on the first occurrence. When every
    attempt fails, ``RetryExhaustedError`` carries the last error.
    """
    max_attempts = max(int(policy.max_attempts), 1)
    for current in range(1, max_attempts + 1):
        try:
            return await fn()
        except retry_on as exc:
            if current >= max_attempts:
                raise RetryExhaustedError(exc, current) from exc
            delay = policy.delay_for(current)
            if on_retry is not None:
                on_retry(current, exc, delay)
            await sleep(delay)
    raise AssertionError("unreachable")  # pragma: no cover
