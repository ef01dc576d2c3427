"""
Resilience pipeline for one weather source.

Policies compose outer to inner as circuit breaker -> retry -> timeout:
the timeout bounds every single attempt, retries happen inside one breaker
call, and the breaker records one outcome per call.
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

from backend.infrastructure.resilience.circuit_breaker import CircuitBreaker
from backend.infrastructure.resilience.retry import RetryPolicy

T = TypeVar("T")


class ResiliencePolicy:
    def __init__(
        self,
        breaker: CircuitBreaker,
        retry: RetryPolicy,
        timeout_seconds: float,
    ):
        self.breaker = breaker
        self.retry = retry
        self.timeout_seconds = timeout_seconds

    async def execute(self, func: Callable[[], Awaitable[T]]) -> T:
        """Run ``func`` (a coroutine factory) through all three policies."""

        async def attempt() -> T:
            return await asyncio.wait_for(func(), self.timeout_seconds)

        async def with_retry() -> T:
            return await self.retry.execute(attempt)

        return await self.breaker.call(with_retry)
