"""
Retry with exponential backoff and jitter.
"""

import asyncio
import random
from collections.abc import Awaitable, Callable
from typing import TypeVar

from loguru import logger
from pydantic import BaseModel, Field

from backend.api.services.weather_source import describe_error, is_retryable

T = TypeVar("T")


class RetryConfig(BaseModel):
    """
    Retry configuration.

    Attributes:
        retry_attempts: Total attempts, including the first one
        retry_delay: Base delay for exponential retry (seconds)
        jitter: Upper bound of the random extra delay, as a fraction of
            the exponential delay
    """

    retry_attempts: int = Field(3, ge=1)
    retry_delay: float = Field(1.0, ge=0)
    jitter: float = Field(0.5, ge=0)


class RetryPolicy:
    def __init__(
        self,
        config: RetryConfig | None = None,
        name: str = "",
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        random_func: Callable[[], float] = random.random,
    ):
        self.config = config or RetryConfig()
        self.name = name
        self._sleep = sleep
        self._random = random_func

    def backoff_delay(self, attempt: int) -> float:
        """Delay after the zero-based ``attempt`` failed."""
        delay = self.config.retry_delay * (2**attempt)
        return delay + delay * self.config.jitter * self._random()

    async def execute(self, func: Callable[[], Awaitable[T]]) -> T:
        """
        Call ``func`` until it succeeds, a non-retryable error occurs or
        the attempts are exhausted; the last error is re-raised.
        """
        attempts = self.config.retry_attempts
        for attempt in range(attempts):
            try:
                return await func()
            except Exception as e:
                if not is_retryable(e) or attempt >= attempts - 1:
                    raise
                delay = self.backoff_delay(attempt)
                logger.warning(
                    f"{self.name} attempt {attempt + 1}/{attempts} failed "
                    f"({describe_error(e)}), retrying in {delay:.2f}s"
                )
                await self._sleep(delay)

        # Should never reach here due to raise in loop
        raise RuntimeError(f"{self.name}: retry loop exited without result")
