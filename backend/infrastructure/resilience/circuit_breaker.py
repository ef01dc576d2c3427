"""
Per-source circuit breaker.

The breaker keeps a rolling window of call outcomes. Once the window holds
at least ``minimum_throughput`` outcomes and the failure ratio reaches
``failure_ratio``, it opens for ``break_seconds``. After that it half-opens
and lets exactly one probe through: success closes it, failure reopens it.

State changes happen synchronously between awaits, so concurrent tasks on
one event loop never observe a half-updated window.
"""

import time
from collections import deque
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import TypeVar

from loguru import logger

from backend.api.services.weather_source import (
    UPSTREAM_ERRORS,
    CircuitOpenError,
)

T = TypeVar("T")


class CircuitState(str, Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitBreaker:
    def __init__(
        self,
        name: str,
        failure_ratio: float = 1.0,
        minimum_throughput: int = 3,
        sampling_seconds: float = 60.0,
        break_seconds: float = 30.0,
        time_func: Callable[[], float] = time.monotonic,
    ):
        if not 0 < failure_ratio <= 1:
            raise ValueError("failure_ratio must be in (0, 1]")
        if minimum_throughput < 1:
            raise ValueError("minimum_throughput must be >= 1")

        self.name = name
        self.failure_ratio = failure_ratio
        self.minimum_throughput = minimum_throughput
        self.sampling_seconds = sampling_seconds
        self.break_seconds = break_seconds
        self._time = time_func

        self._outcomes: deque[tuple[float, bool]] = deque()
        self._failures = 0
        self._state = CircuitState.CLOSED
        self._opened_at = 0.0
        self._probe_in_flight = False

    @property
    def state(self) -> CircuitState:
        if (
            self._state is CircuitState.OPEN
            and self._time() - self._opened_at >= self.break_seconds
        ):
            self._state = CircuitState.HALF_OPEN
            self._probe_in_flight = False
            logger.info(f"Circuit '{self.name}' half-open, allowing a probe")
        return self._state

    def allow_request(self) -> bool:
        state = self.state
        if state is CircuitState.CLOSED:
            return True
        if state is CircuitState.HALF_OPEN and not self._probe_in_flight:
            self._probe_in_flight = True
            return True
        return False

    def retry_after(self) -> float:
        """Seconds until the breaker half-opens (0 unless open)."""
        if self.state is not CircuitState.OPEN:
            return 0.0
        return max(0.0, self.break_seconds - (self._time() - self._opened_at))

    def record_success(self) -> None:
        if self._state is CircuitState.HALF_OPEN:
            self._close()
            return
        self._record(ok=True)

    def record_failure(self) -> None:
        if self._state is CircuitState.HALF_OPEN:
            self._open()
            return
        if self._state is CircuitState.OPEN:
            return
        self._record(ok=False)
        total = len(self._outcomes)
        if (
            total >= self.minimum_throughput
            and self._failures / total >= self.failure_ratio
        ):
            self._open()

    async def call(self, func: Callable[[], Awaitable[T]]) -> T:
        """
        Run ``func`` under the breaker.

        Raises:
            CircuitOpenError: The breaker rejected the call
        """
        if not self.allow_request():
            if self.state is CircuitState.HALF_OPEN:
                raise CircuitOpenError(
                    f"Circuit half-open for {self.name}, probe in progress"
                )
            raise CircuitOpenError(
                f"Circuit open for {self.name}, "
                f"retry in {self.retry_after():.0f}s"
            )
        try:
            result = await func()
        except UPSTREAM_ERRORS:
            self.record_failure()
            raise
        except BaseException:
            # No verdict on cancellation or bugs; free the probe slot
            self._probe_in_flight = False
            raise
        self.record_success()
        return result

    def _record(self, ok: bool) -> None:
        now = self._time()
        self._outcomes.append((now, ok))
        if not ok:
            self._failures += 1
        horizon = now - self.sampling_seconds
        while self._outcomes and self._outcomes[0][0] <= horizon:
            _, old_ok = self._outcomes.popleft()
            if not old_ok:
                self._failures -= 1

    def _reset_window(self) -> None:
        self._outcomes.clear()
        self._failures = 0
        self._probe_in_flight = False

    def _open(self) -> None:
        self._state = CircuitState.OPEN
        self._opened_at = self._time()
        self._reset_window()
        logger.warning(
            f"Circuit '{self.name}' opened for {self.break_seconds:.0f}s"
        )

    def _close(self) -> None:
        self._state = CircuitState.CLOSED
        self._reset_window()
        logger.info(f"Circuit '{self.name}' closed")

    def __repr__(self) -> str:
        return f"CircuitBreaker(name={self.name!r}, state={self._state.value})"
