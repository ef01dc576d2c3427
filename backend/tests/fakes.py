"""
Test doubles shared by unit and integration tests.
"""

from collections.abc import Sequence
from datetime import date

from backend.api.services.weather_source import (
    WeatherReadingProvider,
    WeatherSourceProvider,
)
from backend.core.domain.forecast import ForecastSource, WeatherReading
from backend.core.domain.value_objects import Humidity, Location, Temperature
from backend.infrastructure.cache.cache_store import CacheStore


def make_reading(celsius: float, percent: float) -> WeatherReading:
    return WeatherReading(
        temperature=Temperature(celsius=celsius),
        humidity=Humidity(percent=percent),
    )


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class ScriptedReadingProvider(WeatherReadingProvider):
    """
    Returns (or raises) the scripted outcomes in order; the last outcome
    repeats once the script is exhausted.
    """

    def __init__(
        self,
        source_name: str,
        outcomes: Sequence[WeatherReading | BaseException],
        enabled: bool = True,
    ):
        super().__init__(source_name, enabled=enabled)
        self.outcomes = list(outcomes)
        self.calls = 0
        self.closed = False

    async def fetch_reading(
        self, location: Location, day: date
    ) -> WeatherReading:
        index = min(self.calls, len(self.outcomes) - 1)
        self.calls += 1
        outcome = self.outcomes[index]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    async def close(self) -> None:
        self.closed = True


class StaticProvider(WeatherSourceProvider):
    """Returns a fixed ``ForecastSource`` or raises a fixed exception."""

    def __init__(
        self,
        source_name: str,
        result: ForecastSource | None = None,
        error: Exception | None = None,
        enabled: bool = True,
    ):
        super().__init__(source_name, enabled=enabled)
        self.result = result
        self.error = error
        self.calls = 0

    async def fetch(self, location: Location, day: date) -> ForecastSource:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.result


class FailingStore(CacheStore):
    """Cache store whose every operation fails."""

    def __init__(self, error: Exception | None = None):
        self.error = error or ConnectionError("cache store down")

    async def get(self, key: str) -> str | None:
        raise self.error

    async def set(self, key: str, value: str, ttl_seconds: float) -> None:
        raise self.error


class StubGeocoder:
    """Geocoder returning fixed coordinates."""

    def __init__(self, coordinates: tuple[float, float] = (51.5085, -0.1257)):
        self.coordinates = coordinates
        self.calls = 0

    async def resolve_coordinates(
        self, location: Location
    ) -> tuple[float, float]:
        self.calls += 1
        return self.coordinates

    async def close(self) -> None:
        pass
