"""
Resilience wrapper around a raw weather source.
"""

from datetime import date

from backend.api.services.weather_source import WeatherReadingProvider
from backend.core.domain.forecast import WeatherReading
from backend.core.domain.value_objects import Location
from backend.infrastructure.resilience.circuit_breaker import CircuitState
from backend.infrastructure.resilience.policy import ResiliencePolicy


class ResilientWeatherProvider(WeatherReadingProvider):
    """
    Runs the inner source's ``fetch_reading`` through a
    ``ResiliencePolicy``.

    Open circuits, exhausted retries and timeouts surface as ordinary
    upstream errors, so the inherited ``fetch()`` reports them as an
    unavailable source like any other failure.
    """

    def __init__(self, inner: WeatherReadingProvider, policy: ResiliencePolicy):
        super().__init__(inner.source_name, enabled=inner.enabled)
        self.inner = inner
        self.policy = policy

    @property
    def circuit_state(self) -> CircuitState:
        return self.policy.breaker.state

    async def fetch_reading(
        self, location: Location, day: date
    ) -> WeatherReading:
        return await self.policy.execute(
            lambda: self.inner.fetch_reading(location, day)
        )

    async def close(self) -> None:
        await self.inner.close()
