"""
Weather aggregation service.

Fans a request out to the selected weather sources concurrently, waits for
all of them, and combines the available readings into one summary.

Failure policy:
- each source is isolated: an exception escaping a provider becomes an
  unavailable entry for that source only
- no retries here (the resilience layer owns them)
- "no matching providers" (empty ``sources``) and "all sources
  unavailable" stay distinguishable via ``WeatherForecastResponse.outcome``
"""

import asyncio
from collections.abc import Iterable, Sequence
from datetime import date, timedelta
from decimal import Decimal

from loguru import logger

from backend.api.services.weather_source import WeatherSourceProvider
from backend.core.aggregation.cache_keys import response_cache_key
from backend.core.domain.forecast import (
    AggregatedForecast,
    ForecastSource,
    WeatherForecastRequest,
    WeatherForecastResponse,
)
from backend.core.domain.value_objects import Location, round_one_place
from backend.infrastructure.cache.cache_store import CacheStore

RESPONSE_CACHE_TTL = timedelta(minutes=15)


def format_range(values: Sequence[Decimal], unit: str) -> str:
    """``"20.0°C"`` when all values match, else ``"18.0°C - 24.0°C"``."""
    low, high = min(values), max(values)
    if low == high:
        return f"{round_one_place(low)}{unit}"
    return f"{round_one_place(low)}{unit} - {round_one_place(high)}{unit}"


def mean(values: Sequence[Decimal]) -> Decimal:
    """Arithmetic mean rounded to one decimal place."""
    return round_one_place(sum(values, Decimal(0)) / len(values))


def calculate_aggregate(
    sources: Iterable[ForecastSource],
) -> AggregatedForecast | None:
    """Mean and range over the sources that carry a full reading."""
    usable = [source for source in sources if source.has_reading]
    if not usable:
        return None

    temperatures = [source.temperature.celsius for source in usable]
    humidities = [source.humidity.percent for source in usable]

    return AggregatedForecast(
        avg_temperature=mean(temperatures),
        avg_humidity=mean(humidities),
        temperature_range=format_range(temperatures, "°C"),
        humidity_range=format_range(humidities, "%"),
    )


class WeatherAggregationService:
    def __init__(
        self,
        providers: Sequence[WeatherSourceProvider],
        response_cache: CacheStore | None = None,
        response_cache_ttl: timedelta = RESPONSE_CACHE_TTL,
    ):
        """
        Args:
            providers: Registered sources, in query/response order
            response_cache: Optional store for whole responses
            response_cache_ttl: TTL of cached responses
        """
        self.providers = list(providers)
        self.response_cache = response_cache
        self.response_cache_ttl = response_cache_ttl

    @property
    def source_names(self) -> list[str]:
        return [p.source_name for p in self.providers if p.enabled]

    def select_providers(
        self, requested: Iterable[str] | None
    ) -> list[WeatherSourceProvider]:
        """Enabled providers, narrowed to ``requested`` names (any case)."""
        enabled = [p for p in self.providers if p.enabled]
        wanted = {
            name.strip().lower() for name in requested or () if name.strip()
        }
        if not wanted:
            return enabled

        selected = [p for p in enabled if p.source_name.lower() in wanted]
        logger.debug(
            f"Filtered providers: {len(selected)} out of "
            f"{len(enabled)} enabled"
        )
        return selected

    async def aggregate(
        self, request: WeatherForecastRequest
    ) -> WeatherForecastResponse:
        """
        Build the aggregated forecast for one request.

        Cancelling the calling task cancels every in-flight source fetch.

        Raises:
            ValueError: city/country do not form a valid ``Location``
        """
        location = Location(city=request.city, country=request.country)
        cache_key = response_cache_key(
            location.city, location.country, request.date, request.sources
        )

        cached = await self._get_cached_response(cache_key)
        if cached is not None:
            return cached

        providers = self.select_providers(request.sources)
        sources = list(
            await asyncio.gather(
                *(
                    self._fetch_isolated(provider, location, request.date)
                    for provider in providers
                )
            )
        )

        response = WeatherForecastResponse(
            location=str(location),
            date=request.date,
            aggregated_forecast=calculate_aggregate(sources),
            sources=sources,
        )

        logger.info(
            f"Weather forecast aggregated for {location} on "
            f"{request.date.isoformat()}. "
            f"Available: {response.available_count}/{len(sources)}"
        )

        if response.available_count > 0:
            await self._cache_response(cache_key, response)
        return response

    async def _fetch_isolated(
        self, provider: WeatherSourceProvider, location: Location, day: date
    ) -> ForecastSource:
        try:
            result = await provider.fetch(location, day)
        except Exception as e:
            logger.exception(
                f"Error fetching forecast from {provider.source_name}"
            )
            return ForecastSource.unavailable(
                provider.source_name, f"Exception: {e}"
            )

        if not result.available:
            logger.warning(
                f"{provider.source_name} is unavailable: {result.error}"
            )
        return result

    async def _get_cached_response(
        self, cache_key: str
    ) -> WeatherForecastResponse | None:
        if self.response_cache is None:
            return None
        try:
            cached = await self.response_cache.get(cache_key)
            if cached is None:
                logger.debug(f"Cache MISS: {cache_key}")
                return None
            response = WeatherForecastResponse.model_validate_json(cached)
        except Exception as e:
            logger.error(f"Response cache read failed for {cache_key}: {e}")
            return None

        logger.debug(f"Cache HIT: {cache_key}")
        return response

    async def _cache_response(
        self, cache_key: str, response: WeatherForecastResponse
    ) -> None:
        if self.response_cache is None:
            return
        try:
            await self.response_cache.set(
                cache_key,
                response.model_dump_json(),
                self.response_cache_ttl.total_seconds(),
            )
        except Exception as e:
            logger.error(f"Response cache write failed for {cache_key}: {e}")
