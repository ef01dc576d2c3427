"""
Cache-aside decorator for weather sources, with a stale fallback slot.

Per (source, location, date) there are two slots:
- fresh: short TTL (source cache duration), served directly on hit
- stale: long TTL (24h by default), served only when a fetch fails

Both slots are written only after an available result.
"""

from datetime import date, timedelta

from loguru import logger

from backend.api.services.weather_source import (
    WeatherSourceProvider,
    describe_error,
)
from backend.core.aggregation.cache_keys import (
    provider_cache_key,
    provider_stale_key,
)
from backend.core.domain.forecast import ForecastSource
from backend.core.domain.value_objects import Location
from backend.infrastructure.cache.cache_store import CacheStore

DEFAULT_STALE_TTL = timedelta(hours=24)


class CachedWeatherSourceProvider(WeatherSourceProvider):
    """
    Wraps a provider (usually resilience-wrapped) with cache-aside.

    ``fetch()`` never raises. A failing store degrades to a cache miss
    (reads) or is logged (writes); the inner result is still returned.
    Unexpected inner errors fall back to the stale slot, then to an
    unavailable source.
    """

    def __init__(
        self,
        inner: WeatherSourceProvider,
        store: CacheStore,
        cache_duration: timedelta = timedelta(minutes=15),
        stale_duration: timedelta = DEFAULT_STALE_TTL,
    ):
        super().__init__(inner.source_name, enabled=inner.enabled)
        self.inner = inner
        self.store = store
        self.cache_duration = cache_duration
        self.stale_duration = stale_duration

    async def fetch(self, location: Location, day: date) -> ForecastSource:
        cache_key = provider_cache_key(self.source_name, location, day)
        stale_key = provider_stale_key(self.source_name, location, day)

        cached = await self._read(cache_key)
        if cached is not None:
            logger.debug(f"Cache HIT: {cache_key}")
            return cached

        logger.debug(f"Cache MISS: {cache_key}")
        try:
            result = await self.inner.fetch(location, day)
        except Exception as e:
            logger.warning(
                f"Failed to fetch forecast from {self.source_name}: {e}. "
                "Trying stale cache"
            )
            stale = await self._get_stale(stale_key)
            if stale is not None:
                return stale
            logger.error(
                f"No cached data available for {self.source_name}, "
                "returning unavailable forecast"
            )
            return ForecastSource.unavailable(
                self.source_name,
                f"Failed to fetch forecast: {describe_error(e)}",
            )

        if result.available:
            await self._write(cache_key, stale_key, result)
            return result

        stale = await self._get_stale(stale_key)
        return stale if stale is not None else result

    async def _read(self, key: str) -> ForecastSource | None:
        """Cached entry for ``key``; store or decode errors count as a miss."""
        try:
            cached = await self.store.get(key)
            if cached is None:
                return None
            return ForecastSource.model_validate_json(cached)
        except Exception as e:
            logger.error(f"Failed to read cache {key}: {e}")
            return None

    async def _write(
        self, cache_key: str, stale_key: str, result: ForecastSource
    ) -> None:
        payload = result.model_dump_json()
        try:
            await self.store.set(
                cache_key, payload, self.cache_duration.total_seconds()
            )
            await self.store.set(
                stale_key, payload, self.stale_duration.total_seconds()
            )
        except Exception as e:
            logger.error(f"Failed to cache {self.source_name} forecast: {e}")

    async def _get_stale(self, stale_key: str) -> ForecastSource | None:
        stale = await self._read(stale_key)
        if stale is None:
            return None

        logger.info(
            f"Returning stale cached data for {self.source_name} "
            f"(retrieved at {stale.retrieved_at.isoformat()})"
        )
        return stale

    @property
    def circuit_state(self) -> str | None:
        return self.inner.circuit_state

    async def close(self) -> None:
        await self.inner.close()
