# backend/api/services/weather_factory.py
"""
Central factory for weather sources with explicit composition.

Every source is assembled the same way, in a fixed order:

    raw vendor client -> ResilientWeatherProvider -> CachedWeatherSourceProvider

Responsibilities:
- Single cache store (Redis or in-process) shared by all sources
- Single geocoding client shared by all sources
- One circuit breaker per source
- Safe, centralised cleanup
"""

from datetime import timedelta
from functools import lru_cache

from loguru import logger

from backend.api.services.geocoding.geocoding_client import GeocodingClient
from backend.api.services.weather_source import (
    WeatherReadingProvider,
    WeatherSourceProvider,
)
from backend.core.aggregation.weather_aggregation import (
    WeatherAggregationService,
)
from backend.infrastructure.cache.cache_store import (
    CacheStore,
    InMemoryCacheStore,
    RedisCacheStore,
)
from backend.infrastructure.cache.cached_provider import (
    CachedWeatherSourceProvider,
)
from backend.infrastructure.resilience import (
    CircuitBreaker,
    ResiliencePolicy,
    ResilientWeatherProvider,
    RetryConfig,
    RetryPolicy,
)
from config.settings.app_config import (
    WeatherSourceConfig,
    WeatherSourcesSettings,
    get_settings,
)


@lru_cache(maxsize=1)
def get_cache_store() -> CacheStore:
    """Lazy singleton of the cache store."""
    settings = get_settings()
    if settings.redis.enabled:
        return RedisCacheStore.from_url(settings.redis.redis_url)
    logger.info("Redis disabled, using in-process cache store")
    return InMemoryCacheStore()


@lru_cache(maxsize=1)
def get_geocoding_client() -> GeocodingClient:
    """Lazy singleton of the geocoding client."""
    return GeocodingClient()


class WeatherProviderFactory:
    """
    Official factory for all weather sources.

    Usage:
        provider = WeatherProviderFactory.create_openmeteo()
        source = await provider.fetch(location, day)
    """

    @staticmethod
    def build_policy(
        source: WeatherSourceConfig, sources: WeatherSourcesSettings
    ) -> ResiliencePolicy:
        breaker = CircuitBreaker(
            name=source.name,
            failure_ratio=sources.breaker_failure_ratio,
            minimum_throughput=sources.breaker_minimum_throughput,
            sampling_seconds=sources.breaker_sampling_seconds,
            break_seconds=sources.breaker_break_seconds,
        )
        retry = RetryPolicy(
            RetryConfig(
                retry_attempts=sources.retry_attempts,
                retry_delay=sources.retry_base_delay,
            ),
            name=source.name,
        )
        return ResiliencePolicy(breaker, retry, source.timeout_seconds)

    @staticmethod
    def compose(
        raw: WeatherReadingProvider,
        source: WeatherSourceConfig,
        sources: WeatherSourcesSettings,
        store: CacheStore,
    ) -> CachedWeatherSourceProvider:
        """Wrap a raw client with resilience, then with the cache."""
        resilient = ResilientWeatherProvider(
            raw, WeatherProviderFactory.build_policy(source, sources)
        )
        return CachedWeatherSourceProvider(
            resilient,
            store,
            cache_duration=timedelta(minutes=source.cache_duration_minutes),
            stale_duration=timedelta(hours=sources.stale_ttl_hours),
        )

    @staticmethod
    def create_openmeteo(
        sources: WeatherSourcesSettings | None = None,
        store: CacheStore | None = None,
        geocoder: GeocodingClient | None = None,
    ) -> CachedWeatherSourceProvider:
        """Open-Meteo (free, no API key)."""
        from .openmeteo.openmeteo_client import OpenMeteoClient

        sources = sources or get_settings().weather
        config = sources.openmeteo()
        raw = OpenMeteoClient(config, geocoder or get_geocoding_client())
        logger.debug("OpenMeteoClient created (resilience + cache)")
        return WeatherProviderFactory.compose(
            raw, config, sources, store or get_cache_store()
        )

    @staticmethod
    def create_weatherapi(
        sources: WeatherSourcesSettings | None = None,
        store: CacheStore | None = None,
        geocoder: GeocodingClient | None = None,
    ) -> CachedWeatherSourceProvider:
        """WeatherAPI.com (disabled without WEATHERAPI_KEY)."""
        from .weatherapi.weatherapi_client import WeatherApiClient

        sources = sources or get_settings().weather
        config = sources.weatherapi()
        raw = WeatherApiClient(config, geocoder or get_geocoding_client())
        logger.debug(
            f"WeatherApiClient created (enabled={config.is_enabled})"
        )
        return WeatherProviderFactory.compose(
            raw, config, sources, store or get_cache_store()
        )

    @staticmethod
    def create_openweathermap(
        sources: WeatherSourcesSettings | None = None,
        store: CacheStore | None = None,
        geocoder: GeocodingClient | None = None,
    ) -> CachedWeatherSourceProvider:
        """OpenWeatherMap (disabled without OPENWEATHERMAP_KEY)."""
        from .openweathermap.openweathermap_client import (
            OpenWeatherMapClient,
        )

        sources = sources or get_settings().weather
        config = sources.openweathermap()
        raw = OpenWeatherMapClient(config, geocoder or get_geocoding_client())
        logger.debug(
            f"OpenWeatherMapClient created (enabled={config.is_enabled})"
        )
        return WeatherProviderFactory.compose(
            raw, config, sources, store or get_cache_store()
        )

    @staticmethod
    def create_all(
        sources: WeatherSourcesSettings | None = None,
        store: CacheStore | None = None,
        geocoder: GeocodingClient | None = None,
    ) -> list[WeatherSourceProvider]:
        """All sources, in registration (and response) order."""
        return [
            WeatherProviderFactory.create_openmeteo(sources, store, geocoder),
            WeatherProviderFactory.create_weatherapi(sources, store, geocoder),
            WeatherProviderFactory.create_openweathermap(
                sources, store, geocoder
            ),
        ]

    @classmethod
    async def close_all(cls) -> None:
        """
        Close every open connection.

        Called on application shutdown (FastAPI lifespan).
        """
        if get_aggregation_service.cache_info().currsize:
            service = get_aggregation_service()
            for provider in service.providers:
                await provider.close()
            get_aggregation_service.cache_clear()

        if get_geocoding_client.cache_info().currsize:
            await get_geocoding_client().close()
            get_geocoding_client.cache_clear()

        if get_cache_store.cache_info().currsize:
            try:
                await get_cache_store().close()
            except Exception as e:
                logger.error(f"Error closing cache store: {e}")
            get_cache_store.cache_clear()

        logger.info("WeatherProviderFactory: cleanup complete")


@lru_cache(maxsize=1)
def get_aggregation_service() -> WeatherAggregationService:
    """Lazy singleton of the aggregation service (FastAPI dependency)."""
    settings = get_settings()
    store = get_cache_store()
    service = WeatherAggregationService(
        WeatherProviderFactory.create_all(settings.weather, store),
        response_cache=store,
        response_cache_ttl=timedelta(
            minutes=settings.weather.response_cache_minutes
        ),
    )
    logger.info(
        f"WeatherAggregationService created with sources: "
        f"{service.source_names}"
    )
    return service
