"""
Application settings.

Values come from environment variables with sensible defaults; each
section is a plain pydantic model so tests can build one directly.
"""

import os
from functools import lru_cache

from pydantic import BaseModel, Field


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str, default: list[str]) -> list[str]:
    value = os.getenv(name)
    if not value:
        return default
    return [item.strip() for item in value.split(",") if item.strip()]


class WeatherSourceConfig(BaseModel):
    """Configuration for one upstream weather source."""

    name: str = Field(..., description="Public source name")
    base_url: str = Field(..., description="Primary API base URL")
    api_key: str | None = Field(None, description="API key, if required")
    requires_api_key: bool = Field(
        False, description="Source is disabled without an API key"
    )
    history_base_url: str | None = Field(
        None, description="Base URL for historical data (if different)"
    )
    timeout_seconds: float = Field(
        5.0, gt=0, description="Per-attempt HTTP timeout"
    )
    cache_duration_minutes: int = Field(
        15, ge=0, description="TTL of the fresh cache slot"
    )
    enabled: bool = Field(True, description="Source can be queried")

    @property
    def is_enabled(self) -> bool:
        if not self.enabled:
            return False
        if self.requires_api_key and not self.api_key:
            return False
        return True


class WeatherSourcesSettings(BaseModel):
    """Upstream sources, in registration order."""

    timeout_seconds: float = Field(
        default_factory=lambda: float(
            os.getenv("WEATHER_TIMEOUT_SECONDS", "5")
        )
    )
    cache_duration_minutes: int = Field(
        default_factory=lambda: int(
            os.getenv("WEATHER_CACHE_DURATION_MINUTES", "15")
        )
    )
    stale_ttl_hours: int = 24
    response_cache_minutes: int = 15

    # Resilience
    retry_attempts: int = 3
    retry_base_delay: float = 1.0
    breaker_failure_ratio: float = 1.0
    breaker_minimum_throughput: int = 3
    breaker_sampling_seconds: float = 60.0
    breaker_break_seconds: float = 30.0

    def openmeteo(self) -> WeatherSourceConfig:
        return WeatherSourceConfig(
            name="OpenMeteo",
            base_url=os.getenv(
                "OPENMETEO_BASE_URL", "https://api.open-meteo.com"
            ),
            timeout_seconds=self.timeout_seconds,
            cache_duration_minutes=self.cache_duration_minutes,
        )

    def weatherapi(self) -> WeatherSourceConfig:
        return WeatherSourceConfig(
            name="WeatherAPI",
            base_url=os.getenv(
                "WEATHERAPI_BASE_URL", "https://api.weatherapi.com"
            ),
            api_key=os.getenv("WEATHERAPI_KEY") or None,
            requires_api_key=True,
            timeout_seconds=self.timeout_seconds,
            cache_duration_minutes=self.cache_duration_minutes,
        )

    def openweathermap(self) -> WeatherSourceConfig:
        return WeatherSourceConfig(
            name="OpenWeatherMap",
            base_url=os.getenv(
                "OPENWEATHERMAP_BASE_URL", "https://api.openweathermap.org"
            ),
            history_base_url=os.getenv(
                "OPENWEATHERMAP_HISTORY_BASE_URL",
                "https://history.openweathermap.org",
            ),
            api_key=os.getenv("OPENWEATHERMAP_KEY") or None,
            requires_api_key=True,
            timeout_seconds=self.timeout_seconds,
            cache_duration_minutes=self.cache_duration_minutes,
        )

    def sources(self) -> list[WeatherSourceConfig]:
        return [self.openmeteo(), self.weatherapi(), self.openweathermap()]


class RedisSettings(BaseModel):
    redis_url: str = Field(
        default_factory=lambda: os.getenv(
            "REDIS_URL", "redis://localhost:6379/0"
        )
    )
    enabled: bool = Field(
        default_factory=lambda: _env_bool("REDIS_ENABLED", False)
    )


class AppSettings(BaseModel):
    PROJECT_NAME: str = "Weather Aggregator API"
    VERSION: str = "1.0.0"
    API_V1_PREFIX: str = Field(
        default_factory=lambda: os.getenv("API_V1_PREFIX", "/api/v1")
    )
    BACKEND_CORS_ORIGINS: list[str] = Field(
        default_factory=lambda: _env_list("BACKEND_CORS_ORIGINS", ["*"])
    )
    LOG_LEVEL: str = Field(
        default_factory=lambda: os.getenv("LOG_LEVEL", "INFO")
    )
    LOG_JSON: bool = Field(
        default_factory=lambda: _env_bool("LOG_JSON", False)
    )
    LOG_DIR: str | None = Field(
        default_factory=lambda: os.getenv("LOG_DIR", "logs") or None
    )

    redis: RedisSettings = Field(default_factory=RedisSettings)
    weather: WeatherSourcesSettings = Field(
        default_factory=WeatherSourcesSettings
    )


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    """Cached settings singleton (``get_settings.cache_clear()`` in tests)."""
    return AppSettings()
