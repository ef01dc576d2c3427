"""
Tests for settings and per-source configuration.
"""

import pytest

from config.settings.app_config import (
    AppSettings,
    WeatherSourceConfig,
    WeatherSourcesSettings,
    get_settings,
)


class TestWeatherSourceConfig:
    def test_enabled_without_key_requirement(self):
        config = WeatherSourceConfig(name="A", base_url="https://a.test")
        assert config.is_enabled

    def test_key_required_but_missing_disables(self):
        config = WeatherSourceConfig(
            name="A", base_url="https://a.test", requires_api_key=True
        )
        assert not config.is_enabled

    def test_explicitly_disabled(self):
        config = WeatherSourceConfig(
            name="A", base_url="https://a.test", enabled=False
        )
        assert not config.is_enabled


class TestWeatherSourcesSettings:
    def test_sources_in_registration_order(self, monkeypatch):
        monkeypatch.delenv("WEATHERAPI_KEY", raising=False)
        monkeypatch.delenv("OPENWEATHERMAP_KEY", raising=False)

        sources = WeatherSourcesSettings().sources()

        assert [s.name for s in sources] == [
            "OpenMeteo",
            "WeatherAPI",
            "OpenWeatherMap",
        ]
        assert [s.is_enabled for s in sources] == [True, False, False]

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("WEATHERAPI_KEY", "secret")
        monkeypatch.setenv("WEATHER_TIMEOUT_SECONDS", "3")
        monkeypatch.setenv("WEATHER_CACHE_DURATION_MINUTES", "5")

        settings = WeatherSourcesSettings()
        weatherapi = settings.weatherapi()

        assert weatherapi.api_key == "secret"
        assert weatherapi.is_enabled
        assert weatherapi.timeout_seconds == 3.0
        assert weatherapi.cache_duration_minutes == 5

    def test_openweathermap_history_url(self, monkeypatch):
        monkeypatch.setenv(
            "OPENWEATHERMAP_HISTORY_BASE_URL", "https://history.example.test"
        )
        config = WeatherSourcesSettings().openweathermap()
        assert config.history_base_url == "https://history.example.test"

    def test_resilience_defaults(self):
        settings = WeatherSourcesSettings()
        assert settings.retry_attempts == 3
        assert settings.breaker_minimum_throughput == 3
        assert settings.breaker_break_seconds == 30.0
        assert settings.stale_ttl_hours == 24


class TestAppSettings:
    def test_cors_origins_from_env(self, monkeypatch):
        monkeypatch.setenv("BACKEND_CORS_ORIGINS", "http://a.test, http://b.test")
        settings = AppSettings()
        assert settings.BACKEND_CORS_ORIGINS == ["http://a.test", "http://b.test"]

    @pytest.mark.parametrize(
        "value,expected", [("true", True), ("0", False), ("yes", True)]
    )
    def test_redis_enabled_flag(self, monkeypatch, value, expected):
        monkeypatch.setenv("REDIS_ENABLED", value)
        assert AppSettings().redis.enabled is expected

    def test_get_settings_is_cached(self):
        get_settings.cache_clear()
        assert get_settings() is get_settings()
