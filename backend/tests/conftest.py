"""
Shared fixtures and configuration for backend tests.

This module contains pytest fixtures that can be used across all test modules
in the backend test suite.
"""

import os
from datetime import timedelta
from unittest.mock import AsyncMock

import pytest

# Keep test runs off disk and off Redis
os.environ["LOG_DIR"] = ""
os.environ.setdefault("REDIS_ENABLED", "false")

from backend.api.services.weather_source import utc_today  # noqa: E402
from backend.core.domain.value_objects import Location  # noqa: E402
from backend.infrastructure.cache.cache_store import (  # noqa: E402
    InMemoryCacheStore,
)
from backend.tests.fakes import FakeClock  # noqa: E402
from config.settings.app_config import (  # noqa: E402
    WeatherSourceConfig,
    WeatherSourcesSettings,
)


@pytest.fixture
def london():
    """London, GB."""
    return Location(city="London", country="GB")


@pytest.fixture
def today():
    """Today's date in UTC."""
    return utc_today()


@pytest.fixture
def tomorrow(today):
    return today + timedelta(days=1)


@pytest.fixture
def clock():
    """Manually advanced clock for TTL and breaker tests."""
    return FakeClock()


@pytest.fixture
def memory_store(clock):
    """In-process cache store driven by the fake clock."""
    return InMemoryCacheStore(time_func=clock)


@pytest.fixture
def mock_redis_client():
    """Fixture providing a mock async Redis client."""
    mock_client = AsyncMock()
    mock_client.ping.return_value = True
    mock_client.get.return_value = None
    mock_client.set.return_value = True
    return mock_client


@pytest.fixture
def fast_sources_settings():
    """Source settings with zero backoff so retries never sleep."""
    return WeatherSourcesSettings(
        timeout_seconds=1.0,
        cache_duration_minutes=15,
        retry_base_delay=0.0,
    )


@pytest.fixture
def source_config():
    """Generic source configuration for vendor client tests."""

    def _make(name: str, **overrides) -> WeatherSourceConfig:
        values = {
            "name": name,
            "base_url": "https://api.example.test",
            "timeout_seconds": 1.0,
        }
        values.update(overrides)
        return WeatherSourceConfig(**values)

    return _make


# Test configuration
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "api: API related tests")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location and naming."""
    for item in items:
        if "/unit/" in item.nodeid:
            item.add_marker(pytest.mark.unit)

        if "integration" in item.nodeid.lower():
            item.add_marker(pytest.mark.integration)

        if "routes" in item.nodeid.lower():
            item.add_marker(pytest.mark.api)
