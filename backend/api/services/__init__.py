"""
Weather Source Services

Upstream weather sources and the services around them.

ARCHITECTURE OVERVIEW:
======================

Core Services:
├── WeatherProviderFactory     - Explicit composition: raw -> resilience -> cache
├── WeatherValidationService   - Validation of forecast requests
└── WeatherSourceProvider      - Provider contract (fetch -> ForecastSource)

API Clients (3 sources + geocoding):
├── Open-Meteo                 - Daily means, free, no key
├── WeatherAPI.com             - History/forecast, API key
├── OpenWeatherMap             - Hourly history / 3-hourly forecast, API key
└── Open-Meteo Geocoding       - City -> coordinates

ERROR HANDLING:
==============
- Ordinary upstream failure never raises: it becomes an unavailable source
- Retry with exponential backoff and jitter, per-attempt timeout
- Per-source circuit breaker
- Stale cache fallback when a fetch fails
"""

from typing import Any

__all__ = [
    # Core Services
    "WeatherProviderFactory",
    "WeatherValidationService",
    "WeatherSourceProvider",
    "WeatherReadingProvider",
    # Clients
    "GeocodingClient",
    "OpenMeteoClient",
    "WeatherApiClient",
    "OpenWeatherMapClient",
]


def __getattr__(name: str) -> Any:
    """
    Lazy loading to avoid circular imports.
    """
    import importlib

    # (submodule_path, class_name)
    lazy_imports: dict[str, tuple[str, str]] = {
        "WeatherProviderFactory": (
            ".weather_factory",
            "WeatherProviderFactory",
        ),
        "WeatherValidationService": (
            ".weather_validation",
            "WeatherValidationService",
        ),
        "WeatherSourceProvider": (".weather_source", "WeatherSourceProvider"),
        "WeatherReadingProvider": (
            ".weather_source",
            "WeatherReadingProvider",
        ),
        "GeocodingClient": (".geocoding.geocoding_client", "GeocodingClient"),
        "OpenMeteoClient": (".openmeteo.openmeteo_client", "OpenMeteoClient"),
        "WeatherApiClient": (
            ".weatherapi.weatherapi_client",
            "WeatherApiClient",
        ),
        "OpenWeatherMapClient": (
            ".openweathermap.openweathermap_client",
            "OpenWeatherMapClient",
        ),
    }

    if name in lazy_imports:
        module_path, class_name = lazy_imports[name]
        try:
            module = importlib.import_module(module_path, package=__name__)
            return getattr(module, class_name)
        except (ImportError, AttributeError) as e:
            raise ImportError(
                f"Failed to import '{name}' from '{module_path}': {e}"
            ) from e

    raise AttributeError(f"Module '{__name__}' has no attribute '{name}'")


__version__ = "1.0.0"
