from config.settings.app_config import (
    AppSettings,
    RedisSettings,
    WeatherSourceConfig,
    WeatherSourcesSettings,
    get_settings,
)

__all__ = [
    "AppSettings",
    "RedisSettings",
    "WeatherSourceConfig",
    "WeatherSourcesSettings",
    "get_settings",
]
