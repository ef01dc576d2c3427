"""
Client for the Open-Meteo Forecast API.

Free, no API key. https://open-meteo.com/en/docs

Daily variables used:
- temperature_2m_mean: Mean air temperature at 2 m (°C)
- relative_humidity_2m_mean: Mean relative humidity at 2 m (%)

The forecast endpoint also serves recent past days, so the same request
covers both sides of "today".
"""

from datetime import date
from typing import Any

import httpx
from loguru import logger

from backend.api.services.geocoding.geocoding_client import GeocodingClient
from backend.api.services.weather_source import (
    HttpWeatherSource,
    MalformedResponseError,
    NoDataError,
)
from backend.core.domain.forecast import WeatherReading
from backend.core.domain.value_objects import Location
from config.settings.app_config import WeatherSourceConfig

DAILY_VARIABLES = "temperature_2m_mean,relative_humidity_2m_mean"


class OpenMeteoClient(HttpWeatherSource):
    """Open-Meteo daily mean temperature/humidity."""

    def __init__(
        self,
        config: WeatherSourceConfig,
        geocoder: GeocodingClient,
        client: httpx.AsyncClient | None = None,
    ):
        super().__init__(config, client)
        self.geocoder = geocoder

    async def fetch_reading(
        self, location: Location, day: date
    ) -> WeatherReading:
        latitude, longitude = await self.geocoder.resolve_coordinates(location)
        params = {
            "latitude": latitude,
            "longitude": longitude,
            "daily": DAILY_VARIABLES,
            "timezone": "auto",
            "start_date": day.isoformat(),
            "end_date": day.isoformat(),
        }
        logger.debug(f"Open-Meteo request for {location} on {day}")
        data = await self._get_json(
            f"{self.config.base_url}/v1/forecast", params=params
        )
        temperature, humidity = self._parse_daily(data, day)
        return self._build_reading(temperature, humidity)

    @staticmethod
    def _parse_daily(data: Any, day: date) -> tuple[Any, Any]:
        try:
            daily = data["daily"]
            temperatures = daily["temperature_2m_mean"]
            humidities = daily["relative_humidity_2m_mean"]
        except (KeyError, TypeError) as e:
            raise MalformedResponseError(
                f"Open-Meteo response missing daily field: {e}"
            ) from e

        if not temperatures or not humidities:
            raise NoDataError(f"No daily data available for {day}")
        return temperatures[0], humidities[0]
