"""
Client for WeatherAPI.com.

Requires an API key (WEATHERAPI_KEY). https://www.weatherapi.com/docs/

Endpoints:
- /v1/history.json: dates up to and including today (UTC)
- /v1/forecast.json: future dates
Both return ``forecast.forecastday[0].day`` with ``avgtemp_c`` and
``avghumidity``.
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
    utc_today,
)
from backend.core.domain.forecast import WeatherReading
from backend.core.domain.value_objects import Location
from config.settings.app_config import WeatherSourceConfig


class WeatherApiClient(HttpWeatherSource):
    def __init__(
        self,
        config: WeatherSourceConfig,
        geocoder: GeocodingClient,
        client: httpx.AsyncClient | None = None,
    ):
        super().__init__(config, client)
        self.geocoder = geocoder

    @staticmethod
    def endpoint_for(day: date) -> str:
        return "history" if day <= utc_today() else "forecast"

    async def fetch_reading(
        self, location: Location, day: date
    ) -> WeatherReading:
        latitude, longitude = await self.geocoder.resolve_coordinates(location)
        endpoint = self.endpoint_for(day)
        params = {
            "key": self.config.api_key,
            "q": f"{latitude},{longitude}",
            "dt": day.isoformat(),
        }
        logger.debug(f"WeatherAPI {endpoint} request for {location} on {day}")
        data = await self._get_json(
            f"{self.config.base_url}/v1/{endpoint}.json", params=params
        )
        return self._build_reading(*self._parse_day(data, day))

    @staticmethod
    def _parse_day(data: Any, day: date) -> tuple[Any, Any]:
        try:
            forecast_days = data["forecast"]["forecastday"]
        except (KeyError, TypeError) as e:
            raise MalformedResponseError(
                f"WeatherAPI response missing forecast: {e}"
            ) from e

        if not forecast_days:
            raise NoDataError(f"No forecast day available for {day}")

        try:
            summary = forecast_days[0]["day"]
            return summary["avgtemp_c"], summary["avghumidity"]
        except (KeyError, TypeError) as e:
            raise MalformedResponseError(
                f"WeatherAPI day summary incomplete: {e}"
            ) from e
