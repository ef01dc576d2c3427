"""
Client for OpenWeatherMap.

Requires an API key (OPENWEATHERMAP_KEY). https://openweathermap.org/api

One public source, two upstream endpoints chosen by the requested date
against today (UTC):
- date <= today: hourly history (history.openweathermap.org,
  /data/2.5/history/city), averaged over the UTC day
- date > today: 5 day / 3 hour forecast (/data/2.5/forecast), averaged
  over the entries whose UTC date equals the requested date
"""

from collections.abc import Iterable
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal, InvalidOperation
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


def _utc_day_bounds(day: date) -> tuple[int, int]:
    """Unix seconds of the first and last second of ``day`` in UTC."""
    start = datetime.combine(day, time.min, tzinfo=timezone.utc)
    end = start + timedelta(days=1) - timedelta(seconds=1)
    return int(start.timestamp()), int(end.timestamp())


def _average_main(
    items: Iterable[dict[str, Any]],
) -> tuple[Decimal, Decimal]:
    temperatures: list[Decimal] = []
    humidities: list[Decimal] = []
    try:
        for item in items:
            temperatures.append(Decimal(str(item["main"]["temp"])))
            humidities.append(Decimal(str(item["main"]["humidity"])))
    except (KeyError, TypeError, InvalidOperation) as e:
        raise MalformedResponseError(
            f"OpenWeatherMap entry missing main.temp/humidity: {e}"
        ) from e
    return (
        sum(temperatures) / len(temperatures),
        sum(humidities) / len(humidities),
    )


class OpenWeatherMapClient(HttpWeatherSource):
    def __init__(
        self,
        config: WeatherSourceConfig,
        geocoder: GeocodingClient,
        client: httpx.AsyncClient | None = None,
    ):
        super().__init__(config, client)
        self.geocoder = geocoder

    @property
    def history_base_url(self) -> str:
        return self.config.history_base_url or self.config.base_url

    async def fetch_reading(
        self, location: Location, day: date
    ) -> WeatherReading:
        latitude, longitude = await self.geocoder.resolve_coordinates(location)
        if day <= utc_today():
            temperature, humidity = await self._historical(
                latitude, longitude, day
            )
        else:
            temperature, humidity = await self._forecast(
                latitude, longitude, day
            )
        return self._build_reading(temperature, humidity)

    async def _historical(
        self, latitude: float, longitude: float, day: date
    ) -> tuple[Decimal, Decimal]:
        start, end = _utc_day_bounds(day)
        params = {
            "lat": latitude,
            "lon": longitude,
            "type": "hour",
            "start": start,
            "end": end,
            "units": "metric",
            "appid": self.config.api_key,
        }
        logger.debug(f"OpenWeatherMap history request for {day}")
        data = await self._get_json(
            f"{self.history_base_url}/data/2.5/history/city", params=params
        )
        items = self._items(data)
        if not items:
            raise NoDataError(
                f"No hourly historical data available for {day.isoformat()}"
            )
        return _average_main(items)

    async def _forecast(
        self, latitude: float, longitude: float, day: date
    ) -> tuple[Decimal, Decimal]:
        params = {
            "lat": latitude,
            "lon": longitude,
            "units": "metric",
            "appid": self.config.api_key,
        }
        logger.debug(f"OpenWeatherMap forecast request for {day}")
        data = await self._get_json(
            f"{self.config.base_url}/data/2.5/forecast", params=params
        )
        try:
            items = [
                item
                for item in self._items(data)
                if datetime.fromtimestamp(item["dt"], tz=timezone.utc).date()
                == day
            ]
        except (KeyError, TypeError, ValueError, OverflowError) as e:
            raise MalformedResponseError(
                f"OpenWeatherMap forecast entry has invalid timestamp: {e}"
            ) from e

        if not items:
            raise NoDataError(
                f"No forecast data available for {day.isoformat()}"
            )
        return _average_main(items)

    @staticmethod
    def _items(data: Any) -> list[dict[str, Any]]:
        try:
            items = data.get("list")
        except AttributeError as e:
            raise MalformedResponseError(
                "OpenWeatherMap response is not an object"
            ) from e
        if items is None:
            return []
        if not isinstance(items, list):
            raise MalformedResponseError("OpenWeatherMap 'list' is not a list")
        return items
