"""
Tests for WeatherApiClient (history/forecast routing by UTC date).
"""

from datetime import timedelta
from decimal import Decimal

import pytest
import respx
from httpx import Response

from backend.api.services.weather_source import (
    MalformedResponseError,
    NoDataError,
)
from backend.api.services.weatherapi.weatherapi_client import WeatherApiClient
from backend.tests.fakes import StubGeocoder

HISTORY_URL = "https://api.example.test/v1/history.json"
FORECAST_URL = "https://api.example.test/v1/forecast.json"


@pytest.fixture
def client(source_config):
    config = source_config(
        "WeatherAPI", api_key="test-key", requires_api_key=True
    )
    return WeatherApiClient(config, StubGeocoder())


def day_payload(avgtemp_c=15.2, avghumidity=81):
    return {
        "forecast": {
            "forecastday": [
                {"day": {"avgtemp_c": avgtemp_c, "avghumidity": avghumidity}}
            ]
        }
    }


class TestEndpointRouting:
    def test_today_uses_history(self, today):
        assert WeatherApiClient.endpoint_for(today) == "history"

    def test_past_uses_history(self, today):
        assert WeatherApiClient.endpoint_for(today - timedelta(days=3)) == (
            "history"
        )

    def test_future_uses_forecast(self, tomorrow):
        assert WeatherApiClient.endpoint_for(tomorrow) == "forecast"


class TestFetchReading:
    @pytest.mark.asyncio
    async def test_history_request(self, client, london, today):
        with respx.mock:
            route = respx.get(HISTORY_URL).mock(
                return_value=Response(200, json=day_payload())
            )

            reading = await client.fetch_reading(london, today)

        assert reading.temperature.celsius == Decimal("15.2")
        assert reading.humidity.percent == 81
        params = route.calls.last.request.url.params
        assert params["key"] == "test-key"
        assert params["q"] == "51.5085,-0.1257"
        assert params["dt"] == today.isoformat()

    @pytest.mark.asyncio
    async def test_forecast_request(self, client, london, tomorrow):
        with respx.mock:
            route = respx.get(FORECAST_URL).mock(
                return_value=Response(200, json=day_payload(avgtemp_c=9.0))
            )

            reading = await client.fetch_reading(london, tomorrow)

        assert route.called
        assert reading.temperature.celsius == 9.0

    @pytest.mark.asyncio
    async def test_empty_forecastday_is_no_data(self, client, london, today):
        with respx.mock:
            respx.get(HISTORY_URL).mock(
                return_value=Response(
                    200, json={"forecast": {"forecastday": []}}
                )
            )

            with pytest.raises(NoDataError):
                await client.fetch_reading(london, today)

    @pytest.mark.asyncio
    async def test_missing_day_fields_is_malformed(self, client, london, today):
        with respx.mock:
            respx.get(HISTORY_URL).mock(
                return_value=Response(
                    200, json={"forecast": {"forecastday": [{"astro": {}}]}}
                )
            )

            with pytest.raises(MalformedResponseError):
                await client.fetch_reading(london, today)

    @pytest.mark.asyncio
    async def test_unauthorised_becomes_unavailable(
        self, client, london, today
    ):
        with respx.mock:
            respx.get(HISTORY_URL).mock(return_value=Response(401))

            source = await client.fetch(london, today)

        assert not source.available
        assert "401" in source.error


def test_client_disabled_without_key(source_config):
    config = source_config("WeatherAPI", requires_api_key=True)
    assert WeatherApiClient(config, StubGeocoder()).enabled is False
