"""
Tests for OpenMeteoClient.

Tests with respx mocks for httpx:
- Request shape (daily means, single day)
- Parsing of daily arrays
- Upstream failures become unavailable sources
"""

from decimal import Decimal

import httpx
import pytest
import respx
from httpx import Response

from backend.api.services.openmeteo.openmeteo_client import OpenMeteoClient
from backend.api.services.weather_source import (
    MalformedResponseError,
    NoDataError,
)
from backend.tests.fakes import StubGeocoder

FORECAST_URL = "https://api.example.test/v1/forecast"


# ============================================================================
# FIXTURES
# ============================================================================


@pytest.fixture
def client(source_config):
    return OpenMeteoClient(source_config("OpenMeteo"), StubGeocoder())


def daily_payload(day, temperature=18.4, humidity=72.0):
    return {
        "daily": {
            "time": [day.isoformat()],
            "temperature_2m_mean": [temperature],
            "relative_humidity_2m_mean": [humidity],
        }
    }


# ============================================================================
# TESTS
# ============================================================================


@pytest.mark.asyncio
async def test_fetch_reading_success(client, london, today):
    with respx.mock:
        route = respx.get(FORECAST_URL).mock(
            return_value=Response(200, json=daily_payload(today))
        )

        reading = await client.fetch_reading(london, today)

    assert reading.temperature.celsius == Decimal("18.4")
    assert reading.humidity.percent == 72.0
    params = route.calls.last.request.url.params
    assert params["daily"] == "temperature_2m_mean,relative_humidity_2m_mean"
    assert params["start_date"] == today.isoformat()
    assert params["end_date"] == today.isoformat()
    assert params["timezone"] == "auto"
    assert params["latitude"] == "51.5085"


@pytest.mark.asyncio
async def test_fetch_returns_available_source(client, london, today):
    with respx.mock:
        respx.get(FORECAST_URL).mock(
            return_value=Response(200, json=daily_payload(today))
        )

        source = await client.fetch(london, today)

    assert source.available
    assert source.source_name == "OpenMeteo"


@pytest.mark.asyncio
async def test_null_values_mean_no_data(client, london, today):
    with respx.mock:
        respx.get(FORECAST_URL).mock(
            return_value=Response(
                200, json=daily_payload(today, temperature=None)
            )
        )

        with pytest.raises(NoDataError):
            await client.fetch_reading(london, today)


@pytest.mark.asyncio
async def test_missing_daily_block_is_malformed(client, london, today):
    with respx.mock:
        respx.get(FORECAST_URL).mock(
            return_value=Response(200, json={"error": False})
        )

        with pytest.raises(MalformedResponseError):
            await client.fetch_reading(london, today)


@pytest.mark.asyncio
async def test_out_of_range_value_is_malformed(client, london, today):
    with respx.mock:
        respx.get(FORECAST_URL).mock(
            return_value=Response(
                200, json=daily_payload(today, temperature=291.15)
            )
        )

        with pytest.raises(MalformedResponseError):
            await client.fetch_reading(london, today)


@pytest.mark.asyncio
async def test_invalid_json_is_malformed(client, london, today):
    with respx.mock:
        respx.get(FORECAST_URL).mock(
            return_value=Response(200, text="<html>oops</html>")
        )

        with pytest.raises(MalformedResponseError):
            await client.fetch_reading(london, today)


@pytest.mark.asyncio
async def test_http_error_becomes_unavailable(client, london, today):
    with respx.mock:
        respx.get(FORECAST_URL).mock(return_value=Response(500))

        source = await client.fetch(london, today)

    assert not source.available
    assert source.error == "HTTP 500 from api.example.test"


@pytest.mark.asyncio
async def test_connection_error_becomes_unavailable(client, london, today):
    with respx.mock:
        respx.get(FORECAST_URL).mock(
            side_effect=httpx.ConnectError("connection refused")
        )

        source = await client.fetch(london, today)

    assert not source.available
    assert source.error == "connection refused"
