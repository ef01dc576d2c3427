"""
Weather Forecast Routes
"""

from typing import Any

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse
from loguru import logger

from backend.api.services.weather_factory import get_aggregation_service
from backend.api.services.weather_validation import WeatherValidationService
from backend.core.aggregation.weather_aggregation import (
    WeatherAggregationService,
)
from backend.core.domain.forecast import (
    AggregationOutcome,
    WeatherForecastResponse,
)

weather_router = APIRouter(prefix="/weather", tags=["Weather"])

PROBLEM_CONTENT_TYPE = "application/problem+json"


def problem_response(
    request: Request,
    status: int,
    title: str,
    detail: str | None = None,
    **extensions: Any,
) -> JSONResponse:
    """RFC 7807 problem details body."""
    body: dict[str, Any] = {
        "title": title,
        "status": status,
        "instance": request.url.path,
    }
    if detail:
        body["detail"] = detail
    body.update(extensions)
    return JSONResponse(
        status_code=status, content=body, media_type=PROBLEM_CONTENT_TYPE
    )


@weather_router.get(
    "/forecast",
    response_model=WeatherForecastResponse,
    responses={
        400: {"description": "Invalid request or no matching sources"},
        503: {"description": "All weather sources are unavailable"},
    },
)
async def get_forecast(
    request: Request,
    date: str | None = Query(None, description="Forecast date (YYYY-MM-DD)"),
    city: str | None = Query(None, description="City name"),
    country: str | None = Query(
        None, description="ISO 3166-1 alpha-2 country code"
    ),
    sources: str | None = Query(
        None, description="Comma-separated source names (default: all)"
    ),
    service: WeatherAggregationService = Depends(get_aggregation_service),
):
    """
    Aggregated forecast from multiple weather sources.

    Only dates from 60 days ago up to 7 days ahead (UTC) are supported.
    """
    valid, details = WeatherValidationService.validate_all(
        date, city, country, sources
    )
    if not valid:
        return problem_response(
            request,
            400,
            "One or more validation errors occurred.",
            errors=details["errors"],
        )

    response = await service.aggregate(details["request"])
    outcome = response.outcome

    if outcome is AggregationOutcome.NO_MATCHING_PROVIDERS:
        logger.error(
            f"No weather sources found for {city}, {country}. "
            f"Sources: {sources or 'All'}"
        )
        return problem_response(
            request,
            400,
            "Invalid sources",
            "No matching weather source providers found for the "
            "requested sources.",
        )

    if outcome is AggregationOutcome.ALL_SOURCES_UNAVAILABLE:
        logger.error(f"All weather sources unavailable for {city}, {country}")
        return problem_response(
            request,
            503,
            "Service Unavailable",
            "All weather sources are currently unavailable. "
            "Please try again later.",
            sources=[
                s.model_dump(mode="json", include={"source_name", "error"})
                for s in response.sources
            ],
        )

    return response


@weather_router.get("/sources")
async def list_sources(
    service: WeatherAggregationService = Depends(get_aggregation_service),
) -> dict[str, Any]:
    """Names of the enabled weather sources."""
    return {"sources": service.source_names}
