"""
Health Check Routes
"""

from typing import Any

from fastapi import APIRouter, Depends

from backend.api.services.weather_factory import get_aggregation_service
from backend.core.aggregation.weather_aggregation import (
    WeatherAggregationService,
)

health_router = APIRouter(tags=["Health"])


@health_router.get("/health")
async def health(
    service: WeatherAggregationService = Depends(get_aggregation_service),
) -> dict[str, Any]:
    """
    Liveness plus per-source state.

    Status is "degraded" while any enabled source has an open circuit.
    """
    sources = [
        {
            "name": provider.source_name,
            "enabled": provider.enabled,
            "circuit_state": provider.circuit_state,
        }
        for provider in service.providers
    ]
    degraded = any(
        s["enabled"] and s["circuit_state"] == "open" for s in sources
    )
    return {"status": "degraded" if degraded else "healthy", "sources": sources}
