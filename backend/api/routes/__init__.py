from fastapi import APIRouter

from backend.api.routes.weather_routes import weather_router

# Main API router (mounted under API_V1_PREFIX)
api_router = APIRouter()

# Aggregated forecast + source listing
api_router.include_router(weather_router)
