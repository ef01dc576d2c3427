import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_fastapi_instrumentator import Instrumentator

from backend.api.routes import api_router
from backend.api.routes.health_routes import health_router
from backend.api.services.weather_factory import WeatherProviderFactory
from config.logging_config import get_logger, setup_logging
from config.settings.app_config import get_settings

# Load settings
settings = get_settings()

# Configure logging
setup_logging(
    log_level=settings.LOG_LEVEL,
    log_dir=settings.LOG_DIR,
    json_logs=settings.LOG_JSON,
)
logger = get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"{settings.PROJECT_NAME} starting")
    yield
    await WeatherProviderFactory.close_all()
    logger.info(f"{settings.PROJECT_NAME} stopped")


async def unhandled_exception_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    trace_id = uuid.uuid4().hex
    logger.opt(exception=exc).error(
        f"Unhandled exception. Path: {request.url.path}, "
        f"Method: {request.method}, TraceId: {trace_id}"
    )
    return JSONResponse(
        status_code=500,
        media_type="application/problem+json",
        content={
            "title": "An error occurred while processing your request.",
            "status": 500,
            "detail": "An internal server error has occurred.",
            "instance": request.url.path,
            "trace_id": trace_id,
        },
    )


def create_application() -> FastAPI:
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        openapi_url=f"{settings.API_V1_PREFIX}/openapi.json",
        docs_url=f"{settings.API_V1_PREFIX}/docs",
        redoc_url=f"{settings.API_V1_PREFIX}/redoc",
        lifespan=lifespan,
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(Exception, unhandled_exception_handler)

    # Routes
    app.include_router(api_router, prefix=settings.API_V1_PREFIX)
    app.include_router(health_router)

    # Prometheus metrics
    Instrumentator().instrument(app).expose(app, endpoint="/metrics")

    @app.get("/")
    async def root():
        return {
            "message": settings.PROJECT_NAME,
            "docs": f"{settings.API_V1_PREFIX}/docs",
        }

    return app


app = create_application()

if __name__ == "__main__":
    import uvicorn

    uvicorn.run("backend.main:app", host="0.0.0.0", port=8000, reload=True)
