"""FastAPI application factory and main entry point."""
import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from devit.api.routes import admin, auth, issues, repositories, users
from devit.core.cache import check_cache_connection, close_cache
from devit.core.config import APP_VERSION, settings
from devit.core.database import check_database_connection, close_database
from devit.core.errors import register_exception_handlers
from devit.core.logging import configure_logging, get_logger
from devit.core.middleware import RequestIDMiddleware
from devit.core.tracing import configure_tracing, instrument_fastapi_app

# Configure logging on module import
configure_logging()
logger = get_logger(__name__)


def _now_iso() -> str:
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


async def check_backend_connection() -> bool | None:
    """Probe the companion backend's /health; None when none is configured.

    This is the only outbound call the service makes and it is bounded by
    BACKEND_HEALTH_TIMEOUT_SECONDS.
    """
    if not settings.backend_api_url:
        return None
    url = settings.backend_api_url.rstrip("/") + "/health"
    try:
        async with httpx.AsyncClient(timeout=settings.backend_health_timeout_seconds) as client:
            response = await client.get(url)
        return response.is_success
    except httpx.HTTPError as e:
        logger.warning("Backend health probe failed", url=url, error=str(e))
        return False


async def _timed(check: Any) -> tuple[Any, float, str]:
    start = time.time()
    result = await check()
    return result, round((time.time() - start) * 1000, 2), _now_iso()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan context manager for startup/shutdown events."""
    # Startup
    logger.info("Starting DevIT API", version=APP_VERSION, environment=settings.environment)

    yield

    # Shutdown
    logger.info("Shutting down DevIT API")
    await close_database()
    await close_cache()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    configure_tracing()

    app = FastAPI(
        title="DevIT API",
        description="Code hosting: users, repositories, stars, issues and follows",
        version=APP_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    @app.get("/health", tags=["health"], status_code=200)
    async def health_check() -> dict[str, Any]:
        """Status of every dependency with response times.

        - status: "healthy" (all checks OK) or "degraded" (any check down)
        - service, version, timestamp
        - checks: database, cache, and backend when BACKEND_API_URL is set
        """
        start_time = time.time()

        db_healthy, db_time, db_timestamp = await _timed(check_database_connection)
        cache_healthy, cache_time, cache_timestamp = await _timed(check_cache_connection)
        backend_healthy, backend_time, backend_timestamp = await _timed(check_backend_connection)

        checks: dict[str, Any] = {
            "database": {
                "status": "healthy" if db_healthy else "unhealthy",
                "response_time_ms": db_time,
                "timestamp": db_timestamp,
            },
            "cache": {
                "status": "healthy" if cache_healthy else "unhealthy",
                "response_time_ms": cache_time,
                "timestamp": cache_timestamp,
            },
        }
        if backend_healthy is not None:
            checks["backend"] = {
                "status": "healthy" if backend_healthy else "unhealthy",
                "response_time_ms": backend_time,
                "timestamp": backend_timestamp,
            }

        overall_healthy = all(check["status"] == "healthy" for check in checks.values())
        overall_status = "healthy" if overall_healthy else "degraded"

        logger.info(
            "Health check completed",
            status=overall_status,
            **{name: check["status"] for name, check in checks.items()},
            duration_ms=round((time.time() - start_time) * 1000, 2),
        )

        return {
            "status": overall_status,
            "service": settings.otel_service_name,
            "version": APP_VERSION,
            "timestamp": _now_iso(),
            "checks": checks,
        }

    for module in (auth, admin, repositories, issues, users):
        app.include_router(module.router, prefix="/api")

    instrument_fastapi_app(app)

    logger.info("FastAPI application created", cors_origins=settings.cors_origins_list)

    return app


# Create application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "devit.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=not settings.is_production,
        log_config=None,  # Use our structlog config
    )
