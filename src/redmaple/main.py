"""Dashboard API: app factory, lifespan and cross-cutting HTTP concerns."""

from __future__ import annotations

import time
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Annotated, Any

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from redmaple.config import get_settings
from redmaple.dependencies import Services, get_services, reset_services
from redmaple.errors import DecodeFailure, FetchFailure, NotFound
from redmaple.logging import (
    bind_request_context,
    clear_request_context,
    get_logger,
    setup_logging,
)
from redmaple.routers.sources import router as sources_router
from redmaple.routers.subway import router as subway_router
from redmaple.routers.weather import router as weather_router

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Build the source clients, run the export hub for the app's lifetime."""
    setup_logging()

    # Stop directory load failures abort startup here
    services = get_services()
    logger.info(
        "Red Maple dashboard starting",
        stops=len(services.subway.directory),
        export_auto_start=services.settings.export_auto_start,
    )
    if services.settings.export_auto_start:
        await services.hub.start()

    try:
        yield
    finally:
        await services.hub.stop()
        reset_services()
        logger.info("Red Maple dashboard stopped")


async def health_check(services: Annotated[Services, Depends(get_services)]) -> dict[str, Any]:
    """Report the stop directory size and export hub state.

    The app is degraded when the hub should be running but is not.
    """
    settings = services.settings
    hub = await services.hub.get_status()

    issues: list[str] = []
    if settings.export_auto_start and not hub["running"]:
        issues.append("Export hub is not running")

    return {
        "service": settings.app_name,
        "status": "degraded" if issues else "healthy",
        "version": settings.app_version,
        "environment": settings.environment,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "checks": {
            "stops": len(services.subway.directory),
            "exportHub": {
                "running": hub["running"],
                "cycleCount": hub["cycle_count"],
                "lastCycleAt": hub["last_cycle_at"],
                "providers": hub["providers"],
            },
        },
        "issues": issues,
    }


def _error_body(error: str, exc: Exception) -> dict[str, str]:
    return {"error": error, "message": str(exc)}


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()
    public_docs = settings.environment != "production"

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Transit, weather, bike share and home sensor data for a wall dashboard",
        lifespan=lifespan,
        docs_url="/docs" if public_docs else None,
        redoc_url="/redoc" if public_docs else None,
    )

    # The dashboard page is served from another origin on the LAN
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.environment == "development" else [],
        allow_methods=["GET"],
        allow_headers=[REQUEST_ID_HEADER],
    )

    @app.middleware("http")
    async def request_context_middleware(request: Request, call_next: Any) -> Any:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        bind_request_context(request_id=request_id, path=request.url.path)
        started = time.perf_counter()
        try:
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = request_id
            logger.debug(
                "Request served",
                status=response.status_code,
                duration_ms=round((time.perf_counter() - started) * 1000, 1),
            )
            return response
        finally:
            clear_request_context()

    app.add_api_route("/health", health_check, methods=["GET"], tags=["meta"])
    app.include_router(subway_router)
    app.include_router(weather_router)
    app.include_router(sources_router)

    @app.exception_handler(FetchFailure)
    @app.exception_handler(DecodeFailure)
    async def source_unavailable_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error("Data source unavailable", path=request.url.path, error=str(exc))
        return JSONResponse(status_code=503, content=_error_body("source_unavailable", exc))

    @app.exception_handler(NotFound)
    async def not_found_handler(request: Request, exc: NotFound) -> JSONResponse:
        logger.warning("Lookup failed", path=request.url.path, error=str(exc))
        return JSONResponse(status_code=404, content=_error_body("not_found", exc))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error("Unhandled exception", exc_info=exc, path=request.url.path)
        return JSONResponse(
            status_code=500,
            content={"error": "internal_server_error", "message": "Dashboard data could not be built"},
        )

    return app


app = create_app()
