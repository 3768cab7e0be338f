from __future__ import annotations

import logging
from pathlib import Path

import uvicorn
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from profileready.application.dtos.common_dto import HealthResponse, RootResponse
from profileready.config import get_settings
from profileready.infrastructure.api.error_handlers import add_error_handlers
from profileready.infrastructure.api.middlewares import add_default_middlewares
from profileready.infrastructure.api.routes.image_routes import router as image_router
from profileready.infrastructure.api.routes.storage_routes import router as storage_router

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(level=level or get_settings().LOG_LEVEL, format=LOG_FORMAT)


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(
        title="ProfileReady Backend",
        version="0.1.0",
        description="""
        ## ProfileReady Backend API

        Upload a portrait, then render it at a standard profile-photo size with
        crop, brightness, contrast, background colour and an optional clothing
        overlay. Rasters are produced with NumPy and Pillow, or with ImageMagick
        when `EXECUTOR_BACKEND=magick`.

        ### Features
        - **Upload**: store the original photo and build a bounded preview
        - **Render**: size presets or custom `WIDTHxHEIGHT`, crop, tone, overlay
        - **Download**: PNG, JPEG or PDF conversion of the latest raster
        - **Remote storage**: optional Supabase bucket with signed URLs

        ### Error Responses
        Errors are returned as `{"error": <kind>, "detail": <message>}`:
        - **400 Bad Request**: missing file, invalid size, parameter or format
        - **401 Unauthorized**: missing or invalid bearer token
        - **403 Forbidden**: signing a path outside the caller's folder
        - **404 Not Found**: unknown asset or overlay
        - **413 Payload Too Large**: upload exceeds the size limit
        - **500 Internal Server Error**: raster processing failed
        - **502 / 503**: remote storage failed or is not configured
        """,
    )
    add_default_middlewares(app)
    add_error_handlers(app)

    @app.get(
        "/",
        response_model=RootResponse,
        summary="API Root",
        description="Get basic information about the ProfileReady API",
        response_description="API information including status and version",
    )
    def root():
        """Get API root information."""
        return RootResponse(status="ok", service="profileready-backend", version=app.version)

    @app.get(
        "/health",
        response_model=HealthResponse,
        summary="Health Check",
        description="Check if the API service is running and healthy",
        response_description="Health status of the API service",
    )
    def health():
        """Check API health status."""
        return HealthResponse(status="healthy")

    app.include_router(image_router)
    app.include_router(storage_router)

    settings.STATIC_DIR.mkdir(parents=True, exist_ok=True)
    app.mount("/static", StaticFiles(directory=settings.STATIC_DIR), name="static")
    if settings.OVERLAY_DIR.is_dir():
        app.mount("/overlays", StaticFiles(directory=settings.OVERLAY_DIR), name="overlays")
    else:
        logger.warning("Overlay directory %s not found; overlays are not served", settings.OVERLAY_DIR)
    if settings.FRONTEND_DIR and Path(settings.FRONTEND_DIR).is_dir():
        # mounted last so it never shadows the API routes
        app.mount("/app", StaticFiles(directory=settings.FRONTEND_DIR, html=True), name="frontend")
    return app


def run() -> None:
    configure_logging()
    settings = get_settings()
    uvicorn.run(
        "profileready.main:create_app",
        factory=True,
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    run()
