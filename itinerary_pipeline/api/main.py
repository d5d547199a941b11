"""FastAPI application factory and lifespan management."""

import logging
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from itinerary_pipeline.api.dependencies import (
    get_settings,
    init_services,
    shutdown_services,
)
from itinerary_pipeline.api.middleware.error_handler import error_handler_middleware
from itinerary_pipeline.api.middleware.logging import LoggingMiddleware
from itinerary_pipeline.api.openapi.routes import health, jobs
from itinerary_pipeline.commons.settings.models import Settings
from itinerary_pipeline.commons.telemetry import (
    JsonFormatter,
    TextFormatter,
    configure_logging,
    init_langfuse,
    shutdown_langfuse,
)


def _get_formatter(log_format: str) -> logging.Formatter:
    """Get the appropriate formatter based on format type."""
    if log_format == "json":
        return JsonFormatter()
    return TextFormatter()


def _setup_logging() -> None:
    """Configure logging for the application package.

    Called at import time so our formatters are in place before uvicorn
    starts.
    """
    settings = get_settings()
    log_level = settings.telemetry.log_level or settings.app.log_level

    configure_logging(
        level=log_level,
        format_type=settings.telemetry.log_format,
        logger_name="itinerary_pipeline",
    )
    logging.getLogger().setLevel(getattr(logging, log_level.upper()))


def _configure_uvicorn_logging() -> None:
    """Make uvicorn loggers use our format.

    Called during lifespan, once uvicorn handlers exist.
    """
    settings = get_settings()
    level = getattr(logging, (settings.telemetry.log_level or settings.app.log_level).upper())
    formatter = _get_formatter(settings.telemetry.log_format)

    for logger_name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logger = logging.getLogger(logger_name)
        logger.setLevel(level)
        for handler in logger.handlers:
            handler.setFormatter(formatter)
            handler.setLevel(level)
        if not logger.handlers:
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(formatter)
            handler.setLevel(level)
            logger.addHandler(handler)
            logger.propagate = False


_setup_logging()


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Initialize providers and tracing on startup, release them on shutdown."""
    _configure_uvicorn_logging()

    settings = get_settings()
    init_langfuse(settings.telemetry.langfuse)
    await init_services(settings)

    yield

    await shutdown_services()
    shutdown_langfuse()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.app.name,
        version=settings.app.version,
        description="Extracts travel itineraries from videos in resumable chunks",
        docs_url="/docs" if settings.server.docs_enabled else None,
        redoc_url="/redoc" if settings.server.docs_enabled else None,
        openapi_url="/openapi.json" if settings.server.docs_enabled else None,
        lifespan=lifespan,
    )

    _configure_middleware(app)
    _register_routes(app, settings)

    return app


def _configure_middleware(app: FastAPI) -> None:
    """Configure application middleware."""
    app.add_middleware(LoggingMiddleware)
    app.middleware("http")(error_handler_middleware)


def _register_routes(app: FastAPI, settings: Settings) -> None:
    """Register API routes."""
    app.include_router(health.router, tags=["Health"])
    app.include_router(jobs.router, prefix=settings.server.api_prefix, tags=["Jobs"])


app = create_app()


def run() -> None:
    """Serve the application with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "itinerary_pipeline.api.main:app",
        host=settings.server.host,
        port=settings.server.port,
        log_config=None,
    )
