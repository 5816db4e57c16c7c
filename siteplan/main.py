"""FastAPI application entry point."""

from __future__ import annotations

import json
import logging
import sys
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError

from siteplan import __version__
from siteplan.api.content_pages import router as content_pages_router
from siteplan.api.export import router as export_router
from siteplan.api.health import router as health_router
from siteplan.api.sitemap import router as sitemap_router
from siteplan.api.sites import router as sites_router
from siteplan.config import Settings
from siteplan.database import create_engine, ensure_database_dir, init_schema
from siteplan.exceptions import DuplicateUrlError, InternalServerError

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

logger = logging.getLogger(__name__)

DEV_CORS_ORIGINS = ["http://localhost:3000", "http://localhost:5173", "http://localhost:8000"]


def _configure_logging(debug: bool) -> None:
    """Configure application logging."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
        stream=sys.stdout,
        force=True,
    )
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO if debug else logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Open the database on startup and dispose of it on shutdown."""
    settings: Settings = app.state.settings
    _configure_logging(settings.debug)
    logger.info("Starting SitePlan %s (debug=%s)", __version__, settings.debug)

    ensure_database_dir(settings.database_url)
    engine, session_factory = create_engine(settings)
    try:
        await init_schema(engine)
    except Exception as exc:
        logger.critical(
            "Failed to initialize database %s: %s. Check database path and permissions.",
            engine.url.render_as_string(hide_password=True),
            exc,
        )
        await engine.dispose()
        raise
    app.state.engine = engine
    app.state.session_factory = session_factory

    yield

    try:
        await engine.dispose()
    except Exception as exc:
        logger.error("Error during engine disposal: %s", exc, exc_info=True)
    logger.info("SitePlan stopped")


def _error_response(
    request: Request, exc: Exception, status_code: int, detail: object, *, level: int
) -> JSONResponse:
    logger.log(
        level,
        "%s in %s %s: %s",
        type(exc).__name__,
        request.method,
        request.url.path,
        exc,
        exc_info=exc if level >= logging.ERROR else None,
    )
    return JSONResponse(status_code=status_code, content={"detail": detail})


def _register_exception_handlers(app: FastAPI) -> None:
    """Map domain and infrastructure errors to JSON responses."""

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = []
        for err in exc.errors():
            loc = err.get("loc", ())
            errors.append(
                {
                    "field": str(loc[-1]) if loc else "unknown",
                    "message": err.get("msg", "Invalid value"),
                }
            )
        return _error_response(request, exc, 422, errors, level=logging.WARNING)

    @app.exception_handler(DuplicateUrlError)
    async def duplicate_url_handler(request: Request, exc: DuplicateUrlError) -> JSONResponse:
        return _error_response(request, exc, 409, str(exc), level=logging.INFO)

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
        return _error_response(
            request, exc, 422, str(exc) or "Invalid value", level=logging.WARNING
        )

    @app.exception_handler(json.JSONDecodeError)
    async def json_error_handler(request: Request, exc: json.JSONDecodeError) -> JSONResponse:
        return _error_response(request, exc, 500, "Data integrity error", level=logging.ERROR)

    @app.exception_handler(InternalServerError)
    async def internal_server_error_handler(
        request: Request, exc: InternalServerError
    ) -> JSONResponse:
        return _error_response(request, exc, 500, "Internal server error", level=logging.ERROR)

    @app.exception_handler(OperationalError)
    async def operational_error_handler(request: Request, exc: OperationalError) -> JSONResponse:
        return _error_response(
            request, exc, 503, "Database temporarily unavailable", level=logging.ERROR
        )


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    if settings is None:
        settings = Settings()

    docs_enabled = settings.debug or settings.expose_docs
    app = FastAPI(
        title="SitePlan",
        description="Sitemap planning and WordPress export for client sites",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if docs_enabled else None,
        redoc_url="/redoc" if docs_enabled else None,
        openapi_url="/openapi.json" if docs_enabled else None,
    )
    app.state.settings = settings

    # WXR downloads of large sites compress well
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins or (DEV_CORS_ORIGINS if settings.debug else []),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Content-Disposition"],
    )

    for router in (
        health_router,
        sites_router,
        sitemap_router,
        content_pages_router,
        export_router,
    ):
        app.include_router(router)

    _register_exception_handlers(app)
    return app


app = create_app()


def cli_entry() -> None:
    """CLI entry point for running the server."""
    import uvicorn

    settings: Settings = app.state.settings
    uvicorn.run(
        "siteplan.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
