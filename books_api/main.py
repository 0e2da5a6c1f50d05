# books_api/main.py
import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .catalog import catalog_router
from .catalog.schemas import HealthStatus
from .config import Settings, get_settings
from .errors import BookValidationError, CatalogError
from .logging_config import setup_logging
from .storage import BookCatalog, format_timestamp, utc_now


logger = logging.getLogger(__name__)

AVAILABLE_ENDPOINTS = [
    "GET /health",
    "GET /books",
    "GET /books/:id",
    "POST /books",
    "PUT /books/:id",
    "PATCH /books/:id",
    "DELETE /books/:id",
    "DELETE /books?confirm=true",
    "GET /stats",
]


async def catalog_error_handler(request: Request, exc: CatalogError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    error = BookValidationError.from_errors(exc.errors())
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    # CORS preflights are answered by CORSMiddleware; any other OPTIONS is acknowledged.
    if request.method == "OPTIONS":
        return PlainTextResponse("OK")
    # Unknown paths and unsupported methods both answer with the route list.
    if exc.status_code in (404, 405):
        return JSONResponse(
            status_code=404,
            content={
                "error": "Route not found",
                "code": "ROUTE_NOT_FOUND",
                "availableEndpoints": AVAILABLE_ENDPOINTS,
            },
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail), "code": "HTTP_ERROR"},
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "code": "SERVER_ERROR"},
    )


def create_app(
    settings: Optional[Settings] = None,
    catalog: Optional[BookCatalog] = None,
) -> FastAPI:
    """Build a configured FastAPI application.

    Both arguments are optional so tests can inject their own settings
    or a pre-populated ``BookCatalog``; otherwise settings come from
    the environment and a fresh catalogue is created (seeded with the
    sample books unless ``seed_data`` is off).
    """
    settings = settings or get_settings()
    setup_logging(settings.log_level, settings.log_file)

    if catalog is None:
        catalog = BookCatalog(
            seed=settings.seed_data,
            merge_checks_duplicates=settings.merge_checks_duplicates,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "%s running on port %s (environment: %s)",
            settings.project_name,
            settings.port,
            settings.environment,
        )
        try:
            yield
        finally:
            logger.info("Shutting down gracefully, %d books in memory", len(app.state.catalog))

    app = FastAPI(
        title=settings.project_name,
        description="In-memory CRUD API for a catalogue of books.",
        version=settings.api_version,
        lifespan=lifespan,
    )
    app.state.catalog = catalog
    app.state.settings = settings
    app.state.started_at = time.monotonic()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Origin", "X-Requested-With", "Content-Type", "Accept", "Authorization"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        logger.info("%s %s", request.method, request.url.path)
        return await call_next(request)

    app.add_exception_handler(CatalogError, catalog_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    @app.get("/health", response_model=HealthStatus, tags=["health"])
    def health_check(request: Request) -> HealthStatus:
        return HealthStatus(
            status="OK",
            timestamp=format_timestamp(utc_now()),
            uptime=round(time.monotonic() - request.app.state.started_at, 3),
            environment=settings.environment,
        )

    app.include_router(catalog_router)
    return app
