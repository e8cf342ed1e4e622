"""
API Template Application Entry Point

FastAPI application factory, including router registration, exception
handling and database lifecycle.
"""

import logging
import sys
import time
import traceback
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from crud_api.common.errors import GENERIC_ERROR, AppError
from crud_api.common.time import utc_now
from crud_api.config import Settings, get_settings
from crud_api.db.session import Database
from crud_api.entities import ENTITY_ROUTES
from crud_api.logging_config import setup_logging

logger = logging.getLogger(__name__)

_PROCESS_STARTED = time.monotonic()


# Application Lifecycle Management
@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application Lifecycle Management

    Verifies the database and syncs tables on startup, closes the pool on shutdown.
    uvicorn maps SIGINT/SIGTERM to shutdown, so the pool is released on signals too.
    """
    settings: Settings = app.state.settings
    database: Database = app.state.database

    # Startup
    if not await database.verify_connection():
        await database.dispose()
        raise RuntimeError("Failed to connect to database. Please check your configuration.")
    await database.create_all()

    base_url = f"http://{settings.HOST}:{settings.PORT}"
    logger.info("Server running on %s", base_url)
    logger.info("API Documentation: %s/docs", base_url)
    logger.info("Health Check: %s/health", base_url)
    logger.info("Environment: %s", settings.ENVIRONMENT)
    try:
        yield
    finally:
        # Shutdown
        logger.info("Shutting down gracefully...")
        await database.dispose()


def create_app(
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
) -> FastAPI:
    """
    Create the FastAPI application

    Args:
        settings: Application settings (defaults to environment configuration)
        database: Database resource (defaults to one built from settings)

    Returns:
        FastAPI: Configured application owning `database`
    """
    settings = settings or get_settings()
    setup_logging(settings)
    database = database or Database.from_settings(settings)

    app = FastAPI(
        title=settings.APP_NAME,
        description="Generic CRUD API",
        version=settings.APP_VERSION,
        lifespan=lifespan,
        docs_url="/docs",
    )
    app.state.settings = settings
    app.state.database = database

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _register_exception_handlers(app, settings)

    # Health Check Endpoint
    @app.get("/health", tags=["Health"])
    async def health_check():
        """
        Health Check

        Used for service liveness probe.
        """
        return {
            "status": "OK",
            "timestamp": utc_now().isoformat(),
            "uptime": round(time.monotonic() - _PROCESS_STARTED, 3),
            "environment": settings.ENVIRONMENT,
        }

    # Register Entity Routers
    for build_routes in ENTITY_ROUTES:
        app.include_router(build_routes(settings).get_router())

    return app


def _register_exception_handlers(app: FastAPI, settings: Settings) -> None:
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        """
        Handle application custom exceptions

        In production mode, error details are hidden to prevent information leakage.
        """
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_dict(include_details=not settings.is_production),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        """Unknown routes and other HTTP errors, in envelope form"""
        if exc.status_code == status.HTTP_404_NOT_FOUND:
            return JSONResponse(
                status_code=exc.status_code,
                content={
                    "success": False,
                    "error": "Route not found",
                    "path": request.url.path,
                    "method": request.method,
                },
            )
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "message": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        """Malformed bodies and query parameters"""
        return JSONResponse(
            status_code=422,
            content={
                "success": False,
                "message": "Validation failed",
                "error": "validation_error",
                "details": jsonable_encoder(exc.errors()),
            },
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """
        Handle uncaught exceptions

        In production mode, stack traces and error details are logged but not returned to clients.
        """
        logger.error(
            "Unhandled error: %s\nPath: %s\nTraceback:\n%s",
            str(exc),
            request.url.path,
            traceback.format_exc(),
        )

        if settings.is_production:
            return JSONResponse(
                status_code=500,
                content={"success": False, "error": GENERIC_ERROR},
            )
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "error": str(exc),
                "type": type(exc).__name__,
                "stack": traceback.format_exception(type(exc), exc, exc.__traceback__),
            },
        )


def run() -> None:
    """
    Command line entry point

    Exits with status 1 when required storage settings are missing or the
    server fails to start.
    """
    settings = get_settings()
    setup_logging(settings)

    missing = settings.missing_database_settings()
    if missing:
        for name in missing:
            logger.error("Missing required environment variable: %s", name)
        sys.exit(1)

    info = settings.database_info()
    logger.info(
        "Current Database Configuration: type=%s host=%s port=%s database=%s user=%s",
        info["type"],
        info["host"],
        info["port"],
        info["database"],
        info["user"],
    )

    try:
        uvicorn.run(
            "crud_api.main:create_app",
            factory=True,
            host=settings.HOST,
            port=settings.PORT,
            reload=settings.is_development,
            log_config=None,
        )
    except Exception:
        logger.exception("Failed to start server")
        sys.exit(1)


if __name__ == "__main__":
    run()
