"""
FastAPI application entry point for the SAR downloads server.

This module initializes the FastAPI application with:
- Artifact root creation and SQLite schema setup on startup
- Exception handlers translating service errors to {"status", "message"}
- Health check endpoint
- Logging configuration

Environment Variables:
    API_TOKEN: Shared bearer token for uploads (empty disables uploads)
    SAR_DL_BIN_FOLDER: Artifact root directory (default: bin)
    SAR_DL_DB_URL: Index database URL (default: sqlite:///./sar_dl.db)
    SAR_DL_ENV: Environment (production/development, default: development)
    SAR_DL_LOG_LEVEL: Log level (DEBUG/INFO/WARNING/ERROR/CRITICAL, default: INFO)
"""

from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from backend.src.config.settings import get_settings
from backend.src.db.database import DATABASE_URL, init_db
from backend.src.services.exceptions import (
    ArtifactIntegrityError,
    NotFoundError,
    StorageError,
    UnsupportedMediaError,
    ValidationError,
)
from backend.src.utils.logging_config import get_logger, init_logging


APP_VERSION = "1.0.0"


def error_response(
    status_code: int,
    message: str,
    headers: Optional[Dict[str, str]] = None,
    **extra: Any,
) -> JSONResponse:
    """JSON error body: {"status": <code>, "message": <text>, ...extra}."""
    return JSONResponse(
        status_code=status_code,
        content={"status": status_code, "message": message, **extra},
        headers=headers,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Startup creates the artifact root and, for SQLite, the index table.
    PostgreSQL deployments run Alembic migrations instead.
    """
    logger = get_logger("api")
    logger.info("Starting SAR downloads server")

    settings = get_settings()
    settings.bin_folder.mkdir(parents=True, exist_ok=True)

    if DATABASE_URL.startswith("sqlite"):
        init_db()

    if not settings.upload_configured:
        logger.warning("API_TOKEN is not set, uploads are disabled")

    logger.info(
        "SAR downloads server started",
        extra={"bin_folder": str(settings.bin_folder)},
    )

    yield

    logger.info("Shutting down SAR downloads server")


# Initialize logging before creating app
init_logging()

app = FastAPI(
    title="SAR Downloads",
    description="Artifact index and download server for SourceAutoRecord builds. "
                "CI uploads hashed batches per channel; clients query the latest "
                "release of a channel and download binaries.",
    version=APP_VERSION,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)


# Exception handlers


@app.exception_handler(NotFoundError)
async def not_found_exception_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    """Handle missing resources (404)."""
    logger = get_logger("api")
    logger.info(
        "Not found",
        extra={"path": request.url.path, "resource": exc.resource, "identifier": str(exc.identifier)},
    )
    return error_response(status.HTTP_404_NOT_FOUND, exc.message)


@app.exception_handler(ValidationError)
async def service_validation_exception_handler(
    request: Request, exc: ValidationError
) -> JSONResponse:
    """Handle rejected input (400)."""
    logger = get_logger("api")
    logger.warning(
        "Validation error",
        extra={"path": request.url.path, "field": exc.field, "error": exc.message},
    )
    return error_response(status.HTTP_400_BAD_REQUEST, exc.message)


@app.exception_handler(UnsupportedMediaError)
async def unsupported_media_exception_handler(
    request: Request, exc: UnsupportedMediaError
) -> JSONResponse:
    """Handle non-multipart bodies and non-file parts (415)."""
    logger = get_logger("api")
    logger.warning(
        "Unsupported media",
        extra={"path": request.url.path, "error": exc.message},
    )
    return error_response(status.HTTP_415_UNSUPPORTED_MEDIA_TYPE, exc.message)


@app.exception_handler(ArtifactIntegrityError)
async def integrity_exception_handler(
    request: Request, exc: ArtifactIntegrityError
) -> JSONResponse:
    """Handle hash mismatches (400). Files committed before it stay."""
    logger = get_logger("api")
    logger.warning(
        "Upload rejected on hash mismatch",
        extra={"path": request.url.path, "file_name": exc.name, "inserted": exc.inserted},
    )
    return error_response(status.HTTP_400_BAD_REQUEST, exc.message, inserted=exc.inserted)


@app.exception_handler(StorageError)
async def storage_exception_handler(request: Request, exc: StorageError) -> JSONResponse:
    """Handle files that could not be written to disk or the index (500)."""
    logger = get_logger("api")
    logger.error(
        "Storage failure",
        extra={"path": request.url.path, "inserted": exc.inserted, "failed": exc.failed},
    )
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        exc.message,
        inserted=exc.inserted,
        ok=False,
        failed=exc.failed,
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Keep status and headers (e.g. WWW-Authenticate) of HTTP errors."""
    return error_response(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


@app.exception_handler(PydanticValidationError)
async def validation_exception_handler(
    request: Request, exc: PydanticValidationError
) -> JSONResponse:
    """
    Handle Pydantic validation errors.

    Raised when a stored record no longer matches its schema.
    """
    logger = get_logger("api")
    logger.error(
        "Stored record failed validation",
        extra={
            "path": request.url.path,
            "method": request.method,
            "errors": exc.errors(),
        }
    )
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "A stored record could not be read.",
    )


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(
    request: Request, exc: SQLAlchemyError
) -> JSONResponse:
    """Handle SQLAlchemy database errors."""
    logger = get_logger("db")
    logger.error(
        "Database error",
        extra={
            "path": request.url.path,
            "method": request.method,
            "error": str(exc),
        }
    )
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "An error occurred while accessing the database. Please try again later.",
    )


@app.exception_handler(Exception)
async def generic_exception_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    """Handle all other unhandled exceptions."""
    logger = get_logger("api")
    logger.error(
        "Unhandled exception",
        extra={
            "path": request.url.path,
            "method": request.method,
            "error_type": type(exc).__name__,
            "error": str(exc),
        },
        exc_info=True,
    )
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "An unexpected error occurred. Please try again later.",
    )


# Health check endpoint


@app.get("/health", tags=["Health"])
async def health_check() -> Dict[str, Any]:
    """
    Health check endpoint.

    Returns:
        Health status and application information
    """
    return {
        "status": "healthy",
        "service": "sar-dl",
        "version": APP_VERSION,
    }


# Routers. The download router ends in a catch-all path and goes last.
from backend.src.api import binaries, downloads

app.include_router(binaries.router)
app.include_router(downloads.router)
