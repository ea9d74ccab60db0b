"""
Main FastAPI application entry point.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from family_library.api import router as api_router
from family_library.core.config import get_settings
from family_library.core.logging import get_logger, setup_logging
from family_library.core.middleware import (
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
)
from family_library.schemas.validation import field_errors_from
from family_library.services.exceptions import LibraryError
from family_library.storage import build_storage

settings = get_settings()

# Set up logging
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    logger.info(
        f"Starting {settings.APP_NAME}",
        extra={
            "extra_fields": {
                "environment": settings.ENVIRONMENT,
                "debug": settings.DEBUG,
                "storage_backend": settings.STORAGE_BACKEND,
            }
        },
    )

    app.state.storage = build_storage(settings)

    yield

    # Shutdown
    logger.info(f"Shutting down {settings.APP_NAME}")


app = FastAPI(
    title=settings.APP_NAME,
    description="Shared bookshelves, lending and reading history for a household",
    version="1.0.0",
    docs_url="/docs" if settings.ENVIRONMENT != "production" else None,
    redoc_url="/redoc" if settings.ENVIRONMENT != "production" else None,
    lifespan=lifespan,
)

# CORS middleware - must be added first (outermost)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

# Add other middleware
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestLoggingMiddleware)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = [e.to_dict() for e in field_errors_from(exc.errors())]
    return JSONResponse(
        status_code=422,
        content={"detail": "Validation error", "errors": errors},
    )


@app.exception_handler(LibraryError)
async def library_exception_handler(request: Request, exc: LibraryError):
    logger.info(
        f"{request.method} {request.url.path} rejected: {exc.message}",
        extra={"extra_fields": {"status_code": exc.status_code}},
    )
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(
        f"Unhandled error on {request.method} {request.url.path}",
        exc_info=exc,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


@app.get("/health")
async def health_check():
    """
    Health check endpoint for load balancers and monitoring.

    Returns basic application health status.
    """
    return {
        "status": "healthy",
        "app": settings.APP_NAME,
        "version": "1.0.0",
        "environment": settings.ENVIRONMENT,
    }


@app.get("/health/ready")
async def readiness_check(request: Request):
    """
    Readiness check endpoint.

    Verifies the storage backend answers queries.
    """
    storage = getattr(request.app.state, "storage", None)
    try:
        if storage is None:
            raise RuntimeError("storage not initialized")
        storage.get_all_families()
        storage_status = "connected"
    except Exception as e:
        logger.error(f"Storage health check failed: {e}")
        storage_status = "disconnected"

    status_text = "ready" if storage_status == "connected" else "not_ready"

    return {
        "status": status_text,
        "checks": {
            "storage": storage_status,
        },
    }


# Include API routes
app.include_router(api_router, prefix=settings.API_PREFIX)
