"""ReviewFlow Backend - Main FastAPI Application

Document approval workflow: uploaders submit PDFs, approvers approve or
unapprove them, reviewers review the approved ones.

This module creates and configures the main FastAPI application, including:
- All API routers (auth, uploads, documents, observability)
- Middleware (request ID correlation, CORS)
- Exception handlers
"""

import logging
import os
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import SQLAlchemyError

from config import get_settings
from domain.errors import RateLimitedError, WorkflowError

# Observability
from observability.logging_config import configure_logging
from observability.middleware import RequestIDMiddleware
from observability.router import router as observability_router

# Routers
from auth.router import router as auth_router
from documents.router import router as documents_router
from uploads.router import router as uploads_router

settings = get_settings()

configure_logging(level=settings.LOG_LEVEL, json_format=settings.LOG_JSON)

logger = logging.getLogger(__name__)

IS_PRODUCTION = settings.ENVIRONMENT == "production"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info("ReviewFlow API starting up...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Notification mode: {settings.NOTIFICATION_MODE}")

    os.makedirs(settings.UPLOAD_STAGING_DIR, exist_ok=True)

    yield

    logger.info("ReviewFlow API shutting down...")


app = FastAPI(
    title="ReviewFlow API",
    description="Document upload, approval and review workflow",
    version="0.1.0",
    docs_url=None if IS_PRODUCTION else "/docs",
    redoc_url=None if IS_PRODUCTION else "/redoc",
    openapi_url=None if IS_PRODUCTION else "/openapi.json",
    lifespan=lifespan,
)


# =============================================================================
# MIDDLEWARE CONFIGURATION
# =============================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"],
)

# Added last so it wraps everything else
app.add_middleware(RequestIDMiddleware)


# =============================================================================
# EXCEPTION HANDLERS
# =============================================================================

@app.exception_handler(WorkflowError)
async def workflow_exception_handler(
    request: Request,
    exc: WorkflowError
) -> JSONResponse:
    """Map workflow errors to their status code and error code.

    Server-side failures return a generic message; the detail is logged.
    """
    if exc.status_code >= 500:
        logger.error(
            f"{exc.code} on {request.method} {request.url.path}: {exc.message}",
            extra={"error_type": type(exc).__name__}
        )
    else:
        logger.info(
            f"{exc.code} on {request.method} {request.url.path}: {exc.message}",
            extra={"error_type": type(exc).__name__}
        )

    headers = None
    if isinstance(exc, RateLimitedError) and exc.retry_after:
        headers = {"Retry-After": str(exc.retry_after)}

    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.code, "message": exc.client_message()},
        headers=headers,
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    """Handle Pydantic validation errors with field-level details."""
    logger.warning(
        f"Validation error on {request.method} {request.url.path}",
        extra={"path": request.url.path}
    )
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "validation_error",
            "message": "Request validation failed",
            "details": jsonable_encoder(exc.errors()),
        },
    )


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(
    request: Request,
    exc: SQLAlchemyError
) -> JSONResponse:
    """Handle database errors without leaking details."""
    logger.error(
        f"Database error on {request.method} {request.url.path}",
        exc_info=exc
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "database_error",
            "message": "A database error occurred. Please try again later.",
        },
    )


@app.exception_handler(Exception)
async def generic_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """Handle uncaught exceptions with a generic response."""
    logger.error(
        f"Unhandled exception on {request.method} {request.url.path}",
        exc_info=exc
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "internal_error",
            "message": "An unexpected error occurred. Please try again later.",
        },
    )


# =============================================================================
# ROUTER REGISTRATION
# =============================================================================

app.include_router(observability_router)
app.include_router(auth_router)
app.include_router(uploads_router)
app.include_router(documents_router)


@app.get("/", include_in_schema=False)
async def root() -> dict[str, Any]:
    """Root endpoint - API information."""
    return {
        "name": "ReviewFlow API",
        "version": "0.1.0",
        "status": "running",
        "docs": None if IS_PRODUCTION else "/docs",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        reload=settings.ENVIRONMENT == "development",
        log_level=settings.LOG_LEVEL.lower(),
    )
