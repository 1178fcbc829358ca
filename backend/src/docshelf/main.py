"""docshelf Backend - Main FastAPI Application

Personal document library with AI classification, user-to-user sharing and
public links.

This module creates and configures the main FastAPI application, including:
- API routers (documents, shares, dashboard, public links)
- Middleware (request ID correlation, CORS)
- Exception handlers
- Health and observability endpoints
- Search projection sync
"""

import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from . import __version__
from .config import settings
from .database import SessionLocal
from .errors import DocshelfError

# Observability
from .observability.logging_config import configure_logging
from .observability.middleware import RequestIDMiddleware
from .observability.router import router as observability_router

# Routers
from .api.v1.documents.router import router as documents_router
from .api.v1.documents.shares_router import router as shares_router
from .api.v1.dashboard.router import router as dashboard_router
from .api.public.router import router as public_router

from .search.indexer import get_search_index, register_search_sync

# Configure logging
configure_logging(level=settings.LOG_LEVEL, json_format=settings.LOG_JSON)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler.

    - Startup: install search projection sync
    - Shutdown: remove the session listeners again
    """
    logger.info("docshelf API starting up...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Debug mode: {settings.DEBUG}")

    unregister_search_sync = register_search_sync(get_search_index(), SessionLocal)

    yield

    unregister_search_sync()
    logger.info("docshelf API shutting down...")


_docs_enabled = settings.ENVIRONMENT != "production"

app = FastAPI(
    title="docshelf API",
    description="Personal document library with AI classification, sharing and public links",
    version=__version__,
    docs_url="/docs" if _docs_enabled else None,
    redoc_url="/redoc" if _docs_enabled else None,
    openapi_url="/openapi.json" if _docs_enabled else None,
    lifespan=lifespan,
)


# =============================================================================
# MIDDLEWARE CONFIGURATION
# =============================================================================

app.add_middleware(RequestIDMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin.strip() for origin in settings.CORS_ORIGINS.split(",") if origin.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"],
)


# =============================================================================
# EXCEPTION HANDLERS
# =============================================================================

def error_response(status_code: int, code: str, message: str, **extra: Any) -> JSONResponse:
    """Uniform error body: {"error": code, "message": ..., **extra}."""
    return JSONResponse(status_code=status_code, content={"error": code, "message": message, **extra})


@app.exception_handler(DocshelfError)
async def docshelf_exception_handler(request: Request, exc: DocshelfError) -> JSONResponse:
    log = logger.warning if exc.status_code < 500 else logger.error
    log(
        f"{exc.__class__.__name__} on {request.method} {request.url.path}: {exc.message}",
        extra={"status_code": exc.status_code},
    )
    return error_response(exc.status_code, exc.code, exc.message)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning(f"Request validation failed on {request.method} {request.url.path}")
    return error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "validation_error",
        "Request validation failed",
        details=jsonable_errors(exc),
    )


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Database failures are logged in full and answered generically."""
    logger.error(f"Database error on {request.method} {request.url.path}", exc_info=exc)
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "database_error",
        "A database error occurred. Please try again later.",
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled exception on {request.method} {request.url.path}", exc_info=exc)
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "internal_error",
        "An unexpected error occurred. Please try again later.",
    )


def jsonable_errors(exc: RequestValidationError) -> list:
    """Field-level validation errors without non-serializable context objects."""
    return [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg"), "type": error.get("type")}
        for error in exc.errors()
    ]


# =============================================================================
# ROUTER REGISTRATION
# =============================================================================

# Observability (health, metrics)
app.include_router(observability_router)

# Documents & sharing
app.include_router(documents_router, prefix="/api/v1")
app.include_router(shares_router, prefix="/api/v1")

# Dashboard
app.include_router(dashboard_router, prefix="/api/v1")

# Public links
app.include_router(public_router)


@app.get("/", include_in_schema=False)
async def root() -> dict[str, Any]:
    """Root endpoint - API information."""
    return {
        "name": "docshelf API",
        "version": __version__,
        "status": "running",
        "docs": "/docs" if _docs_enabled else None,
    }


def create_app() -> FastAPI:
    """Return the configured application (ASGI servers and tests)."""
    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "docshelf.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.ENVIRONMENT == "development",
        log_level=settings.LOG_LEVEL.lower(),
    )
