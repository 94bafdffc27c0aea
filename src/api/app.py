# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""FastAPI Application Factory.

This module provides the main application factory for the KoolHub API.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.api.middleware.auth import AuthMiddleware
from src.api.middleware.rate_limit import limiter, rate_limit_exceeded_handler
from src.api.responses import error_response
from src.api.routes import health
from src.api.v1 import router as v1_router
from src.core.config import get_settings
from src.infrastructure.database.connection import close_database, init_database
from src.models.common import ErrorKind
from src.utils.logging import setup_logging

logger = logging.getLogger(__name__)

_HTTP_ERROR_KINDS = {
    status.HTTP_404_NOT_FOUND: ErrorKind.NOT_FOUND,
    status.HTTP_503_SERVICE_UNAVAILABLE: ErrorKind.PERSISTENCE_UNAVAILABLE,
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Creates the database engine on startup and disposes it on shutdown.

    Args:
        app: The FastAPI application instance.

    Yields:
        None during application runtime.
    """
    settings = get_settings()
    setup_logging(settings)
    logger.info(
        "Starting KoolHub API (environment=%s, debug=%s)",
        settings.environment,
        settings.debug,
    )

    # =========================================================================
    # Startup
    # =========================================================================
    await init_database(settings)
    logger.info("Database engine initialized")

    yield

    # =========================================================================
    # Shutdown
    # =========================================================================
    await close_database()
    logger.info("Database connections closed")
    logger.info("Shutting down KoolHub API")


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render malformed path, query or body input as a 400 envelope."""
    errors = exc.errors()
    fields = [".".join(str(part) for part in e["loc"] if part != "body") for e in errors]
    fields = [f for f in fields if f]
    message = f"Invalid request: {', '.join(fields)}" if fields else "Invalid request body"
    logger.info("Request validation failed on %s: %s", request.url.path, errors)
    return error_response(
        message,
        ErrorKind.VALIDATION_ERROR,
        status.HTTP_400_BAD_REQUEST,
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render HTTP errors (401, 403, unknown routes) as envelopes."""
    kind = _HTTP_ERROR_KINDS.get(exc.status_code, ErrorKind.VALIDATION_ERROR)
    response = error_response(str(exc.detail), kind, exc.status_code)
    if exc.headers:
        response.headers.update(exc.headers)
    return response


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    This factory function creates a new FastAPI instance with all
    middleware, routes, and configurations applied.

    Returns:
        Configured FastAPI application instance.
    """
    settings = get_settings()

    app = FastAPI(
        title="KoolHub API",
        description="Multi-branch school management backend",
        version=health.API_VERSION,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
        # Disable automatic redirects from /path to /path/
        # This prevents 307 redirects that lose Authorization headers
        redirect_slashes=False,
    )

    # =========================================================================
    # State
    # =========================================================================
    app.state.limiter = limiter

    # =========================================================================
    # Exception handlers
    # =========================================================================
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)

    # =========================================================================
    # Middleware (order matters - last added is first executed)
    # =========================================================================

    # Rate limiting runs after authentication so limits are keyed per user
    app.add_middleware(SlowAPIMiddleware)

    # Auth middleware - validates JWT tokens
    app.add_middleware(AuthMiddleware)

    # CORS middleware (should be last to execute first)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors.origins_list,
        allow_credentials=settings.cors.allow_credentials,
        allow_methods=settings.cors.allow_methods,
        allow_headers=settings.cors.allow_headers,
    )

    # =========================================================================
    # Routes
    # =========================================================================
    app.include_router(health.router, tags=["Health"])
    app.include_router(v1_router)

    return app


def serve() -> None:
    """Run the API under uvicorn on ``API_HOST``:``API_PORT``."""
    settings = get_settings()
    uvicorn.run(
        "src.api.app:create_app",
        factory=True,
        host=settings.api.host,
        port=settings.api.port,
        reload=settings.is_development,
    )
