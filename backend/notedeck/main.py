"""
NoteDeck Backend — FastAPI Application Factory
===============================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() assembles middleware, exception handlers and routers.
Who:   uvicorn (`uvicorn notedeck.main:app`) and the test suite.

Application Layout:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware:  Request ID → Logging → GZip → CORS    │
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────────────┐ ┌─────────────┐ ┌──────────┐ │
    │  │ /api/notes       │ │ /api/profile│ │ /health  │ │
    │  └──────────────────┘ └─────────────┘ └──────────┘ │
    │                                                     │
    │  Exception Handlers:                                │
    │  Auth→401 │ Identity→503 │ Store→500 │ Other→500    │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging, validate identity settings (log, don't abort),
              warn when the per-process view cache is enabled
    Shutdown: dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from notedeck import __version__
from notedeck.config import settings
from notedeck.database import dispose_engine
from notedeck.exceptions import (
    AuthenticationError,
    IdentityProviderError,
    NoteDeckError,
)
from notedeck.middleware.logging import RequestLoggingMiddleware
from notedeck.middleware.request_id import RequestIDMiddleware, request_id_var
from notedeck.routes import health, notes, profile

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure the root logger once, before anything else logs.

    Format: 2025-01-15T12:00:00 [INFO] notedeck.services.note_service: Note created: ...
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party libraries log every request/query at INFO or below
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


def warn_if_view_cache_enabled() -> None:
    """
    The view cache lives in one process and only that process's mutations
    revalidate it. Behind several workers a listing can lag a write made
    elsewhere by up to VIEW_CACHE_TTL seconds, so say so at startup.
    """
    if settings.view_cache_ttl > 0:
        logger.warning(
            "View cache enabled (VIEW_CACHE_TTL=%ds): listings are cached per process; "
            "run a single worker or set VIEW_CACHE_TTL=0",
            settings.view_cache_ttl,
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    logger.info("NoteDeck Backend %s starting up...", __version__)

    # Notes keep working without the identity provider; only profile
    # lookups need it, so a missing setting is logged rather than fatal.
    try:
        settings.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))

    warn_if_view_cache_enabled()

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)

    yield

    logger.info("NoteDeck Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP responses in the ErrorResponse format.

        AuthenticationError     → 401 (details.login_url tells the client where to sign in)
        IdentityProviderError   → 503 (Retry-After when known)
        SQLAlchemyError         → 500 (store failure; internals logged, never returned)
        NoteDeckError (base)    → 500
        Exception (fallback)    → 500
    """

    @app.exception_handler(AuthenticationError)
    async def handle_authentication_error(request: Request, exc: AuthenticationError):
        rid = request_id_var.get("")
        return JSONResponse(
            status_code=401,
            content={
                "error": "unauthorized",
                "message": exc.message,
                "details": {"login_url": exc.login_url} if exc.login_url else None,
                "request_id": rid,
            },
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(IdentityProviderError)
    async def handle_identity_provider_error(request: Request, exc: IdentityProviderError):
        rid = request_id_var.get("")
        logger.error("[%s] Identity provider error: %s | Context: %s", rid, exc.message, exc.context)
        headers = {}
        if exc.retry_after:
            headers["Retry-After"] = str(exc.retry_after)
        return JSONResponse(
            status_code=503,
            content={
                "error": "identity_unavailable",
                "message": exc.message,
                "request_id": rid,
            },
            headers=headers,
        )

    @app.exception_handler(SQLAlchemyError)
    async def handle_store_error(request: Request, exc: SQLAlchemyError):
        """Store failures surface here untranslated; log them, answer generically."""
        rid = request_id_var.get("")
        logger.error(
            "[%s] Store error on %s %s: %s",
            rid,
            request.method,
            request.url.path,
            str(exc),
            exc_info=True,
        )
        return JSONResponse(
            status_code=500,
            content={
                "error": "server_error",
                "message": "An internal error occurred. Please try again later.",
                "request_id": rid,
            },
        )

    @app.exception_handler(NoteDeckError)
    async def handle_notedeck_error(request: Request, exc: NoteDeckError):
        rid = request_id_var.get("")
        logger.error("[%s] Application error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content={
                "error": "server_error",
                "message": exc.message,
                "request_id": rid,
            },
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": "An unexpected error occurred. Please try again or contact support.",
                "request_id": rid,
            },
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="NoteDeck API",
        description="Notes and profile backend for the NoteDeck productivity app.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Middleware executes in REVERSE order of addition (last added = outermost)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,  # session cookie carries the access token
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Total-Count", "Retry-After"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(notes.router)
    app.include_router(profile.router)
    app.include_router(health.router)

    return app


app = create_app()
