"""
PAWhere Backend — FastAPI Application Factory
===============================================

What:  Creates and configures the FastAPI application instance.
Why:   Centralizes middleware, route mounting, exception handling and the
       database lifecycle in one place.
How:   create_app() returns a configured FastAPI instance.
Who:   uvicorn (uvicorn pawhere.main:app) and the test suite.

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware:  RequestID → Logging → GZip → CORS → Errors │
    │                                                          │
    │  Routes:                                                 │
    │    POST /api/register        GET /api/registrations      │
    │    GET  /api/health          GET /api/health/db          │
    │    GET  /api                                             │
    │                                                          │
    │  Exception Handlers:                                     │
    │    ValidationError → 400     DuplicateEmailError → 409   │
    │    SchemaProvisioningError / DatabaseError / other → 500 │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Validate configuration (logged, not fatal)
    3. Build Database + RegistrationStore, keep them on app.state
    4. ensure_schema() so the first submission finds the table
    Shutdown:
    1. Dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from pawhere import __version__
from pawhere.config import settings
from pawhere.database import Database
from pawhere.exceptions import (
    DatabaseError,
    DuplicateEmailError,
    PawhereError,
    SchemaProvisioningError,
    ValidationError,
)
from pawhere.middleware.errors import UnhandledErrorMiddleware, internal_error_body
from pawhere.middleware.logging import RequestLoggingMiddleware
from pawhere.middleware.request_id import RequestIDMiddleware, request_id_var
from pawhere.routes import health, registration
from pawhere.services.registration_store import RegistrationStore

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the whole process.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Called once from the lifespan, before anything else logs.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Build the storage adapter on startup and tear it down on shutdown.

    A store already placed on app.state (tests do this) is left alone.
    """
    setup_logging()
    logger.info("=" * 60)
    logger.info("PAWhere Backend %s starting up (%s)...", __version__, settings.environment)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))

    owns_database = getattr(app.state, "database", None) is None
    if owns_database:
        app.state.database = Database(settings.database_url)
        app.state.registration_store = RegistrationStore(app.state.database)

    # Not fatal: the health probe reports the problem and every
    # registration retries the ensure step before writing
    try:
        await app.state.registration_store.ensure_schema()
        logger.info("Registrations schema ready")
    except SchemaProvisioningError as e:
        logger.error("Schema not ready at startup: %s | Context: %s", e.message, e.context)

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("PAWhere Backend shutting down...")
    if owns_database:
        await app.state.database.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP status codes and response bodies.

        ValidationError          → 400 {message, errors}
        DuplicateEmailError      → 409 {message, error: "DUPLICATE_EMAIL"}
        SchemaProvisioningError  → 500
        DatabaseError            → 500
        PawhereError (base)      → 500
        Exception (fallback)     → 500, rendered by UnhandledErrorMiddleware
                                   for route errors so CORS still applies
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        rid = request_id_var.get("")
        logger.warning("[%s] Validation error on fields: %s", rid, exc.fields)
        return JSONResponse(
            status_code=400,
            content={
                "message": exc.message,
                "errors": [error.model_dump() for error in exc.errors],
                "request_id": rid,
            },
        )

    @app.exception_handler(DuplicateEmailError)
    async def handle_duplicate_email(request: Request, exc: DuplicateEmailError):
        rid = request_id_var.get("")
        logger.warning("[%s] Duplicate registration (%s)", rid, exc.context.get("detected_by"))
        return JSONResponse(
            status_code=409,
            content={
                "message": exc.message,
                "error": DuplicateEmailError.code,
                "request_id": rid,
            },
        )

    @app.exception_handler(SchemaProvisioningError)
    async def handle_schema_error(request: Request, exc: SchemaProvisioningError):
        rid = request_id_var.get("")
        logger.error("[%s] Schema provisioning error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(status_code=500, content=internal_error_body(rid, exc))

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        rid = request_id_var.get("")
        logger.error("[%s] Database error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(status_code=500, content=internal_error_body(rid, exc))

    @app.exception_handler(PawhereError)
    async def handle_app_error(request: Request, exc: PawhereError):
        rid = request_id_var.get("")
        logger.error("[%s] Application error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(status_code=500, content=internal_error_body(rid, exc))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(status_code=500, content=internal_error_body(rid, exc))


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns a fresh instance each call, so tests can attach their own
    Database/RegistrationStore to app.state.
    """
    app = FastAPI(
        title="PAWhere API",
        description=(
            "Lead registration for the PAWhere pet GPS tracker: early access and "
            "VIP tester sign-ups with an optional pet-safety survey."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Execution order is the reverse of addition:
    # RequestID → Logging → GZip → CORS → UnhandledError → route
    app.add_middleware(UnhandledErrorMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=False,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Request-ID", "X-Device-Type"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(registration.router)
    app.include_router(health.router)

    return app


app = create_app()
