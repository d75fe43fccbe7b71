"""
Safe Haven Backend: FastAPI Application Factory
=================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() assembles middleware, exception handlers and routers.
Who:   uvicorn (`uvicorn safehaven.main:app`) and the test client.

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware: Request ID → Rate Limit → Logging → GZip    │
    │              → CORS                                      │
    │                                                          │
    │  Routes:                                                 │
    │   /api/appointments   /api/services   /api/contact       │
    │   /api/auth           /api/users      /health            │
    │                                                          │
    │  Exception Handlers:                                     │
    │   Validation/NoCounselor→400  Auth→401  Forbidden→403    │
    │   NotFound→404  Conflict→409  RateLimit→429              │
    │   Database→500  MailDelivery→502  anything else→500      │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging, production config check, ready banner
    Shutdown: dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from safehaven import __version__
from safehaven.config import settings
from safehaven.database import dispose_engine
from safehaven.exceptions import (
    AuthenticationError,
    ConflictError,
    DatabaseError,
    ForbiddenError,
    MailDeliveryError,
    NoCounselorAvailableError,
    NotFoundError,
    RateLimitExceededError,
    SafeHavenError,
    ValidationError,
)
from safehaven.middleware.logging import RequestLoggingMiddleware
from safehaven.middleware.rate_limit import RateLimitMiddleware
from safehaven.middleware.request_id import (
    RequestIDLogFilter,
    RequestIDMiddleware,
    request_id_var,
)
from safehaven.routes import appointments, auth, contact, health, services, users

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configures the root logger once at startup.

    Format: 2025-03-10T09:00:00 [INFO] safehaven.services.appointment_service [a1b2c3d4] ...
    The bracketed id comes from RequestIDLogFilter ("-" outside a request).
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestIDLogFilter())

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s [%(request_id)s] %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[handler],
        force=True,
    )

    # Third-party loggers are chatty at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.ERROR)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    logger.info("=" * 60)
    logger.info("Safe Haven Backend %s starting up (%s)...", __version__, settings.app_env)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Keep serving so /health can report the problem
        logger.error("Configuration error: %s", str(e))

    if not settings.mail_configured:
        logger.warning("SMTP credentials not set: booking and contact emails will be skipped")
    logger.info("Counselor assignment strategy: %s", settings.counselor_assignment_strategy)
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("Safe Haven Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_response(
    status_code: int,
    error: str,
    message: str,
    details: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    content: Dict[str, Any] = {
        "success": False,
        "error": error,
        "message": message,
        "request_id": request_id_var.get(""),
    }
    if details:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Maps the exception hierarchy to HTTP responses.

    Handlers never put stack traces, SQL or SMTP replies in a response body;
    those go to the server log with the request id.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("Validation error: %s", exc.message)
        return _error_response(400, "validation_error", exc.message, exc.context)

    @app.exception_handler(NoCounselorAvailableError)
    async def handle_no_counselor(request: Request, exc: NoCounselorAvailableError):
        logger.warning("Booking rejected, no counselor available: %s", exc.context)
        return _error_response(400, "no_counselor_available", exc.message)

    @app.exception_handler(AuthenticationError)
    async def handle_authentication_error(request: Request, exc: AuthenticationError):
        return _error_response(
            401, "unauthorized", exc.message, headers={"WWW-Authenticate": "Bearer"}
        )

    @app.exception_handler(ForbiddenError)
    async def handle_forbidden(request: Request, exc: ForbiddenError):
        logger.warning("Forbidden: %s | Context: %s", exc.message, exc.context)
        return _error_response(403, "forbidden", exc.message)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return _error_response(404, "not_found", exc.message)

    @app.exception_handler(ConflictError)
    async def handle_conflict(request: Request, exc: ConflictError):
        logger.warning("Conflict: %s", exc.message)
        return _error_response(409, "conflict", exc.message, exc.context)

    @app.exception_handler(RateLimitExceededError)
    async def handle_rate_limit(request: Request, exc: RateLimitExceededError):
        return _error_response(
            429,
            "rate_limit_exceeded",
            exc.message,
            exc.context,
            headers={"Retry-After": str(exc.retry_after)},
        )

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error("Database error: %s | Context: %s", exc.message, exc.context)
        return _error_response(
            500, "server_error", "An internal error occurred. Please try again later."
        )

    @app.exception_handler(MailDeliveryError)
    async def handle_mail_error(request: Request, exc: MailDeliveryError):
        logger.error("Mail delivery error: %s | Context: %s", exc.message, exc.context)
        return _error_response(
            502, "mail_delivery_error", "We could not send email right now. Please call us directly."
        )

    @app.exception_handler(SafeHavenError)
    async def handle_app_error(request: Request, exc: SafeHavenError):
        logger.error("Unhandled application error: %s | Context: %s", exc.message, exc.context)
        return _error_response(500, "server_error", exc.message)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error("Unexpected error: %s", str(exc), exc_info=True)
        return _error_response(
            500,
            "internal_server_error",
            "An unexpected error occurred. Please try again or contact support.",
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="Safe Haven Restoration Ministries API",
        description=(
            "Appointment booking and management for a counseling practice: "
            "public booking and contact forms, service catalog, and the "
            "authenticated appointment lifecycle for clients, counselors and admins."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Last added runs first: RequestID → RateLimit → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RateLimitMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(appointments.router)
    app.include_router(services.router)
    app.include_router(contact.router)
    app.include_router(auth.router)
    app.include_router(users.router)
    app.include_router(health.router)

    return app


app = create_app()
