"""
Teamspace Backend — FastAPI Application Factory
=================================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   uvicorn (`uvicorn teamspace.main:app`) and the test suite.

Application Architecture:
    ┌────────────────────────────────────────────────────────────┐
    │                        FastAPI App                         │
    │                                                            │
    │  Middleware:  Request ID → Access Log → GZip → CORS        │
    │                                                            │
    │  Routes:                                                   │
    │   /api/auth  /api/notes  /api/teams  /api/events           │
    │   /api/messaging  /health                                  │
    │                                                            │
    │  Exception Handlers:                                       │
    │   Validation→400  Auth→401  Permission→403  NotFound→404   │
    │   Conflict→409  Database→500  anything else→500            │
    └────────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Configure logging
    2. Warn about insecure configuration (default JWT secret)
    3. Create relational tables unless mock mode is on; failure aborts startup
    4. Bootstrap the document store when enabled; failure is logged only

    Shutdown:
    1. Dispose the SQLAlchemy engine
    2. Close the Motor client
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Dict, Optional, Tuple, Type

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from teamspace import __version__
from teamspace.config import settings
from teamspace.database import dispose_engine, init_database
from teamspace.exceptions import (
    AuthenticationError,
    ConflictError,
    DatabaseError,
    NotFoundError,
    PermissionDeniedError,
    TeamspaceError,
    ValidationError,
)
from teamspace.middleware.logging import RequestLoggingMiddleware
from teamspace.middleware.request_id import RequestIDMiddleware, request_id_var
from teamspace.mongo import close_document_store, init_document_store
from teamspace.routes import auth, events, health, messaging, notes, teams

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure the root logger once, before anything else logs.

    Format: 2026-01-15T12:00:00 [INFO] teamspace.services.note_service: ...
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Per-operation chatter from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("pymongo").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.ERROR)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("Teamspace Backend %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        logger.warning("%s", str(e))

    if settings.database_disabled:
        logger.warning("DATABASE_DISABLED=true: serving fixture data, no store is used")
    else:
        try:
            await init_database()
        except Exception:
            logger.critical("Relational schema bootstrap failed; aborting startup", exc_info=True)
            raise

        if settings.mongo_enabled:
            try:
                await init_document_store()
            except Exception as e:
                logger.error("Document store bootstrap failed, chat documents unavailable: %s", str(e))

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Teamspace Backend shutting down...")
    await dispose_engine()
    close_document_store()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

# Most specific first; the first isinstance match wins
ERROR_MAP: Tuple[Tuple[Type[TeamspaceError], int, str], ...] = (
    (ValidationError, 400, "validation_error"),
    (AuthenticationError, 401, "authentication_error"),
    (PermissionDeniedError, 403, "permission_denied"),
    (NotFoundError, 404, "not_found"),
    (ConflictError, 409, "conflict"),
    (DatabaseError, 500, "server_error"),
)


def error_body(error: str, message: str, details: Optional[Dict] = None) -> Dict:
    body = {"error": error, "message": message, "request_id": request_id_var.get()}
    if details:
        body["details"] = details
    return body


def describe_request_errors(exc: RequestValidationError) -> str:
    """A readable one-liner for the first problem, e.g. "Invalid conversation id"."""
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    loc = [str(part) for part in errors[0].get("loc", ())]
    if len(loc) >= 2 and loc[0] == "path":
        return f"Invalid {loc[-1].replace('_', ' ')}"
    if loc and loc[0] == "body" and len(loc) == 1:
        return "Request body must be a JSON object"
    return f"Invalid {'.'.join(loc[1:]) or 'request'}: {errors[0].get('msg', 'invalid value')}"


def register_exception_handlers(app: FastAPI) -> None:
    """
    Maps the exception hierarchy to status codes and the shared error body
    {error, message, details?, request_id}.

    5xx bodies are always generic; the detail goes to the server log only.
    """

    @app.exception_handler(TeamspaceError)
    async def handle_teamspace_error(request: Request, exc: TeamspaceError):
        status, code = 500, "server_error"
        for exc_type, mapped_status, mapped_code in ERROR_MAP:
            if isinstance(exc, exc_type):
                status, code = mapped_status, mapped_code
                break

        if status >= 500:
            logger.error("%s: %s | Context: %s", type(exc).__name__, exc.message, exc.context)
            return JSONResponse(
                status_code=status,
                content=error_body(code, "An internal error occurred. Please try again later."),
            )

        logger.info("%s %s -> %d %s", request.method, request.url.path, status, exc.message)
        details = exc.context if isinstance(exc, ValidationError) else None
        return JSONResponse(status_code=status, content=error_body(code, exc.message, details))

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        """Malformed path/query/body; reported as 400 like every other input problem."""
        return JSONResponse(
            status_code=400,
            content=error_body(
                "validation_error",
                describe_request_errors(exc),
                {"errors": [
                    {"loc": list(e.get("loc", ())), "msg": e.get("msg")} for e in exc.errors()
                ]},
            ),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error("Unexpected error: %s", str(exc), exc_info=True)
        # Served by ServerErrorMiddleware, outside RequestIDMiddleware
        request_id = request_id_var.get()
        return JSONResponse(
            status_code=500,
            content=error_body(
                "internal_server_error",
                "An unexpected error occurred. Please try again or contact support.",
            ),
            headers={"X-Request-ID": request_id} if request_id else None,
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="Teamspace API",
        description=(
            "Team workspace backend: accounts, notes, team roster, calendar events "
            "and team messaging."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(auth.router)
    app.include_router(notes.router)
    app.include_router(teams.router)
    app.include_router(events.router)
    app.include_router(messaging.router)
    app.include_router(health.router)

    return app


# ── Application Instance ─────────────────────────────────────────────────
app = create_app()
