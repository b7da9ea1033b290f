"""Exam Scheduling API — FastAPI application entry point.

Features:
- Lifespan context manager: starts the notification dispatcher, probes the
  database on startup, stops the dispatcher and disposes the DB on shutdown
- Structured exception handlers for all domain exceptions
- Request/response logging middleware with request-ID tracing
- Enhanced /health endpoint: checks DB connectivity + dispatcher state
- OpenAPI tags and descriptions for all routers
"""

from __future__ import annotations

import datetime
import logging
import time
import uuid
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from fastapi import FastAPI, HTTPException, Request, Response, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.config import get_settings
from src.exceptions import (
    AuthenticationError,
    ConflictError,
    DatabaseConnectionError,
    NotFoundError,
    PermissionDeniedError,
)
from src.exceptions import ValidationError as DomainValidationError

# ---------------------------------------------------------------------------
# Logging setup  (must happen before routers are imported)
# ---------------------------------------------------------------------------

_settings = get_settings()
logging.basicConfig(
    level=getattr(logging, _settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%S",
)
logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Router and service imports
# ---------------------------------------------------------------------------

from src.api import auth as _auth_module  # noqa: E402
from src.api import circulars as _circulars_module  # noqa: E402
from src.api import departments as _departments_module  # noqa: E402
from src.api import exam_alerts as _exam_alerts_module  # noqa: E402
from src.api import notifications as _notifications_module  # noqa: E402
from src.api import schedules as _schedules_module  # noqa: E402
from src.api import staff as _staff_module  # noqa: E402
from src.api import subjects as _subjects_module  # noqa: E402
from src.database import check_db_connection, dispose_engine  # noqa: E402
from src.services.notifier import (  # noqa: E402
    NotificationDispatcher,
    SharedSubjectNotifier,
)

# Register all ORM models with the declarative base (required for metadata)
import src.models  # noqa: F401, E402

# ---------------------------------------------------------------------------
# Lifespan context manager
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application startup and shutdown lifecycle.

    Startup sequence:
    1. Create the notification dispatcher and start its worker task.
    2. Store it on ``app.state.dispatcher`` for DI.
    3. Probe DB connectivity and log the result (non-fatal at startup).

    Shutdown:
    1. Stop the dispatcher worker.
    2. Dispose the SQLAlchemy connection pool gracefully.
    """
    # --- Startup -----------------------------------------------------------
    logger.info("Exam Scheduling API — starting up (v%s)", _settings.app_version)

    dispatcher = NotificationDispatcher(
        SharedSubjectNotifier(), maxsize=_settings.notification_queue_size
    )
    dispatcher.start()
    app.state.dispatcher = dispatcher

    db_health = await check_db_connection()
    if db_health["status"] == "ok":
        logger.info("Database: OK")
    else:
        logger.warning("Database: DEGRADED — %s", db_health.get("detail", "unknown"))

    logger.info("Startup complete — serving requests")
    yield

    # --- Shutdown ----------------------------------------------------------
    logger.info("Exam Scheduling API — shutting down")
    await dispatcher.stop()
    app.state.dispatcher = None
    try:
        await dispose_engine()
    except Exception as exc:
        logger.warning("Error during engine disposal: %s", exc)
    logger.info("Shutdown complete")


# ---------------------------------------------------------------------------
# FastAPI application
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Exam Scheduling API",
    description=(
        "Coordinates examination dates across departments. Departments that "
        "teach the same subject sit its exam on one shared date, and no "
        "department sits two exams on the same day."
    ),
    version=_settings.app_version,
    debug=_settings.debug,
    lifespan=lifespan,
    openapi_tags=[
        {"name": "health", "description": "System health and readiness checks."},
        {"name": "auth", "description": "Login and the current user."},
        {
            "name": "schedules",
            "description": (
                "Conflict checks and exam date commits. Committing a shared "
                "subject schedules every department that teaches it."
            ),
        },
        {"name": "departments", "description": "Department directory."},
        {"name": "subjects", "description": "Subjects with scheduling status."},
        {"name": "staff", "description": "Staff directory (admin)."},
        {"name": "exam-alerts", "description": "Examination windows."},
        {"name": "circulars", "description": "Printable examination circular."},
        {"name": "notifications", "description": "Shared-subject notices for staff."},
    ],
)

# ---------------------------------------------------------------------------
# CORS middleware
# ---------------------------------------------------------------------------

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # restrict in production
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Request / response logging middleware
# ---------------------------------------------------------------------------


@app.middleware("http")
async def request_logging_middleware(request: Request, call_next: Any) -> Response:
    """Log every HTTP request with method, path, status, and duration.

    A short UUID-derived ``request_id`` is attached to each log line and
    returned as the ``X-Request-ID`` response header.
    """
    request_id = str(uuid.uuid4())[:8]
    t0 = time.monotonic()
    logger.info("[%s] → %s %s", request_id, request.method, request.url.path)

    try:
        response: Response = await call_next(request)
    except Exception as exc:
        elapsed = (time.monotonic() - t0) * 1000
        logger.error(
            "[%s] ✗ %s %s — unhandled after %.1f ms: %s",
            request_id,
            request.method,
            request.url.path,
            elapsed,
            exc,
        )
        raise

    elapsed = (time.monotonic() - t0) * 1000
    logger.info(
        "[%s] ← %s %s — %d (%.1f ms)",
        request_id,
        request.method,
        request.url.path,
        response.status_code,
        elapsed,
    )
    response.headers["X-Request-ID"] = request_id
    return response


# ---------------------------------------------------------------------------
# Structured exception handlers
# ---------------------------------------------------------------------------


@app.exception_handler(DomainValidationError)
async def validation_error_handler(
    request: Request, exc: DomainValidationError
) -> JSONResponse:
    """422 for missing or invalid scheduling input."""
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"error": "validation_failed", "message": str(exc), "field": exc.field},
    )


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    """404 for missing staff, subjects, departments and records."""
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={
            "error": f"{exc.entity.replace(' ', '_')}_not_found",
            "message": str(exc),
            "identifier": str(exc.identifier),
        },
    )


@app.exception_handler(ConflictError)
async def conflict_handler(request: Request, exc: ConflictError) -> JSONResponse:
    """409 for same-day clashes and shared-subject date mismatches."""
    logger.info("ConflictError: %s", exc)
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={
            "error": "schedule_conflict",
            "message": str(exc),
            "pinned_date": exc.pinned_date.isoformat() if exc.pinned_date else None,
            "department": exc.department,
        },
    )


@app.exception_handler(AuthenticationError)
async def authentication_error_handler(
    request: Request, exc: AuthenticationError
) -> JSONResponse:
    """401 for missing, invalid or expired credentials."""
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content={"error": "not_authenticated", "message": str(exc)},
        headers={"WWW-Authenticate": "Bearer"},
    )


@app.exception_handler(PermissionDeniedError)
async def permission_denied_handler(
    request: Request, exc: PermissionDeniedError
) -> JSONResponse:
    """403 for actions outside the user's role."""
    return JSONResponse(
        status_code=status.HTTP_403_FORBIDDEN,
        content={"error": "permission_denied", "message": str(exc), "role": exc.role},
    )


@app.exception_handler(DatabaseConnectionError)
async def database_connection_error_handler(
    request: Request, exc: DatabaseConnectionError
) -> JSONResponse:
    """503 for database connectivity failures."""
    logger.error("DatabaseConnectionError: %s", exc)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"error": "database_unavailable", "message": str(exc)},
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Render FastAPI HTTPExceptions as structured JSON."""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": "http_error",
            "status_code": exc.status_code,
            "detail": exc.detail,
        },
    )


# ---------------------------------------------------------------------------
# Core routes
# ---------------------------------------------------------------------------


@app.get("/", tags=["health"], summary="API root / service info")
async def root() -> dict[str, str]:
    """Return basic service metadata and navigation links."""
    return {
        "service": "Exam Scheduling API",
        "version": _settings.app_version,
        "documentation": "/docs",
        "health": "/health",
        "openapi": "/openapi.json",
    }


@app.get(
    "/health",
    tags=["health"],
    summary="Enhanced system health check",
    description=(
        "Probes database connectivity and reports whether the notification"
        " dispatcher is running. ``status: ok`` means all subsystems are"
        " healthy; ``status: degraded`` means the API is responding but at"
        " least one dependency is unavailable."
    ),
)
async def health_check(request: Request) -> dict[str, Any]:
    """Return current system health including DB + dispatcher status.

    Args:
        request: Used to access ``app.state.dispatcher``.

    Returns:
        Health summary dict with ``status``, ``database``, and ``notifications``.
    """
    db_health = await check_db_connection()

    dispatcher: NotificationDispatcher | None = getattr(
        request.app.state, "dispatcher", None
    )
    notifications = {
        "status": "ok" if dispatcher is not None and dispatcher.running else "stopped"
    }

    overall = (
        "ok"
        if db_health["status"] == "ok" and notifications["status"] == "ok"
        else "degraded"
    )

    return {
        "status": overall,
        "timestamp": datetime.datetime.now(datetime.timezone.utc).isoformat().replace("+00:00", "Z"),
        "version": _settings.app_version,
        "database": db_health,
        "notifications": notifications,
    }


# ---------------------------------------------------------------------------
# Include routers
# ---------------------------------------------------------------------------

app.include_router(_auth_module.router)
app.include_router(_schedules_module.router)
app.include_router(_departments_module.router)
app.include_router(_subjects_module.router)
app.include_router(_staff_module.router)
app.include_router(_exam_alerts_module.router)
app.include_router(_circulars_module.router)
app.include_router(_notifications_module.router)


# ---------------------------------------------------------------------------
# Development entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level=_settings.log_level.lower(),
    )
