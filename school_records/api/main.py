from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Optional
from uuid import uuid4

from fastapi import APIRouter, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from school_records.core.errors import PermissionDenied, ValidationError
from school_records.core.logging import actor_id_var, actor_role_var, configure_logging, correlation_id_var
from school_records.core.settings import get_app_settings
from school_records.db.bootstrap import bootstrap
from school_records.db.run_migrations import main as run_alembic
from school_records.db.session import dispose_engine, get_session_maker
from school_records.db.store import RecordStore
from school_records.schemas.common import ErrorInfo, ErrorResponse, MessageResponse

# Routers
from school_records.api.routes.assignments import router as assignments_router
from school_records.api.routes.courses import router as courses_router
from school_records.api.routes.dashboard import router as dashboard_router
from school_records.api.routes.departments import router as departments_router
from school_records.api.routes.grades import router as grades_router
from school_records.api.routes.reports import router as reports_router
from school_records.api.routes.schedules import router as schedules_router
from school_records.api.routes.sessions import router as sessions_router
from school_records.api.routes.users import router as users_router

# Configure structured logging once at import
configure_logging(get_app_settings().LOG_LEVEL)
logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "Health", "description": "Liveness probe."},
    {"name": "Sessions", "description": "Login, logout, current session and bearer tokens."},
    {"name": "Users", "description": "User administration and role-projected user reads."},
    {"name": "Departments", "description": "School departments."},
    {"name": "Courses", "description": "Courses per year of study."},
    {"name": "Assignments", "description": "Assignments, broadcast or per student, and completion."},
    {"name": "Grades", "description": "Grades with percentage and five-point derivations."},
    {"name": "Schedules", "description": "Timetable entries and the weekly view."},
    {"name": "Dashboard", "description": "Role-specific summary counters."},
    {"name": "Reports", "description": "Exportable grade reports (CSV/Excel/PDF)."},
]


def _build_error_response(
    request: Request,
    status_code: int,
    error_type: str,
    message: str,
    details: Any | None = None,
) -> JSONResponse:
    """Build a standardized ErrorResponse JSONResponse."""
    ts = datetime.now(tz=timezone.utc)
    corr = getattr(request.state, "correlation_id", None)
    err = ErrorResponse(
        status=status_code,
        error=ErrorInfo(type=error_type, message=message, details=details),
        correlation_id=corr,
        path=request.url.path,
        method=request.method,
        timestamp=ts,
    )
    return JSONResponse(status_code=status_code, content=err.model_dump(mode="json"))


def _register_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """
        Global handler for HTTPException to produce a standardized error envelope.
        """
        detail = exc.detail if isinstance(exc.detail, str) else "HTTP Error"
        return _build_error_response(
            request=request,
            status_code=exc.status_code,
            error_type="http_error",
            message=str(detail),
            details=None if isinstance(exc.detail, str) else exc.detail,
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """
        Request validation errors (missing or malformed fields) are client errors: 400.
        """
        return _build_error_response(
            request=request,
            status_code=400,
            error_type="validation_error",
            message="Request validation failed",
            details=jsonable_encoder(exc.errors()),
        )

    @app.exception_handler(ValidationError)
    async def records_validation_handler(request: Request, exc: ValidationError):
        return _build_error_response(
            request=request,
            status_code=400,
            error_type=exc.error_type,
            message=exc.message,
            details=exc.details,
        )

    @app.exception_handler(PermissionDenied)
    async def permission_denied_handler(request: Request, exc: PermissionDenied):
        return _build_error_response(
            request=request,
            status_code=403,
            error_type=exc.error_type,
            message=exc.message,
            details=exc.details,
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        """
        Catch-all handler to avoid leaking stack traces and to return a structured error.
        """
        logger.exception("Unhandled error processing request")
        return _build_error_response(
            request=request,
            status_code=500,
            error_type="internal_error",
            message="An unexpected error occurred",
            details=None,
        )


# PUBLIC_INTERFACE
def create_app(store: Optional[RecordStore] = None) -> FastAPI:
    """
    Build the FastAPI application.

    When store is given (tests, embedding) it is used as is and migrations are
    skipped; otherwise the store is built on startup from DATABASE_URL after
    running Alembic migrations.
    """
    settings = get_app_settings()
    app = FastAPI(
        title=settings.APP_NAME,
        description=settings.APP_DESCRIPTION,
        version=settings.APP_VERSION,
        openapi_tags=openapi_tags,
    )
    app.state.store = store

    # CORS - avoid wildcard with credentials
    cors_allow_credentials = settings.CORS_ALLOW_CREDENTIALS
    if settings.CORS_ORIGINS == ["*"] and cors_allow_credentials:
        logger.warning("CORS_ALLOW_CREDENTIALS=True with '*' origins is not permitted; disabling credentials.")
        cors_allow_credentials = False

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=cors_allow_credentials,
        allow_methods=settings.CORS_ALLOW_METHODS,
        allow_headers=settings.CORS_ALLOW_HEADERS,
    )

    @app.middleware("http")
    async def request_context_middleware(request: Request, call_next):
        """
        Enrich request context with a correlation_id for logging and error responses.
        Adds 'X-Correlation-ID' to every response.
        """
        corr = request.headers.get("X-Correlation-ID") or request.headers.get("X-Request-ID") or str(uuid4())
        token_corr = correlation_id_var.set(corr)
        token_actor = actor_id_var.set(None)
        token_role = actor_role_var.set(None)
        request.state.correlation_id = corr

        logger.info("Incoming request %s %s", request.method, request.url.path)
        try:
            response = await call_next(request)
        finally:
            correlation_id_var.reset(token_corr)
            actor_id_var.reset(token_actor)
            actor_role_var.reset(token_role)

        response.headers["X-Correlation-ID"] = corr
        return response

    _register_handlers(app)

    @app.on_event("startup")
    async def on_startup() -> None:
        """
        Prepare storage: migrate, attach the record store and bootstrap the demo
        school when storage was never initialized.
        """
        if app.state.store is None:
            if settings.RUN_MIGRATIONS_ON_STARTUP:
                logger.info("Running Alembic migrations: upgrade head")
                # env.py drives its own event loop
                await asyncio.to_thread(run_alembic, ["upgrade", "head"])
                logger.info("Migrations completed.")
            app.state.store = RecordStore(get_session_maker())

        if settings.AUTO_BOOTSTRAP:
            await bootstrap(app.state.store)

    @app.on_event("shutdown")
    async def on_shutdown() -> None:
        await dispose_engine()

    # Build API v1 router and include sub-routers
    api_v1 = APIRouter(prefix="/api/v1")

    # PUBLIC_INTERFACE
    @api_v1.get(
        "/health",
        response_model=MessageResponse,
        summary="Health Check",
        tags=["Health"],
    )
    def health_check() -> MessageResponse:
        """Basic liveness health check endpoint."""
        return MessageResponse(message="Healthy")

    api_v1.include_router(sessions_router)
    api_v1.include_router(users_router)
    api_v1.include_router(departments_router)
    api_v1.include_router(courses_router)
    api_v1.include_router(assignments_router)
    api_v1.include_router(grades_router)
    api_v1.include_router(schedules_router)
    api_v1.include_router(dashboard_router)
    api_v1.include_router(reports_router)

    app.include_router(api_v1)
    return app


app = create_app()
