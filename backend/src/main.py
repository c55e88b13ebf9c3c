"""UAE Trails Backend - Main FastAPI Application

Multi-tenant outdoor events platform: visitors browse hiking and camping
events and request to join; organizers run events; platform admins curate
locations and organizers.

This module creates and configures the main FastAPI application, including:
- All API routers (auth, catalog, me, organizer, admin, audit, media)
- Middleware (trace id correlation, security headers, body size limit, CORS)
- Exception handlers producing the JSON error envelope
- Health and observability endpoints
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import DataError, IntegrityError, NoResultFound
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import get_settings
from errors import ApiError, error_body, internal_error_body

# Observability
from observability.logging_config import configure_logging
from observability.middleware import BodySizeLimitMiddleware, SecurityHeadersMiddleware, TraceIDMiddleware
from observability.router import router as observability_router
from observability.trace_id import TRACE_ID_HEADER, get_trace_id

# Routers
from admin.router import router as admin_router
from audit.router import router as audit_router
from auth.router import router as auth_router
from catalog.router import router as catalog_router
from media.router import router as media_router
from organizer.router import router as organizer_router
from users.router import router as users_router

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"
LOCAL_ORIGIN_REGEX = r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$"

DB_ERROR_CODES = {
    IntegrityError: "db_integrity_error",
    DataError: "db_data_error",
    NoResultFound: "db_no_result_found",
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    settings = get_settings()
    logger.info("UAE Trails API starting up...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")

    yield

    logger.info("UAE Trails API shutting down...")


def _trace_id(request: Request) -> str:
    return getattr(request.state, "trace_id", None) or get_trace_id()


def _error_response(request: Request, status_code: int, code: str, message: str, details=None) -> JSONResponse:
    trace_id = _trace_id(request)
    return JSONResponse(
        status_code=status_code,
        content=error_body(code, message, trace_id, details),
        headers={TRACE_ID_HEADER: trace_id},
    )


# =============================================================================
# EXCEPTION HANDLERS
# =============================================================================

async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
    return _error_response(request, exc.status_code, exc.code, exc.message, exc.details)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle Pydantic validation errors.

    Returns 400 with one issue per failing field.
    """
    issues = [
        {
            "path": ".".join(str(part) for part in error.get("loc", ())),
            "message": error.get("msg", ""),
            "type": error.get("type", ""),
        }
        for error in exc.errors()
    ]
    logger.warning(
        f"Validation error on {request.method} {request.url.path}",
        extra={"errors": issues}
    )
    return _error_response(
        request,
        status.HTTP_400_BAD_REQUEST,
        "validation_error",
        "Request validation failed.",
        {"issues": issues},
    )


async def database_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle known database errors.

    Logs the full error but returns a generic message to prevent
    information leakage.
    """
    logger.warning(
        f"Database error on {request.method} {request.url.path}",
        exc_info=exc
    )
    code = next(
        (value for exc_type, value in DB_ERROR_CODES.items() if isinstance(exc, exc_type)),
        "db_error",
    )
    return _error_response(request, status.HTTP_400_BAD_REQUEST, code, "Database request failed.")


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        return _error_response(request, exc.status_code, "not_found", "Resource not found.")
    if exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
        return _error_response(request, exc.status_code, "method_not_allowed", "Method not allowed.")
    return _error_response(request, exc.status_code, "http_error", str(exc.detail))


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last resort for failures raised outside TraceIDMiddleware.

    Route failures are already answered there, inside the CORS and security
    header layers. Full details are logged but not exposed to the client.
    """
    logger.error(
        f"Unhandled exception on {request.method} {request.url.path}",
        exc_info=exc
    )
    trace_id = _trace_id(request)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=internal_error_body(trace_id),
        headers={TRACE_ID_HEADER: trace_id},
    )


# =============================================================================
# APPLICATION FACTORY
# =============================================================================

def create_app() -> FastAPI:
    """Build the configured FastAPI application."""
    settings = get_settings()
    configure_logging(level=settings.LOG_LEVEL, json_format=settings.LOG_JSON)

    app = FastAPI(
        title="UAE Trails API",
        description="Multi-tenant hiking and camping events platform",
        version="0.1.0",
        docs_url="/api/docs",
        redoc_url=None,
        openapi_url="/api/openapi.json",
        lifespan=lifespan,
    )

    # add_middleware wraps the stack, so the last one added runs first:
    # CORS -> security headers -> trace id -> body size limit -> routes
    app.add_middleware(BodySizeLimitMiddleware, max_body_bytes=settings.MAX_BODY_BYTES)
    app.add_middleware(TraceIDMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_origin_regex=None if settings.is_production else LOCAL_ORIGIN_REGEX,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[TRACE_ID_HEADER],
    )

    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    for exc_type in DB_ERROR_CODES:
        app.add_exception_handler(exc_type, database_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    # Observability (health, ready, metrics)
    app.include_router(observability_router)

    app.include_router(auth_router, prefix=API_PREFIX)
    app.include_router(catalog_router, prefix=API_PREFIX)
    app.include_router(users_router, prefix=API_PREFIX)
    app.include_router(organizer_router, prefix=API_PREFIX)
    app.include_router(audit_router, prefix=API_PREFIX)
    app.include_router(admin_router, prefix=API_PREFIX)
    app.include_router(media_router, prefix=API_PREFIX)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=settings.PORT,
        reload=not settings.is_production,
        log_level=settings.LOG_LEVEL.lower(),
    )
