"""
FastAPI Application - Folio blog CMS API
"""

from __future__ import annotations

import logging
import secrets
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from pathlib import Path

from asgi_correlation_id import CorrelationIdMiddleware
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from folio.config import settings
from folio.database import AsyncSessionLocal, init_database
from folio.errors import (
    ApiError,
    BadRequestError,
    ConflictError,
    ErrorCode,
    InternalError,
    NotFoundError,
    TooManyRequestsError,
    UnauthorizedError,
    ValidationFailedError,
)
from folio.middleware.cors import CORSHeadersMiddleware
from folio.middleware.errors import UnhandledErrorMiddleware
from folio.middleware.security import SecurityHeadersMiddleware
from folio.models import admin, blog  # noqa: F401 - needed for metadata
from folio.observability.logging import configure_logging
from folio.observability.metrics import MetricsMiddleware, metrics_response
from folio.routers.admin import router as admin_router
from folio.routers.articles import router as articles_router
from folio.routers.auth import router as auth_router
from folio.routers.taxonomy import router as taxonomy_router
from folio.routers.upload import router as upload_router
from folio.security import (
    ChunkedBodyLimitMiddleware,
    authorize,
    is_protected_path,
    limiter,
)
from folio.security.rate_limit import retry_after_seconds
from folio.services.auth_service import ensure_admin
from folio.staticfiles import CachedStaticFiles
from folio.utils.responses import api_error_response, error_response, success

logger = logging.getLogger(__name__)


# ==========================================
# Application Lifespan
# ==========================================
@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting Folio API %s", settings.app_version)
    await init_database()
    async with AsyncSessionLocal() as session:
        await ensure_admin(session, settings.admin_username, settings.admin_password)
    logger.info("Application ready")
    yield
    logger.info("Shutting down application")


configure_logging(settings.log_level.upper(), json_logs=settings.log_json)


# ==========================================
# Exception handlers (define BEFORE registration)
# ==========================================
_STATUS_CODES = {
    400: ErrorCode.BAD_REQUEST,
    401: ErrorCode.UNAUTHORIZED,
    403: ErrorCode.FORBIDDEN,
    404: ErrorCode.NOT_FOUND,
    409: ErrorCode.CONFLICT,
    413: ErrorCode.PAYLOAD_TOO_LARGE,
    429: ErrorCode.TOO_MANY_REQUESTS,
}


def _gate_protected(request: Request):
    """Return a 401 response for unauthenticated calls to admin paths.

    Error handlers call this first so a caller without a token learns
    nothing about which admin routes exist or what they accept.
    """
    if not is_protected_path(request.url.path):
        return None
    try:
        authorize(request.headers.get("authorization"), settings.secret_key)
    except UnauthorizedError as exc:
        return api_error_response(exc)
    return None


def _field_name(loc: tuple) -> str | None:
    names = [str(part) for part in loc[1:] if isinstance(part, str)]
    return names[-1] if names else None


def _field_message(error: dict, field: str) -> str:
    if error.get("type") == "missing":
        return f"{field[:1].upper()}{field[1:]} is required"
    message = str(error.get("msg", "Invalid value"))
    return message.removeprefix("Value error, ")


async def api_error_handler(request: Request, exc: ApiError):
    return api_error_response(exc)


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    denied = _gate_protected(request)
    if denied is not None:
        return denied

    errors = exc.errors()
    # Ids past the 64-bit range cannot name a record, like non-digit ids
    if any(error.get("loc", ())[:1] == ("path",) for error in errors):
        return api_error_response(NotFoundError("Endpoint not found"))

    details: dict[str, str] = {}
    for error in errors:
        field = _field_name(tuple(error.get("loc", ())))
        if error.get("type") == "json_invalid" or field is None:
            return api_error_response(BadRequestError("Invalid JSON body"))
        details.setdefault(field, _field_message(error, field))
    message = next(iter(details.values()), None)
    return api_error_response(ValidationFailedError(message, details=details))


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code in (404, 405):
        denied = _gate_protected(request)
        if denied is not None:
            return denied
        return api_error_response(NotFoundError("Endpoint not found"))

    code = _STATUS_CODES.get(exc.status_code, ErrorCode.INTERNAL_ERROR)
    return error_response(
        code, str(exc.detail), exc.status_code, headers=getattr(exc, "headers", None)
    )


async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    retry_after = retry_after_seconds(request, exc)
    logger.warning("Rate limit exceeded on %s", request.url.path)
    return api_error_response(
        TooManyRequestsError(
            "Too many requests. Please try again later.", retry_after=retry_after
        )
    )


async def integrity_error_handler(request: Request, exc: IntegrityError):
    logger.info("Constraint violation on %s: %s", request.url.path, exc.orig)
    return api_error_response(
        ConflictError(
            "Request conflicts with existing data or references a missing record"
        )
    )


async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Database error on %s", request.url.path)
    return api_error_response(InternalError())


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s", request.url.path)
    return api_error_response(InternalError())


# ==========================================
# FastAPI Application
# ==========================================
app = FastAPI(
    title="Folio",
    description="Blog CMS API",
    version=settings.app_version,
    lifespan=lifespan,
    docs_url=None if settings.is_production else "/docs",
    redoc_url=None if settings.is_production else "/redoc",
    openapi_url=None if settings.is_production else "/openapi.json",
)
# Order (outermost first): correlation id, security headers, metrics, CORS,
# the unhandled-error catcher, then the chunked body ceiling
app.add_middleware(
    ChunkedBodyLimitMiddleware,
    max_bytes=settings.max_request_body_bytes,
    path_limits={"/api/upload": settings.max_upload_request_bytes},
)
app.add_middleware(UnhandledErrorMiddleware)
app.add_middleware(
    CORSHeadersMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
    max_age=settings.cors_max_age,
    allow_credentials=settings.cors_allow_credentials,
)
app.add_middleware(MetricsMiddleware)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(CorrelationIdMiddleware, header_name="X-Request-ID")
app.state.limiter = limiter
app.add_exception_handler(ApiError, api_error_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(IntegrityError, integrity_error_handler)
app.add_exception_handler(SQLAlchemyError, database_error_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

# Uploaded images (local backend only; S3 is served by the bucket/CDN)
if settings.storage_backend == "local":
    Path(settings.upload_dir).mkdir(parents=True, exist_ok=True)
    app.mount(
        settings.upload_url_prefix,
        CachedStaticFiles(directory=settings.upload_dir),
        name="uploads",
    )


# ==========================================
# Health
# ==========================================
@app.get("/api/health", tags=["system"], summary="Health check")
async def health_check():
    return success(
        {
            "status": "healthy",
            "version": app.version,
            "timestamp": datetime.now(UTC).isoformat(),
        }
    )


# ==========================================
# Metrics (Protected with HTTP Basic Auth)
# ==========================================
security = HTTPBasic(auto_error=False)


def verify_metrics_auth(
    credentials: HTTPBasicCredentials | None = Depends(security),
) -> str | None:
    """Verify HTTP Basic Auth credentials for the metrics endpoint."""
    if not settings.metrics_password:
        # No password configured: metrics are open
        return credentials.username if credentials else None

    if credentials is not None:
        correct_username = secrets.compare_digest(
            credentials.username, settings.metrics_username
        )
        correct_password = secrets.compare_digest(
            credentials.password, settings.metrics_password
        )
        if correct_username and correct_password:
            return credentials.username

    raise UnauthorizedError(
        "Invalid credentials", headers={"WWW-Authenticate": "Basic"}
    )


@app.get("/metrics", include_in_schema=False)
def metrics(_: str | None = Depends(verify_metrics_auth)):
    """
    Prometheus metrics endpoint (protected with HTTP Basic Auth).

    Set METRICS_USERNAME and METRICS_PASSWORD environment variables.
    """
    return metrics_response()


# ==========================================
# Routers
# ==========================================
app.include_router(auth_router)
app.include_router(articles_router)
app.include_router(taxonomy_router)
app.include_router(admin_router)
app.include_router(upload_router)
