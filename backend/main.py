# ruff: noqa: E402
# E402 disabled: load_dotenv() must run before other imports for Sentry DSN

import os
import time
from collections.abc import Awaitable, Callable
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

import sentry_sdk
from fastapi import Depends, FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from loguru import logger
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.middleware.base import BaseHTTPMiddleware

import models.schemas as schemas
from core.correlation import (
    generate_correlation_id,
    get_correlation_id,
    set_correlation_id,
)
from core.logging_config import configure_logging
from core.sentry_config import init_sentry
from helpers.rate_limiter import limiter
from helpers.security_headers import SecurityHeadersMiddleware
from helpers.time_utils import format_iso8601
from models.config import settings
from models.exceptions import (
    AlreadyExistsException,
    AuthenticationException,
    DomainException,
    NotFoundException,
    PermissionDeniedException,
    ValidationException,
)
from repositories.database import DatabaseHandle, get_store
from routers import (
    auth_router,
    notifications_router,
    posts_router,
    search_router,
    topics_router,
    users_router,
)

API_PREFIX = "/api/v1"

# Initialize Sentry BEFORE app creation
init_sentry()

# Configure logging with Loguru
configure_logging(os.getenv("ENVIRONMENT", "development"))


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler.

    - Connect to the database (with retries) and keep the handle on
      ``app.state.store``.
    - Optionally create tables when `AUTO_CREATE_DB` is enabled (development).
    - Dispose of the connection pool on shutdown.
    """
    store = DatabaseHandle.connect(
        settings.DATABASE_URL,
        retries=settings.DB_CONNECT_RETRIES,
        backoff=settings.DB_CONNECT_BACKOFF_SECONDS,
    )
    app.state.store = store

    if settings.AUTO_CREATE_DB:
        logger.info(
            "AUTO_CREATE_DB enabled; creating database tables via SQLAlchemy create_all()"
        )
        store.create_schema()
    else:
        logger.info("AUTO_CREATE_DB disabled; skipping automatic create_all()")

    logger.info(f"API started in {settings.ENVIRONMENT} mode")
    try:
        yield
    finally:
        store.dispose()
        logger.info("Database connection closed")


app = FastAPI(title="CivicLens API", lifespan=lifespan)

# Attach rate limiter to app
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)  # type: ignore[arg-type]


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Per-request bookkeeping.

    Adopts the caller's ``X-Correlation-ID`` (or mints one) for logs, Sentry
    and the response, and logs each request with its duration. Requests
    slower than ``SLOW_REQUEST_THRESHOLD`` are logged as warnings.
    """

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        correlation_id = (
            request.headers.get("X-Correlation-ID") or generate_correlation_id()
        )
        set_correlation_id(correlation_id)
        sentry_sdk.set_tag("correlation_id", correlation_id)

        started = time.perf_counter()
        route = f"{request.method} {request.url.path}"
        try:
            response = await call_next(request)
        except Exception:
            elapsed = time.perf_counter() - started
            logger.error(f"{route} -> unhandled error in {elapsed:.3f}s")
            raise
        elapsed = time.perf_counter() - started

        log = (
            logger.warning
            if elapsed > settings.SLOW_REQUEST_THRESHOLD
            else logger.info
        )
        log(f"{route} -> {response.status_code} in {elapsed:.3f}s")

        response.headers["X-Correlation-ID"] = correlation_id
        response.headers["X-Response-Time"] = f"{elapsed:.3f}s"
        return response


# Last added runs first: CORS, then request context, then security headers
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestContextMiddleware)

# Credentials are needed for the refresh cookie, so origins are always explicit
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Serve uploaded post images and avatars
uploads_dir = Path(settings.UPLOAD_DIR)
(uploads_dir / "avatars").mkdir(parents=True, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=str(uploads_dir)), name="uploads")


# Status code per domain exception family; the most specific class wins
DOMAIN_STATUS: dict[type[DomainException], tuple[int, str]] = {
    NotFoundException: (status.HTTP_404_NOT_FOUND, "Not found"),
    AlreadyExistsException: (status.HTTP_400_BAD_REQUEST, "Already exists"),
    ValidationException: (status.HTTP_400_BAD_REQUEST, "Validation error"),
    PermissionDeniedException: (status.HTTP_403_FORBIDDEN, "Permission denied"),
    AuthenticationException: (status.HTTP_401_UNAUTHORIZED, "Authentication failed"),
}


def _internal_error(correlation_id: str) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error", "correlation_id": correlation_id},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Generic 500; the full traceback goes to the log and to Sentry."""
    correlation_id = get_correlation_id() or generate_correlation_id()

    sentry_sdk.set_tag("correlation_id", correlation_id)
    sentry_sdk.capture_exception(exc)

    # repr() keeps braces in the message away from loguru's formatter
    logger.exception(
        f"Unhandled exception: {exc!r}",
        correlation_id=correlation_id,
        path=str(request.url.path),
        method=request.method,
    )
    return _internal_error(correlation_id)


@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report the first invalid field as a 400 (``body.email: ...``)."""
    correlation_id = get_correlation_id() or generate_correlation_id()
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()))
        message = f"{location}: {first.get('msg', 'Invalid value')}"
    else:
        message = "Invalid request"

    logger.warning(
        f"Request validation failed: {message}",
        correlation_id=correlation_id,
        path=str(request.url.path),
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": message, "correlation_id": correlation_id},
    )


@app.exception_handler(DomainException)
async def domain_exception_handler(
    request: Request, exc: DomainException
) -> JSONResponse:
    """
    Map a domain exception to its HTTP status.

    Authentication failures add the ``error`` code (so clients can tell an
    expired session from a bad credential) and a ``WWW-Authenticate`` header.
    Domain exceptions outside the known families are treated as a 500.
    """
    sentry_sdk.set_tag("correlation_id", exc.correlation_id)
    sentry_sdk.set_tag("exception_type", exc.__class__.__name__)

    mapped = next(
        (DOMAIN_STATUS[cls] for cls in type(exc).__mro__ if cls in DOMAIN_STATUS),
        None,
    )
    if mapped is None:
        sentry_sdk.capture_exception(exc)
        logger.error(
            f"Domain error: {exc.message}",
            correlation_id=exc.correlation_id,
            exception_type=exc.__class__.__name__,
            path=str(request.url.path),
        )
        return _internal_error(exc.correlation_id)

    status_code, label = mapped
    logger.warning(
        f"{label}: {exc.message}",
        correlation_id=exc.correlation_id,
        exception_type=exc.__class__.__name__,
        path=str(request.url.path),
    )

    content = {"detail": exc.message, "correlation_id": exc.correlation_id}
    headers = None
    if isinstance(exc, AuthenticationException):
        content["error"] = exc.error_code
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(status_code=status_code, content=content, headers=headers)


app.include_router(auth_router.router, prefix=API_PREFIX)
app.include_router(posts_router.router, prefix=API_PREFIX)
app.include_router(users_router.router, prefix=API_PREFIX)
app.include_router(notifications_router.router, prefix=API_PREFIX)
app.include_router(search_router.router, prefix=API_PREFIX)
app.include_router(topics_router.router, prefix=API_PREFIX)
app.include_router(topics_router.locations_router, prefix=API_PREFIX)


@app.get("/")
def root() -> dict:
    return {"message": "CivicLens API is running"}


@app.get("/health", response_model=schemas.HealthResponse)
def health_check(store: DatabaseHandle = Depends(get_store)) -> schemas.HealthResponse:
    """Liveness plus a ``SELECT 1`` against the database."""
    return schemas.HealthResponse(
        status="ok",
        environment=settings.ENVIRONMENT,
        timestamp=format_iso8601(datetime.now(timezone.utc)),
        database="connected" if store.ping() else "disconnected",
    )
