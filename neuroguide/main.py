"""
FastAPI backend for the NeuroGuide study planner.

This module builds the application: database resource, middleware, error
handlers and router mounting. All endpoints live in the routers/ package and
are mounted under /api.

Run with:
    uvicorn neuroguide.main:app --port 5000
"""

import logging
import time
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from .blob_storage import InlinePayloadStore
from .config import Settings, settings as default_settings
from .constants import API_PREFIX, APP_VERSION, MAX_UPLOAD_SIZE_BYTES, MULTIPART_OVERHEAD_BYTES
from .database import Database
from .exceptions import NeuroGuideError, RequestDataError
from .rate_limit import limiter, rate_limit_exceeded_handler
from .routers import (
    auth,
    bookmarks,
    notes,
    schedule,
    search,
    study_guides,
    study_progress,
    topics,
    videos,
)
from .security_middleware import (
    RequestTimeoutMiddleware,
    SecurityHeadersMiddleware,
    UploadSizeLimitMiddleware,
)

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


# =============================================================================
# Error Handlers
# =============================================================================

async def neuroguide_error_handler(request: Request, exc: NeuroGuideError) -> JSONResponse:
    content = {"detail": exc.message}
    if isinstance(exc, RequestDataError) and exc.errors:
        content["errors"] = exc.errors
    if exc.status_code >= 500:
        logger.error(f"{exc.__class__.__name__} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=content)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Request validation failures are 400 with per-field messages."""
    return await neuroguide_error_handler(request, RequestDataError.from_validation_errors(exc.errors()))


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log everything server side; the client only ever sees a generic message."""
    request_id = getattr(request.state, "request_id", None)
    logger.error(
        f"Unhandled error on {request.method} {request.url.path} (request {request_id}): {exc}",
        exc_info=exc,
    )
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


# =============================================================================
# Application Factory
# =============================================================================

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build a NeuroGuide application.

    Each call owns a fresh Database; tests pass their own Settings to get an
    isolated in-memory database.
    """
    settings = settings or default_settings
    logging.basicConfig(level=getattr(logging, settings.log_level, logging.INFO), format=LOG_FORMAT)

    database = Database(settings.database_url, echo=settings.database_echo)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        database.init_db()
        logger.info(f"NeuroGuide API ready ({settings.environment} environment)")
        yield
        database.dispose()
        logger.info("Application shutting down")

    app = FastAPI(
        title="NeuroGuide API",
        description="Study planner: topics, PDF study guides, videos, schedule, notes and bookmarks",
        version=APP_VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.database = database
    app.state.payload_store = InlinePayloadStore(
        compression_level=settings.compression_level,
        legacy_root=Path(settings.legacy_upload_dir),
    )

    # Rate limiting (disabled in test mode)
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

    app.add_exception_handler(NeuroGuideError, neuroguide_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    # =========================================================================
    # Middleware (last added runs first)
    # =========================================================================

    app.add_middleware(RequestTimeoutMiddleware, timeout_seconds=settings.request_timeout_seconds)
    app.add_middleware(
        UploadSizeLimitMiddleware,
        # JSON route only; multipart uploads are bounded by read_pdf_upload after the MIME check.
        # base64 inflates the JSON body by a third
        limits={f"{API_PREFIX}/study-guides": MAX_UPLOAD_SIZE_BYTES * 4 // 3 + MULTIPART_OVERHEAD_BYTES},
    )
    app.add_middleware(SecurityHeadersMiddleware, environment=settings.environment)

    @app.middleware("http")
    async def add_request_context(request: Request, call_next):
        """Tag each request with an ID and log its outcome and duration."""
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id
        started = time.perf_counter()

        response = await call_next(request)

        elapsed_ms = (time.perf_counter() - started) * 1000
        response.headers["X-Request-ID"] = request_id
        if request.url.path.startswith(API_PREFIX):
            logger.info(f"{request.method} {request.url.path} {response.status_code} in {elapsed_ms:.0f}ms")
        return response

    origins = settings.cors_origins
    if origins == ["*"]:
        logger.warning(
            "CORS is set to allow ALL origins (*). "
            "Set NEUROGUIDE_ALLOWED_ORIGINS to specific domains in production."
        )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=origins != ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Content-Disposition"],
    )

    # =========================================================================
    # Mount Routers
    # =========================================================================

    for module in (auth, topics, study_guides, videos, schedule, bookmarks, notes, study_progress, search):
        app.include_router(module.router, prefix=API_PREFIX)

    @app.get(f"{API_PREFIX}/health", tags=["health"])
    def health_check(request: Request):
        """Liveness plus a database connectivity probe."""
        db_health = request.app.state.database.check_health()
        return {
            "status": "ok" if db_health["connected"] else "degraded",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "version": APP_VERSION,
            "database": db_health,
        }

    # Built frontend, when configured, is served for every non-API path
    if settings.static_dir:
        static_path = Path(settings.static_dir)
        if static_path.is_dir():
            app.mount("/", StaticFiles(directory=str(static_path), html=True), name="static")
            logger.info(f"Serving frontend from {static_path}")
        else:
            logger.warning(f"NEUROGUIDE_STATIC_DIR {static_path} does not exist; frontend not served")

    return app


app = create_app()
