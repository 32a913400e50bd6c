"""
Security Middleware for the NeuroGuide API.

- Security headers on every response (HSTS in production only)
- Early rejection of oversized JSON upload bodies, before parsing
- Per-request timeout
"""

import asyncio
import logging
from typing import Dict, Optional

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from .constants import PDF_MIME_TYPE
from .exceptions import FileTooLargeError

logger = logging.getLogger(__name__)

# =============================================================================
# Security Headers Middleware
# =============================================================================

BASE_SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Permissions-Policy": "geolocation=(), microphone=(), camera=(), payment=(), usb=()",
}

# The API only serves JSON and PDFs; nothing it returns should load sub-resources
API_CSP = "default-src 'none'; frame-ancestors 'none'; base-uri 'none'; form-action 'none'"


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Add security headers to all responses.

    PDF responses skip X-Frame-Options and the CSP so browsers' built-in
    viewers can render them inline.
    """

    def __init__(self, app: ASGIApp, environment: str = "development"):
        super().__init__(app)
        self.environment = environment
        self.is_production = environment == "production"

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)

        is_pdf = response.headers.get("content-type", "").startswith(PDF_MIME_TYPE)
        for header, value in BASE_SECURITY_HEADERS.items():
            if is_pdf and header == "X-Frame-Options":
                continue
            response.headers.setdefault(header, value)

        if not is_pdf:
            response.headers.setdefault("Content-Security-Policy", API_CSP)

        if self.is_production:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

        return response


# =============================================================================
# Upload Size Limit Middleware
# =============================================================================

class UploadSizeLimitMiddleware(BaseHTTPMiddleware):
    """
    Reject POSTs to upload routes whose declared Content-Length exceeds their limit.

    Bodies without a Content-Length (chunked) pass through; the route's own
    bounded read still enforces the file ceiling.
    """

    def __init__(self, app: ASGIApp, limits: Optional[Dict[str, int]] = None):
        super().__init__(app)
        self.limits = limits or {}

    async def dispatch(self, request: Request, call_next):
        limit = self.limits.get(request.url.path.rstrip("/"))
        if limit is not None and request.method == "POST":
            declared = request.headers.get("content-length")
            if declared and declared.isdigit() and int(declared) > limit:
                error = FileTooLargeError(size=int(declared))
                logger.warning(
                    f"Rejected upload to {request.url.path}: Content-Length {declared} exceeds {limit}"
                )
                return JSONResponse(status_code=error.status_code, content={"detail": error.message})

        return await call_next(request)


# =============================================================================
# Request Timeout Middleware
# =============================================================================

class RequestTimeoutMiddleware(BaseHTTPMiddleware):
    """Answer 504 when a request runs longer than ``timeout_seconds``."""

    def __init__(self, app: ASGIApp, timeout_seconds: float = 120.0):
        super().__init__(app)
        self.timeout_seconds = timeout_seconds

    async def dispatch(self, request: Request, call_next):
        try:
            return await asyncio.wait_for(call_next(request), timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            logger.error(f"Request timed out after {self.timeout_seconds}s: {request.method} {request.url.path}")
            return JSONResponse(status_code=504, content={"detail": "Request timed out"})
