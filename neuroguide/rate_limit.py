"""
Rate limiting for credential endpoints (slowapi).

Disabled entirely in test mode so suites can register many users.
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from .config import settings

logger = logging.getLogger(__name__)

AUTH_RATE_LIMIT = settings.auth_rate_limit

limiter = Limiter(key_func=get_remote_address, enabled=not settings.testing)


def _retry_after_seconds(detail: str) -> int:
    detail = detail.lower()
    if "hour" in detail:
        return 3600
    if "second" in detail:
        return 1
    return 60


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """429 with a Retry-After header."""
    retry_after = _retry_after_seconds(str(exc.detail))
    logger.warning(f"Rate limit exceeded for {get_remote_address(request)} on {request.url.path}")
    return JSONResponse(
        status_code=429,
        content={
            "detail": f"Too many attempts. Please wait {retry_after} seconds before retrying.",
            "retryAfterSeconds": retry_after,
        },
        headers={"Retry-After": str(retry_after)},
    )
