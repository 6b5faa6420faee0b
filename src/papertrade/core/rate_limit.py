"""Rate limiting for trade endpoints using slowapi."""

import re

from fastapi import Request
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.responses import JSONResponse

from papertrade.core.config import settings

_UNIT_SECONDS = {"second": 1, "minute": 60, "hour": 3600, "day": 86400}


def retry_after_seconds(limit_detail: str) -> int:
    """Derive a Retry-After value from a slowapi limit description.

    Args:
        limit_detail: slowapi detail such as "30 per 1 minute"

    Returns:
        Window length in seconds, 60 when the text cannot be parsed
    """
    match = re.search(r"(\d+)\s+per\s+(\d+)\s+(second|minute|hour|day)", limit_detail)
    if not match:
        return 60
    return int(match.group(2)) * _UNIT_SECONDS[match.group(3)]


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """
    Convert RateLimitExceeded into the application's error response format.

    Args:
        request: The incoming request
        exc: The RateLimitExceeded exception

    Returns:
        429 JSONResponse with retry_after and a Retry-After header
    """
    retry_after = retry_after_seconds(str(exc.detail))
    response = JSONResponse(
        status_code=429,
        content={
            "detail": f"Rate limit exceeded: {exc.detail}",
            "error_code": "RATE_LIMITED",
            "retry_after": retry_after,
        },
    )
    response.headers["Retry-After"] = str(retry_after)
    return response


limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[],  # Each endpoint sets its own limit
    enabled=settings.RATE_LIMIT_ENABLED,
    headers_enabled=False,  # Incompatible with FastAPI response models
)
