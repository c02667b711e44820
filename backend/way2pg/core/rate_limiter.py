"""
Rate Limiting for the Way2PG API
================================
slowapi limiter keyed by authenticated user when known, else client IP.

- Every route: RATE_LIMIT_PER_MINUTE per key
- /api/auth/*: AUTH_RATE_LIMIT (100 requests per 15 minutes by default)
"""

from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from fastapi import Request
from fastapi.responses import JSONResponse

from way2pg.core.config import settings
from way2pg.core.logging_config import logger


def get_client_identifier(request: Request) -> str:
    """Authenticated user ID when the auth dependency already ran, else IP"""
    user_id = getattr(request.state, 'user_id', None)
    if user_id:
        return f"user:{user_id}"
    return f"ip:{get_remote_address(request)}"


limiter = Limiter(
    key_func=get_client_identifier,
    default_limits=[f"{settings.RATE_LIMIT_PER_MINUTE}/minute"],
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    strategy="fixed-window",
    enabled=settings.RATE_LIMIT_ENABLED,
)


def auth_rate_limit():
    """Limit for signup/login and the other credential endpoints"""
    return limiter.limit(settings.AUTH_RATE_LIMIT, key_func=get_remote_address)


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    logger.warning(f"[RateLimit] Exceeded for {get_client_identifier(request)}: {exc.detail}")
    return JSONResponse(
        status_code=429,
        content={
            "message": "Too many requests, please try again later",
            "code": "RATE_LIMITED",
        },
        headers={"Retry-After": "60"},
    )
