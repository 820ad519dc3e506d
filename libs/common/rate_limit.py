"""Rate limiting configuration for the FarmDirect API.

Uses slowapi; state lives in ``RATE_LIMIT_STORAGE_URI`` (in-memory by
default, a Redis URI in multi-instance deployments).
"""

from functools import lru_cache
from typing import Callable

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from libs.common.config import get_settings


def _get_client_ip(request: Request) -> str:
    """
    Get client IP from request, handling proxies.

    Checks X-Forwarded-For header first (for proxied requests),
    then falls back to direct connection IP.
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return get_remote_address(request)


@lru_cache
def get_limiter() -> Limiter:
    """Create and return a cached Limiter instance."""
    settings = get_settings()
    return Limiter(
        key_func=_get_client_ip,
        default_limits=["100/minute"],
        storage_uri=settings.RATE_LIMIT_STORAGE_URI,
        strategy="fixed-window",
        enabled=settings.RATE_LIMIT_ENABLED,
    )


limiter = get_limiter()


# Decorator shortcuts for common rate limit tiers
def auth_limit(func: Callable) -> Callable:
    """Apply strict rate limit for authentication endpoints (5/minute)."""
    return limiter.limit("5/minute")(func)


def upload_limit(func: Callable) -> Callable:
    """Apply rate limit for upload endpoints (20/minute)."""
    return limiter.limit("20/minute")(func)
