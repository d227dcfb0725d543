"""
Rate Limiting for FastAPI

This module provides per-client rate limiting using slowapi (compatible with Flask-Limiter).
Only the chat endpoint is limited; health checks and history reads are not.

Usage:
    from backend.middleware.rate_limit import limiter, MESSAGE_RATE_LIMIT

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

    @app.post("/chat")
    @limiter.limit(MESSAGE_RATE_LIMIT)
    async def chat(request: Request, ...):
        ...
"""

import os
import logging

from fastapi import Request, status
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

logger = logging.getLogger(__name__)


def get_rate_limit_key(request: Request) -> str:
    """
    Generate a rate limit key for the calling client.

    Session ids are caller-chosen, so they are not trusted as a key; the
    client address is used instead.

    Args:
        request: FastAPI request object

    Returns:
        Rate limit key
    """
    return f"client:{get_remote_address(request)}"


# Using in-memory storage - counters reset with the process, like the session store.
limiter = Limiter(
    key_func=get_rate_limit_key,
    default_limits=[],
    enabled=os.getenv("RATE_LIMIT_ENABLED", "true").lower() != "false",
)


RATE_LIMITS = {
    "messages_per_hour": os.getenv("RATE_LIMIT_MESSAGES_PER_HOUR", "100"),
}

MESSAGE_RATE_LIMIT = f"{RATE_LIMITS['messages_per_hour']}/hour"


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """
    Custom handler for rate limit exceeded responses.

    Args:
        request: FastAPI request object
        exc: RateLimitExceeded exception

    Returns:
        JSONResponse with 429 status code
    """
    logger.warning(
        "Rate limit exceeded for %s %s from %s",
        request.method,
        request.url.path,
        request.client.host if request.client else "unknown",
    )

    retry_after = getattr(exc, "retry_after", 60)
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content={
            "detail": {
                "error": "rate_limit_exceeded",
                "message": "Too many requests. Please slow down.",
            }
        },
        headers={"Retry-After": str(retry_after)},
    )


__all__ = [
    "limiter",
    "get_rate_limit_key",
    "rate_limit_exceeded_handler",
    "RATE_LIMITS",
    "MESSAGE_RATE_LIMIT",
]
