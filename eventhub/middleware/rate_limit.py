from __future__ import annotations

import time

import structlog
from fastapi import Request
from redis.exceptions import RedisError
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse, Response

from eventhub.core.config import settings
from eventhub.redis_client import get_redis

logger = structlog.get_logger()

_WINDOWS = {
    "sec": 1,
    "second": 1,
    "seconds": 1,
    "min": 60,
    "minute": 60,
    "minutes": 60,
    "hour": 3600,
    "hours": 3600,
    "day": 86400,
    "days": 86400,
}


def parse_rate(rate: str) -> tuple[int, int]:
    """
    Parse formats like "60/minute", "120/hour" or "10/second".
    Returns: (limit, window_seconds)
    """
    raw = rate.strip().lower()
    if "/" not in raw:
        raise ValueError(f"Invalid rate format: {rate}")

    limit_str, window_str = raw.split("/", 1)
    limit = int(limit_str)
    if limit < 1:
        raise ValueError(f"Invalid rate limit: {rate}")

    try:
        return limit, _WINDOWS[window_str.strip()]
    except KeyError:
        raise ValueError(f"Invalid rate window: {window_str}") from None


def _client_key(request: Request) -> str:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Fixed-window limiter keyed on client, method and path, counted in redis."""

    async def dispatch(self, request: Request, call_next) -> Response:
        if not settings.rate_limit_enabled or request.method == "OPTIONS":
            return await call_next(request)

        path = request.url.path
        if path in set(settings.rate_limit_exempt_paths):
            return await call_next(request)

        try:
            limit, window_seconds = parse_rate(settings.rate_limit_default)
        except ValueError:
            logger.warning("rate_limit_misconfigured", rate=settings.rate_limit_default)
            return await call_next(request)

        now = int(time.time())
        bucket = now // window_seconds
        reset = (bucket + 1) * window_seconds
        key = f"rl:{_client_key(request)}:{request.method}:{path}:{window_seconds}:{bucket}"

        try:
            r = get_redis()
            count = int(r.incr(key))
            if count == 1:
                r.expire(key, window_seconds)
        except RedisError:
            # Fail open.
            return await call_next(request)

        if count > limit:
            return JSONResponse(
                status_code=429,
                content={"success": False, "error": "Too many requests, please try again later"},
                headers={
                    "X-RateLimit-Limit": str(limit),
                    "X-RateLimit-Remaining": "0",
                    "X-RateLimit-Reset": str(reset),
                    "Retry-After": str(max(0, reset - now)),
                },
            )

        response = await call_next(request)
        response.headers.setdefault("X-RateLimit-Limit", str(limit))
        response.headers.setdefault("X-RateLimit-Remaining", str(max(0, limit - count)))
        response.headers.setdefault("X-RateLimit-Reset", str(reset))
        return response
