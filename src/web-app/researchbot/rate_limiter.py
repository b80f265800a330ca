"""IP-based rate limiting for the chat endpoint.

The sliding-window counting is delegated to ``upstash_ratelimit``; this
module only derives the client identifier, maps the decision onto HTTP
(``X-RateLimit-*`` headers, 429 + ``Retry-After``) and fails open when the
limiter itself is unavailable.
"""

from __future__ import annotations

import logging
import math
import time
from typing import Any, Protocol

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from upstash_ratelimit import SlidingWindow
from upstash_ratelimit.asyncio import Ratelimit
from upstash_redis.asyncio import Redis

logger = logging.getLogger(__name__)

RATE_LIMITED_PATHS = frozenset({"/api/chat"})
RATELIMIT_PREFIX = "@upstash/ratelimit"
FALLBACK_IP = "127.0.0.1"


class Limiter(Protocol):
    async def limit(self, identifier: str) -> Any: ...


def create_ratelimit(redis: Redis, max_requests: int = 5, window_seconds: int = 10) -> Ratelimit:
    """Build a sliding-window limiter backed by Upstash Redis."""
    return Ratelimit(
        redis=redis,
        limiter=SlidingWindow(max_requests=max_requests, window=window_seconds),
        prefix=RATELIMIT_PREFIX,
    )


def client_ip(request: Request) -> str:
    """Client address from ``X-Forwarded-For`` / ``X-Real-IP``, else loopback."""
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        first = forwarded_for.split(",")[0].strip()
        if first:
            return first

    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()

    return FALLBACK_IP


def retry_after_seconds(reset: float, now: float | None = None) -> int:
    """Whole seconds until *reset* (epoch seconds), never negative."""
    now = time.time() if now is None else now
    return max(0, math.ceil(reset - now))


def _rate_limit_headers(result: Any) -> dict[str, str]:
    return {
        "X-RateLimit-Limit": str(result.limit),
        "X-RateLimit-Remaining": str(result.remaining),
        "X-RateLimit-Reset": str(int(result.reset * 1000)),
    }


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Apply the process-wide limiter (``app.state.services.ratelimit``) to chat requests."""

    def __init__(self, app, paths: frozenset[str] = RATE_LIMITED_PATHS) -> None:
        super().__init__(app)
        self.paths = paths

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.url.path not in self.paths:
            return await call_next(request)

        services = getattr(request.app.state, "services", None)
        limiter: Limiter | None = getattr(services, "ratelimit", None)
        if limiter is None:
            return await call_next(request)

        identifier = f"{client_ip(request)}:{request.url.path}"
        try:
            result = await limiter.limit(identifier)
        except Exception:
            # Fail open: availability over strict enforcement.
            logger.error("Rate limiter unavailable for %s, allowing request", identifier, exc_info=True)
            return await call_next(request)

        headers = _rate_limit_headers(result)
        if not result.allowed:
            headers["Retry-After"] = str(retry_after_seconds(result.reset))
            logger.warning("Rate limit exceeded for %s", identifier)
            return JSONResponse({"error": "Too many requests"}, status_code=429, headers=headers)

        response = await call_next(request)
        response.headers.update(headers)
        return response
