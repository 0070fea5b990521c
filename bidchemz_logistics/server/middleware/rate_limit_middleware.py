"""
Rate limiting middleware.

Requests are counted per client IP and path. The client IP is the first
``X-Forwarded-For`` entry when a proxy sets one, otherwise the socket peer.
"""

from typing import Callable, Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from bidchemz_logistics.core.logging_config import get_logger
from bidchemz_logistics.server.core.config import settings
from bidchemz_logistics.services.rate_limiter import FixedWindowRateLimiter, RateLimitResult

logger = get_logger(__name__)


def client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    return request.client.host if request.client else "unknown"


def _apply_headers(response: Response, result: RateLimitResult) -> None:
    response.headers["X-RateLimit-Limit"] = str(result.limit)
    response.headers["X-RateLimit-Remaining"] = str(result.remaining)
    response.headers["X-RateLimit-Reset"] = str(int(result.reset_at))


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Refuses requests over the per-window limit with 429."""

    def __init__(
        self,
        app: ASGIApp,
        limiter: Optional[FixedWindowRateLimiter] = None,
        enabled: Optional[bool] = None,
    ) -> None:
        super().__init__(app)
        config = settings.rate_limit
        self.enabled = config.enabled if enabled is None else enabled
        if limiter is None:
            limiter = FixedWindowRateLimiter(
                max_requests=config.max_requests,
                window_seconds=config.window_seconds,
            )
        self.limiter = limiter

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if not self.enabled:
            return await call_next(request)

        # Closed windows are only dropped here; without this the key map grows per path
        self.limiter.sweep_if_due()
        key = f"{client_ip(request)}:{request.url.path}"
        result = self.limiter.hit(key)

        if not result.allowed:
            logger.warning(f"[RATE_LIMIT] {key} exceeded {result.limit} requests")
            response = JSONResponse(
                status_code=429,
                content={"detail": "Too many requests, please try again later", "retry_after": result.retry_after},
            )
            response.headers["Retry-After"] = str(result.retry_after)
            _apply_headers(response, result)
            return response

        response = await call_next(request)
        _apply_headers(response, result)
        return response
