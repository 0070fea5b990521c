"""
Logfire Middleware for FastAPI.

Every request gets an id, taken from an incoming ``X-Request-ID`` header or
generated here, which is echoed back on the response and reused as the
``error_id`` of unhandled failures. The request is timed, reported through
``log_api_request`` and the duration is exposed as ``X-Process-Time``.
"""

import time
import uuid
from typing import Callable

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from bidchemz_logistics.core.logging_config import get_logger
from bidchemz_logistics.core.monitoring import log_api_request

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
SLOW_REQUEST_MS = 1000


def new_request_id() -> str:
    return uuid.uuid4().hex[:16]


class LogfireMiddleware(BaseHTTPMiddleware):
    """Middleware for tracing API requests with Logfire."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or new_request_id()
        request.state.request_id = request_id
        started = time.perf_counter()
        context = {"request_id": request_id, "method": request.method, "path": request.url.path}

        try:
            response = await call_next(request)
        except Exception as e:
            duration_ms = (time.perf_counter() - started) * 1000
            logger.error(
                f"[{request_id}] {request.method} {request.url.path} failed after {duration_ms:.2f}ms",
                exc_info=True,
                extra={**context, "duration_ms": duration_ms, "error": str(e)},
            )
            log_api_request(method=request.method, path=request.url.path, status_code=500, duration_ms=duration_ms)
            raise

        duration_ms = (time.perf_counter() - started) * 1000
        log_api_request(
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=duration_ms,
        )
        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers["X-Process-Time"] = f"{duration_ms:.2f}"

        if duration_ms > SLOW_REQUEST_MS:
            logger.warning(
                f"[{request_id}] Slow request: {request.method} {request.url.path} took {duration_ms:.2f}ms",
                extra={**context, "duration_ms": duration_ms, "status_code": response.status_code},
            )
        return response
