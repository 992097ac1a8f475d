"""Request logging for the local API."""

from __future__ import annotations

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from .responses import CORRELATION_HEADER

logger = logging.getLogger("tokend.requests")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log one line per request with its status and duration."""

    async def dispatch(self, request: Request, call_next):  # type: ignore[override]
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        extra = {"method": request.method, "path": request.url.path, "status_code": response.status_code}
        correlation_id = response.headers.get(CORRELATION_HEADER)
        if correlation_id:
            extra["correlation_id"] = correlation_id
        logger.info(
            "%s %s %s %.1fms",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            extra=extra,
        )
        return response


__all__ = ["RequestLoggingMiddleware"]
