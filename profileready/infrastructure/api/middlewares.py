from __future__ import annotations

import logging
import time
import uuid
from typing import Callable

from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log one line per request with status and timing.

    Static file requests and health checks are skipped.
    """

    def __init__(self, app, *, exclude_prefixes: tuple[str, ...] = ("/health", "/static", "/overlays")) -> None:
        super().__init__(app)
        self.exclude_prefixes = exclude_prefixes

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = uuid.uuid4().hex[:12]
        request.state.request_id = request_id
        if request.url.path.startswith(self.exclude_prefixes):
            return await call_next(request)

        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "[%s] %s %s raised after %.1f ms",
                request_id,
                request.method,
                request.url.path,
                (time.perf_counter() - start) * 1000,
            )
            raise
        elapsed = (time.perf_counter() - start) * 1000
        response.headers["X-Request-ID"] = request_id
        logger.info(
            "[%s] %s %s -> %d (%.1f ms)",
            request_id,
            request.method,
            request.url.path,
            response.status_code,
            elapsed,
        )
        return response


def add_default_middlewares(app: FastAPI) -> None:
    app.add_middleware(RequestLoggingMiddleware)
