"""Request logging middleware.

One line per request: method, path, status, duration and, for the upsert
endpoints, the outcome the route left in ``request.state.upsert``
(e.g. ``refreshed Xy_9-a`` or ``batch 3: 2 created, 1 updated``). Server
errors and slow requests are logged at WARNING.
"""

import logging
import time
from typing import Callable, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from ttl_shortener.common.logging_config import get_logger

SLOW_REQUEST_MS = 1000.0


class LoggingMiddleware(BaseHTTPMiddleware):
    """Log each request with its status, duration and upsert outcome."""

    def __init__(
        self,
        app,
        logger: Optional[logging.Logger] = None,
        slow_request_ms: float = SLOW_REQUEST_MS,
    ):
        super().__init__(app)
        self.logger = logger or get_logger("web")
        self.slow_request_ms = slow_request_ms

    async def dispatch(self, request: Request, call_next: Callable):
        start = time.perf_counter()
        client = request.client.host if request.client else "unknown"

        try:
            response = await call_next(request)
        except Exception:
            duration_ms = (time.perf_counter() - start) * 1000
            self.logger.warning(
                f"{request.method} {request.url.path} raised after {duration_ms:.2f}ms",
                extra={"client": client, "duration_ms": round(duration_ms, 2)},
            )
            raise

        duration_ms = (time.perf_counter() - start) * 1000
        outcome = getattr(request.state, "upsert", None)

        message = f"{request.method} {request.url.path} {response.status_code} {duration_ms:.2f}ms"
        if outcome:
            message += f" [{outcome}]"

        slow = duration_ms >= self.slow_request_ms
        level = logging.WARNING if response.status_code >= 500 or slow else logging.INFO
        self.logger.log(
            level,
            message + (" (slow)" if slow else ""),
            extra={
                "client": client,
                "upsert": outcome,
                "duration_ms": round(duration_ms, 2),
                "status_code": response.status_code,
            },
        )
        return response
