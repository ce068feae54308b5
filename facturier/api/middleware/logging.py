"""
Request logging middleware.

Binds a short request id into the structlog context so that every event
logged while serving the request (lifecycle, numbering, storage) carries it.
"""

import time
import uuid
from collections.abc import Awaitable, Callable

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from facturier.config import get_logger

logger = get_logger(__name__)

# Polled by the local UI; logged at debug level only
QUIET_PATHS = frozenset({"/api/health"})


class LoggingMiddleware(BaseHTTPMiddleware):
    """Log each request once it completes, with status and timing."""

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        request_id = uuid.uuid4().hex[:8]
        request.state.request_id = request_id
        start = time.perf_counter()

        with structlog.contextvars.bound_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        ):
            try:
                response = await call_next(request)
            except Exception as e:
                logger.error("request_failed", error=str(e), duration_ms=_elapsed_ms(start))
                raise

            log = logger.debug if request.url.path in QUIET_PATHS else logger.info
            log("request_completed", status=response.status_code, duration_ms=_elapsed_ms(start))

        response.headers["X-Request-ID"] = request_id
        return response


def _elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 2)
