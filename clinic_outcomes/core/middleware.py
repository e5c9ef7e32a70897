"""
Request logging middleware for the dashboard.

Every request gets a short id that is attached to all log records emitted
while it is handled and returned in the X-Request-ID header. Chart and export
requests are logged on start and completion; health checks, docs and the static
period resources are not.
"""

import logging
import time
import uuid
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from clinic_outcomes.core.logging_config import clear_request_id, set_request_id

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
QUIET_PATHS = frozenset({"/health", "/docs", "/redoc", "/openapi.json"})
QUIET_PREFIXES = ("/resource/",)


def is_quiet(path: str) -> bool:
    """Paths served without request logs."""
    return path in QUIET_PATHS or path.startswith(QUIET_PREFIXES)


class LoggingMiddleware(BaseHTTPMiddleware):
    """Tags each request with an id and logs its outcome and duration."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = uuid.uuid4().hex[:8]
        set_request_id(request_id)
        fields = {"method": request.method, "path": request.url.path}
        quiet = is_quiet(request.url.path)
        started = time.perf_counter()

        try:
            if not quiet:
                logger.info("Request started", extra={**fields, "query": str(request.query_params) or None})

            try:
                response = await call_next(request)
            except Exception as e:
                logger.exception("Request failed with exception", extra={**fields, "error": str(e)})
                raise

            if not quiet:
                elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
                logger.log(
                    logging.WARNING if response.status_code >= 400 else logging.INFO,
                    "Request completed",
                    extra={**fields, "status_code": response.status_code, "duration_ms": elapsed_ms}
                )
        finally:
            # Cleared only once every record of this request is written
            clear_request_id()

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
