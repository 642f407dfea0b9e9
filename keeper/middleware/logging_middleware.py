"""
HTTP request logging middleware.

Every request gets a request id bound into structlog's contextvars. Cron
triggers also bind the function name they address, so each keeper log line
of one call carries it, and finish with a `keeper_call` event reporting the
status the scheduler received.
"""

import time
import uuid
from typing import Optional

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

logger = structlog.stdlib.get_logger("http")


def trigger_function_name(path: str, prefix: str) -> Optional[str]:
    """Function name addressed by a cron trigger path, or None for other paths."""
    if not path.startswith(prefix + "/"):
        return None
    return path[len(prefix) + 1:].strip("/").strip() or None


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log HTTP requests and keeper triggers with timing and outcome."""

    def __init__(self, app: ASGIApp, trigger_prefix: Optional[str] = None):
        super().__init__(app)
        self.trigger_prefix = trigger_prefix

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = request.headers.get("x-request-id", str(uuid.uuid4())[:8])
        function_name = None
        if self.trigger_prefix:
            function_name = trigger_function_name(request.url.path, self.trigger_prefix)

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)
        if function_name:
            structlog.contextvars.bind_contextvars(function_name=function_name)

        start = time.perf_counter()
        status_code = 500

        try:
            response = await call_next(request)
            status_code = response.status_code
            response.headers["x-request-id"] = request_id
            return response
        finally:
            duration_ms = round((time.perf_counter() - start) * 1000, 1)

            if function_name:
                # The trigger answers 200 for a confirmed call and 400 otherwise
                succeeded = status_code == 200
                log = logger.info if succeeded else logger.warning
                if status_code >= 500:
                    log = logger.error
                log(
                    "keeper_call",
                    status=succeeded,
                    http_status=status_code,
                    duration_ms=duration_ms,
                )
            else:
                log = logger.info if status_code < 500 else logger.error
                log(
                    "http_request",
                    method=request.method,
                    path=request.url.path,
                    status=status_code,
                    duration_ms=duration_ms,
                    client=request.client.host if request.client else None,
                )
