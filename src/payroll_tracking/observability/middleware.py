"""
payroll_tracking.observability.middleware

Request context middleware: one request id per call (a caller-supplied
`x-request-id` wins), bound into the log context and echoed on the response,
plus one `request_completed` access line with status and duration.
"""

from __future__ import annotations

import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from payroll_tracking.observability.logging import (
    clear_request_context,
    get_logger,
    start_request_context,
)

REQUEST_ID_HEADER = "x-request-id"

log = get_logger(__name__)


class RequestContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        start_request_context(
            request_id=request_id, method=request.method, path=request.url.path
        )
        started = time.perf_counter()
        try:
            response = await call_next(request)
            log.info(
                "request_completed",
                status_code=response.status_code,
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
            )
        finally:
            clear_request_context()

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
