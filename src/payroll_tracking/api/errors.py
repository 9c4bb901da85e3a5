"""
payroll_tracking.api.errors

Maps domain exceptions onto HTTP responses.
"""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.status import HTTP_400_BAD_REQUEST, HTTP_404_NOT_FOUND

from payroll_tracking.errors import NotFoundError, PayrollTrackingError
from payroll_tracking.observability.logging import get_logger

log = get_logger(__name__)


async def _domain_error_handler(_: Request, exc: PayrollTrackingError) -> JSONResponse:
    status_code = HTTP_404_NOT_FOUND if isinstance(exc, NotFoundError) else HTTP_400_BAD_REQUEST
    log.info("request_rejected", error=type(exc).__name__, detail=exc.detail)
    return JSONResponse(status_code=status_code, content={"detail": exc.detail})


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PayrollTrackingError, _domain_error_handler)  # type: ignore[arg-type]
