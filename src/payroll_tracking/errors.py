"""
payroll_tracking.errors

Domain exceptions raised by the workflow and service layers.

The API layer maps them onto HTTP responses (see `api.errors`).
"""

from __future__ import annotations


class PayrollTrackingError(Exception):
    """Base class for domain errors; `detail` is safe to show to callers."""

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class NotFoundError(PayrollTrackingError):
    pass


class ValidationError(PayrollTrackingError):
    """Input is well-formed but violates a business rule."""


class WorkflowError(PayrollTrackingError):
    """Requested status transition is not allowed from the current status."""
