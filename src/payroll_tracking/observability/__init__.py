"""
payroll_tracking.observability

structlog configuration and request-scoped log context.
"""
