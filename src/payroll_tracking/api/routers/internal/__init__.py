"""
payroll_tracking.api.routers.internal

Service-to-service endpoints (role `internal_system`) used by payroll execution.
"""
