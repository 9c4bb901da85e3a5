"""
payroll_tracking.api

HTTP layer: app factory, dependencies, error mapping, schemas and routers.
"""
