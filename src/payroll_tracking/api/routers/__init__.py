"""
payroll_tracking.api.routers

HTTP routers, one module per resource.
"""
