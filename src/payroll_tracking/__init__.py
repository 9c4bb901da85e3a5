"""
payroll_tracking

Payroll tracking service: expense claims, payslip disputes, refunds and payslip
self-service behind a FastAPI API.
"""

__version__ = "0.1.0"
