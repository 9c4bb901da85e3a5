"""
payroll_tracking.services

Service layer: transaction owners for the claim/dispute/refund workflow and payslip access.
"""
