"""
payroll_tracking.auth

Bearer-token authentication and role checks for payroll staff and employees.
"""
