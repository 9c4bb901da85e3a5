"""
payroll_tracking.db.repositories

Data-access repositories, one per aggregate. Repositories flush but never commit;
the service layer owns transaction boundaries.
"""
