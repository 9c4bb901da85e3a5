"""
payroll_tracking.db

SQLAlchemy (async) persistence: models, engine/session setup, repositories.
"""
