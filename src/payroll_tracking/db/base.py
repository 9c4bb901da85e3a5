"""
payroll_tracking.db.base

SQLAlchemy declarative base shared by all payroll tracking ORM models.
"""

from __future__ import annotations

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass
