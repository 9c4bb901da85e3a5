"""
payroll_tracking.db.init_db

DB initialization helper for dev/test: create tables if they don't exist.
Production schema changes go through Alembic.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncEngine

from payroll_tracking.db import models  # noqa: F401  # registers tables on Base.metadata
from payroll_tracking.db.base import Base


async def init_db(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
