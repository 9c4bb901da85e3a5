"""
payroll_tracking.db.repositories.business_ids

Human-readable sequential identifiers (CLAIM-0001, DISP-0001).
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import InstrumentedAttribute


def format_business_id(prefix: str, number: int, width: int) -> str:
    return f"{prefix}{number:0{width}d}"


def parse_business_id(prefix: str, value: str) -> int | None:
    # Caller-supplied ids ("CLAIM-legacy") are ignored when computing the next number.
    if not value.startswith(prefix):
        return None
    suffix = value[len(prefix) :]
    return int(suffix) if suffix.isdigit() else None


async def next_business_id(
    session: AsyncSession,
    column: InstrumentedAttribute[str],
    *,
    prefix: str,
    width: int,
) -> str:
    stmt = select(column).where(column.like(f"{prefix}%"))
    existing = (await session.execute(stmt)).scalars().all()
    numbers = [n for n in (parse_business_id(prefix, v) for v in existing) if n is not None]
    return format_business_id(prefix, max(numbers, default=0) + 1, width)
