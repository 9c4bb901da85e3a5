"""
payroll_tracking.db.repositories.refunds

Repository for `Refund` entities.

Responsibilities:
- Create refunds for approved claims/disputes.
- Look up the refund issued for a claim/dispute (at most one per source,
  whether still pending or already paid).
- Attach unpaid refunds to a payroll run when payroll execution settles them.
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from payroll_tracking.db.models import Refund, RefundStatus


class RefundRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self,
        *,
        employee_id: str,
        finance_staff_id: str,
        description: str,
        amount: Decimal,
        claim_id: uuid.UUID | None = None,
        dispute_id: uuid.UUID | None = None,
    ) -> Refund:
        refund = Refund(
            claim_id=claim_id,
            dispute_id=dispute_id,
            employee_id=employee_id,
            finance_staff_id=finance_staff_id,
            description=description,
            amount=amount,
            status=RefundStatus.pending,
        )
        self._session.add(refund)
        await self._session.flush()
        return refund

    async def find_for_source(
        self, *, claim_id: uuid.UUID | None = None, dispute_id: uuid.UUID | None = None
    ) -> Refund | None:
        if (claim_id is None) == (dispute_id is None):
            raise ValueError("exactly one of claim_id or dispute_id is required")
        if claim_id is not None:
            stmt = select(Refund).where(Refund.claim_id == claim_id)
        else:
            stmt = select(Refund).where(Refund.dispute_id == dispute_id)
        return (await self._session.execute(stmt.limit(1))).scalar_one_or_none()

    async def list_for_employee(self, employee_id: str) -> list[Refund]:
        stmt = (
            select(Refund)
            .where(Refund.employee_id == employee_id)
            .order_by(desc(Refund.created_at))
        )
        return list((await self._session.execute(stmt)).scalars().all())

    async def list_by_status(self, status: RefundStatus) -> list[Refund]:
        stmt = select(Refund).where(Refund.status == status).order_by(desc(Refund.created_at))
        return list((await self._session.execute(stmt)).scalars().all())

    async def list_unsettled_for_employee(self, employee_id: str) -> list[Refund]:
        stmt = (
            select(Refund)
            .where(Refund.employee_id == employee_id, Refund.paid_in_payroll_run_id.is_(None))
            .order_by(Refund.created_at)
            .with_for_update()
        )
        return list((await self._session.execute(stmt)).scalars().all())
