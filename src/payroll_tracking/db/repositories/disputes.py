from __future__ import annotations

import uuid

from sqlalchemy import desc, exists, select
from sqlalchemy.ext.asyncio import AsyncSession

from payroll_tracking.db.models import ACTIVE_CASE_STATUSES, CaseStatus, Dispute, Refund
from payroll_tracking.db.repositories.business_ids import next_business_id


class DisputeRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self,
        *,
        dispute_id: str,
        employee_id: str,
        payslip_id: uuid.UUID,
        description: str,
    ) -> Dispute:
        dispute = Dispute(
            dispute_id=dispute_id,
            employee_id=employee_id,
            payslip_id=payslip_id,
            description=description,
            status=CaseStatus.under_review,
        )
        self._session.add(dispute)
        await self._session.flush()
        return dispute

    async def next_dispute_id(self, *, prefix: str, width: int) -> str:
        return await next_business_id(
            self._session, Dispute.dispute_id, prefix=prefix, width=width
        )

    async def get_by_dispute_id(
        self, dispute_id: str, *, for_update: bool = False
    ) -> Dispute | None:
        stmt = select(Dispute).where(Dispute.dispute_id == dispute_id)
        if for_update:
            stmt = stmt.with_for_update()
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def find_active_for_payslip(
        self, *, payslip_id: uuid.UUID, employee_id: str
    ) -> Dispute | None:
        stmt = (
            select(Dispute)
            .where(
                Dispute.payslip_id == payslip_id,
                Dispute.employee_id == employee_id,
                Dispute.status.in_(ACTIVE_CASE_STATUSES),
            )
            .limit(1)
        )
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def list_for_employee(self, employee_id: str) -> list[Dispute]:
        stmt = (
            select(Dispute)
            .where(Dispute.employee_id == employee_id)
            .order_by(desc(Dispute.created_at), desc(Dispute.dispute_id))
        )
        return list((await self._session.execute(stmt)).scalars().all())

    async def list_by_status(self, status: CaseStatus) -> list[Dispute]:
        stmt = (
            select(Dispute)
            .where(Dispute.status == status)
            .order_by(desc(Dispute.created_at), desc(Dispute.dispute_id))
        )
        return list((await self._session.execute(stmt)).scalars().all())

    async def list_approved_without_refund(self) -> list[Dispute]:
        has_refund = exists().where(Refund.dispute_id == Dispute.id)
        stmt = (
            select(Dispute)
            .where(Dispute.status == CaseStatus.approved, ~has_refund)
            .order_by(desc(Dispute.updated_at), desc(Dispute.dispute_id))
        )
        return list((await self._session.execute(stmt)).scalars().all())
