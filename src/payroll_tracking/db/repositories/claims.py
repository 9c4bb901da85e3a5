from __future__ import annotations

from decimal import Decimal

from sqlalchemy import desc, exists, select
from sqlalchemy.ext.asyncio import AsyncSession

from payroll_tracking.db.models import CaseStatus, Claim, Refund
from payroll_tracking.db.repositories.business_ids import next_business_id


class ClaimRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self,
        *,
        claim_id: str,
        employee_id: str,
        description: str,
        claim_type: str,
        amount: Decimal,
    ) -> Claim:
        claim = Claim(
            claim_id=claim_id,
            employee_id=employee_id,
            description=description,
            claim_type=claim_type,
            amount=amount,
            status=CaseStatus.under_review,
        )
        self._session.add(claim)
        await self._session.flush()
        return claim

    async def next_claim_id(self, *, prefix: str, width: int) -> str:
        return await next_business_id(self._session, Claim.claim_id, prefix=prefix, width=width)

    async def get_by_claim_id(self, claim_id: str, *, for_update: bool = False) -> Claim | None:
        stmt = select(Claim).where(Claim.claim_id == claim_id)
        if for_update:
            stmt = stmt.with_for_update()
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def list_for_employee(self, employee_id: str) -> list[Claim]:
        stmt = (
            select(Claim)
            .where(Claim.employee_id == employee_id)
            .order_by(desc(Claim.created_at), desc(Claim.claim_id))
        )
        return list((await self._session.execute(stmt)).scalars().all())

    async def list_by_status(self, status: CaseStatus) -> list[Claim]:
        stmt = (
            select(Claim)
            .where(Claim.status == status)
            .order_by(desc(Claim.created_at), desc(Claim.claim_id))
        )
        return list((await self._session.execute(stmt)).scalars().all())

    async def list_approved_without_refund(self) -> list[Claim]:
        has_refund = exists().where(Refund.claim_id == Claim.id)
        stmt = (
            select(Claim)
            .where(Claim.status == CaseStatus.approved, ~has_refund)
            .order_by(desc(Claim.updated_at), desc(Claim.claim_id))
        )
        return list((await self._session.execute(stmt)).scalars().all())
