"""
payroll_tracking.services.refund_service

Refund reads and settlement by payroll execution.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from payroll_tracking.db.models import Refund, RefundStatus
from payroll_tracking.db.repositories.refunds import RefundRepo
from payroll_tracking.observability.logging import get_logger

log = get_logger(__name__)


class RefundService:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._refunds = RefundRepo(session)

    async def list_for_employee(self, employee_id: str) -> list[Refund]:
        return await self._refunds.list_for_employee(employee_id)

    async def list_pending(self) -> list[Refund]:
        return await self._refunds.list_by_status(RefundStatus.pending)

    async def settle_for_payroll_run(
        self, *, employee_id: str, payroll_run_id: str
    ) -> list[dict[str, Any]]:
        """
        Attach every not-yet-settled refund of `employee_id` to `payroll_run_id`
        and mark it paid. Returns the refund lines for the employee's payslip.
        A second call for the same employee returns nothing.
        """
        refunds = await self._refunds.list_unsettled_for_employee(employee_id)
        for refund in refunds:
            refund.paid_in_payroll_run_id = payroll_run_id
            refund.status = RefundStatus.paid
        await self._session.commit()
        if refunds:
            log.info(
                "refunds_settled",
                employee_id=employee_id,
                payroll_run_id=payroll_run_id,
                count=len(refunds),
            )
        return [
            {"refund_id": r.id, "description": r.description, "amount": r.amount}
            for r in refunds
        ]
