"""
payroll_tracking.services.dispute_service

Payslip dispute lifecycle: submission against one of the employee's payslips,
specialist/manager review (via `CaseService`), and refund generation.
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from payroll_tracking.db.models import CaseStatus, Dispute, Refund
from payroll_tracking.db.repositories.disputes import DisputeRepo
from payroll_tracking.db.repositories.payslips import PayslipRepo
from payroll_tracking.db.repositories.refunds import RefundRepo
from payroll_tracking.errors import NotFoundError, ValidationError, WorkflowError
from payroll_tracking.observability.logging import get_logger
from payroll_tracking.services.case_service import SUBMIT_ATTEMPTS, CaseService
from payroll_tracking.settings import Settings
from payroll_tracking.workflow.transitions import DISPUTE, to_money

log = get_logger(__name__)

ACTIVE_DISPUTE_EXISTS = "An active dispute already exists for this payslip"


class DisputeService(CaseService[Dispute]):
    kind = DISPUTE

    def __init__(self, *, session: AsyncSession, settings: Settings) -> None:
        super().__init__(session=session, settings=settings)
        self._disputes = DisputeRepo(session)
        self._payslips = PayslipRepo(session)
        self._refunds = RefundRepo(session)

    async def _load(self, display_id: str, *, for_update: bool = False) -> Dispute | None:
        return await self._disputes.get_by_dispute_id(display_id, for_update=for_update)

    async def create(
        self,
        *,
        employee_id: str,
        payslip_id: uuid.UUID,
        description: str | None,
    ) -> Dispute:
        payslip = await self._payslips.get_for_employee(payslip_id, employee_id)
        if payslip is None:
            raise NotFoundError("Payslip not found or does not belong to this employee")
        if description is None or not description.strip():
            raise ValidationError("Description is required and cannot be empty")

        active = await self._disputes.find_active_for_payslip(
            payslip_id=payslip.id, employee_id=employee_id
        )
        if active is not None:
            raise ValidationError(ACTIVE_DISPUTE_EXISTS)

        for attempt in range(1, SUBMIT_ATTEMPTS + 1):
            dispute_id = await self._disputes.next_dispute_id(
                prefix=self._settings.dispute_id_prefix, width=self._settings.business_id_width
            )
            try:
                dispute = await self._disputes.create(
                    dispute_id=dispute_id,
                    employee_id=employee_id,
                    payslip_id=payslip_id,
                    description=description.strip(),
                )
            except IntegrityError:
                # The insert is the first write of this session.
                await self._session.rollback()
                active = await self._disputes.find_active_for_payslip(
                    payslip_id=payslip_id, employee_id=employee_id
                )
                if active is not None:
                    raise ValidationError(ACTIVE_DISPUTE_EXISTS) from None
                log.warning("dispute_id_taken", dispute_id=dispute_id, attempt=attempt)
                continue

            await self._record(
                dispute,
                actor=employee_id,
                event_type="DISPUTE_SUBMITTED",
                details={"payslip_id": str(payslip_id)},
            )
            await self._session.commit()
            log.info("dispute_submitted", dispute_id=dispute.dispute_id, employee_id=employee_id)
            return dispute

        raise WorkflowError("Could not allocate a dispute ID, please retry the submission")

    async def list_for_employee(self, employee_id: str) -> list[Dispute]:
        return await self._disputes.list_for_employee(employee_id)

    async def list_under_review(self) -> list[Dispute]:
        return await self._disputes.list_by_status(CaseStatus.under_review)

    async def list_pending_manager_approval(self) -> list[Dispute]:
        return await self._disputes.list_by_status(CaseStatus.pending_manager_approval)

    async def list_approved_awaiting_refund(self) -> list[Dispute]:
        return await self._disputes.list_approved_without_refund()

    async def generate_refund(
        self,
        dispute_id: str,
        *,
        finance_staff_id: str,
        refund_amount: Decimal | None = None,
        description: str | None = None,
    ) -> Refund:
        dispute = await self._require(dispute_id)
        if dispute.status != CaseStatus.approved:
            raise WorkflowError("Refund can only be generated for approved disputes")

        existing = await self._refunds.find_for_source(dispute_id=dispute.id)
        if existing is not None:
            raise self._refund_exists(existing)

        amount = refund_amount if refund_amount is not None else dispute.approved_refund_amount
        if amount is None:
            raise ValidationError(
                "Refund amount is required when generating a refund for a dispute"
            )
        if amount <= 0:
            raise ValidationError("Refund amount must be greater than zero")

        dispute.finance_staff_id = finance_staff_id
        try:
            refund = await self._refunds.create(
                dispute_id=dispute.id,
                employee_id=dispute.employee_id,
                finance_staff_id=finance_staff_id,
                description=(description or "").strip()
                or f"Refund for approved dispute {dispute.dispute_id}",
                amount=to_money(amount),
            )
        except IntegrityError:
            # A concurrent finance action refunded this dispute first.
            await self._session.rollback()
            raise self._refund_exists() from None

        await self._record(
            dispute,
            actor=finance_staff_id,
            event_type="DISPUTE_REFUND_GENERATED",
            details={"refund_id": str(refund.id), "amount": str(refund.amount)},
        )
        await self._session.commit()
        log.info(
            "refund_generated",
            dispute_id=dispute.dispute_id,
            refund_id=str(refund.id),
            amount=str(refund.amount),
        )
        return refund
