"""
payroll_tracking.services.claim_service

Expense claim lifecycle: submission, specialist/manager review (via
`CaseService`), and refund generation by finance staff.
"""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from payroll_tracking.db.models import CaseStatus, Claim, Refund
from payroll_tracking.db.repositories.claims import ClaimRepo
from payroll_tracking.db.repositories.refunds import RefundRepo
from payroll_tracking.errors import ValidationError, WorkflowError
from payroll_tracking.observability.logging import get_logger
from payroll_tracking.services.case_service import SUBMIT_ATTEMPTS, CaseService
from payroll_tracking.settings import Settings
from payroll_tracking.workflow.transitions import CLAIM, to_money

log = get_logger(__name__)

DUPLICATE_CLAIM_ID = "A claim with this ID already exists"


class ClaimService(CaseService[Claim]):
    kind = CLAIM

    def __init__(self, *, session: AsyncSession, settings: Settings) -> None:
        super().__init__(session=session, settings=settings)
        self._claims = ClaimRepo(session)
        self._refunds = RefundRepo(session)

    async def _load(self, display_id: str, *, for_update: bool = False) -> Claim | None:
        return await self._claims.get_by_claim_id(display_id, for_update=for_update)

    async def create(
        self,
        *,
        employee_id: str,
        description: str | None,
        claim_type: str | None,
        amount: Decimal | None,
        claim_id: str | None = None,
    ) -> Claim:
        if description is None or not description.strip():
            raise ValidationError("Description is required and cannot be empty")
        if claim_type is None or not claim_type.strip():
            raise ValidationError("Claim type is required and cannot be empty")
        if amount is None:
            raise ValidationError("Amount is required")
        if amount < 0:
            raise ValidationError("Amount cannot be negative")

        explicit_id = claim_id.strip() if claim_id and claim_id.strip() else None
        if explicit_id is not None and await self._claims.get_by_claim_id(explicit_id) is not None:
            raise ValidationError(DUPLICATE_CLAIM_ID)

        for attempt in range(1, SUBMIT_ATTEMPTS + 1):
            business_id = explicit_id or await self._claims.next_claim_id(
                prefix=self._settings.claim_id_prefix, width=self._settings.business_id_width
            )
            try:
                claim = await self._claims.create(
                    claim_id=business_id,
                    employee_id=employee_id,
                    description=description.strip(),
                    claim_type=claim_type.strip(),
                    amount=to_money(amount),
                )
            except IntegrityError:
                # The insert is the first write of this session.
                await self._session.rollback()
                if explicit_id is not None:
                    raise ValidationError(DUPLICATE_CLAIM_ID) from None
                log.warning("claim_id_taken", claim_id=business_id, attempt=attempt)
                continue

            await self._record(
                claim,
                actor=employee_id,
                event_type="CLAIM_SUBMITTED",
                details={"amount": str(claim.amount), "claim_type": claim.claim_type},
            )
            await self._session.commit()
            log.info("claim_submitted", claim_id=claim.claim_id, employee_id=employee_id)
            return claim

        raise WorkflowError("Could not allocate a claim ID, please retry the submission")

    async def list_for_employee(self, employee_id: str) -> list[Claim]:
        return await self._claims.list_for_employee(employee_id)

    async def list_under_review(self) -> list[Claim]:
        return await self._claims.list_by_status(CaseStatus.under_review)

    async def list_pending_manager_approval(self) -> list[Claim]:
        return await self._claims.list_by_status(CaseStatus.pending_manager_approval)

    async def list_approved_awaiting_refund(self) -> list[Claim]:
        return await self._claims.list_approved_without_refund()

    async def generate_refund(
        self,
        claim_id: str,
        *,
        finance_staff_id: str,
        description: str | None = None,
    ) -> Refund:
        claim = await self._require(claim_id)
        if claim.status != CaseStatus.approved:
            raise WorkflowError("Refund can only be generated for approved claims")

        existing = await self._refunds.find_for_source(claim_id=claim.id)
        if existing is not None:
            raise self._refund_exists(existing)

        amount = claim.approved_amount if claim.approved_amount else claim.amount
        if amount is None or amount <= 0:
            raise ValidationError("Approved amount must be greater than zero")

        claim.finance_staff_id = finance_staff_id
        try:
            refund = await self._refunds.create(
                claim_id=claim.id,
                employee_id=claim.employee_id,
                finance_staff_id=finance_staff_id,
                description=(description or "").strip()
                or f"Refund for approved expense claim {claim.claim_id}",
                amount=to_money(amount),
            )
        except IntegrityError:
            # A concurrent finance action refunded this claim first.
            await self._session.rollback()
            raise self._refund_exists() from None

        await self._record(
            claim,
            actor=finance_staff_id,
            event_type="CLAIM_REFUND_GENERATED",
            details={"refund_id": str(refund.id), "amount": str(refund.amount)},
        )
        await self._session.commit()
        log.info(
            "refund_generated",
            claim_id=claim.claim_id,
            refund_id=str(refund.id),
            amount=str(refund.amount),
        )
        return refund
