"""
payroll_tracking.services.case_service

Shared review lifecycle for claims and disputes (transaction + persistence owner).

Responsibilities:
- Load a claim/dispute by business id and apply a workflow transition.
- Enforce visibility (owner vs. payroll/finance staff).
- Write notifications and audit events alongside each transition.
- Commit on success; a failed transition leaves nothing persisted.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Generic, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from payroll_tracking.auth.models import Principal
from payroll_tracking.db.models import (
    AuditEvent,
    CaseStatus,
    Claim,
    Dispute,
    Refund,
    RefundStatus,
)
from payroll_tracking.db.repositories.audit import AuditRepo
from payroll_tracking.errors import NotFoundError, ValidationError, WorkflowError
from payroll_tracking.observability.logging import get_logger
from payroll_tracking.services.notification_service import NotificationService
from payroll_tracking.settings import Settings
from payroll_tracking.workflow.transitions import (
    CaseKind,
    Transition,
    manager_confirm,
    manager_reject,
    specialist_decision,
)

log = get_logger(__name__)

CaseT = TypeVar("CaseT", Claim, Dispute)

# Submissions retry when a concurrent writer takes the same business id.
SUBMIT_ATTEMPTS = 10


class CaseService(Generic[CaseT]):
    """
    Subclasses provide `kind` and the repository lookup; everything else about
    the specialist -> manager -> finance hand-offs is shared.
    """

    kind: CaseKind

    def __init__(self, *, session: AsyncSession, settings: Settings) -> None:
        self._session = session
        self._settings = settings
        self._audit = AuditRepo(session)
        self._notifications = NotificationService(session)

    async def _load(self, display_id: str, *, for_update: bool = False) -> CaseT | None:
        raise NotImplementedError

    async def _require(self, display_id: str) -> CaseT:
        item = await self._load(display_id.strip(), for_update=True)
        if item is None:
            raise NotFoundError(f"{self.kind.label} not found")
        return item

    async def get_visible(self, display_id: str, principal: Principal) -> CaseT:
        item = await self._load(display_id.strip())
        if item is None or not (
            principal.can_view_any_case or item.employee_id == principal.subject
        ):
            raise NotFoundError(
                f"{self.kind.label} not found or does not belong to this employee"
            )
        return item

    async def audit_trail(self, display_id: str, principal: Principal) -> list[AuditEvent]:
        item = await self.get_visible(display_id, principal)
        return await self._audit.list_for_entity(
            entity_type=self.kind.name, entity_id=item.display_id
        )

    def _refund_exists(self, refund: Refund | None = None) -> WorkflowError:
        noun = self.kind.name
        if refund is not None and refund.status == RefundStatus.paid:
            return WorkflowError(
                f"A refund for this {noun} has already been paid "
                f"in payroll run {refund.paid_in_payroll_run_id}"
            )
        return WorkflowError(
            f"A pending refund already exists for this {noun}. "
            "The finance staff ID can be found in the refund record."
        )

    async def _record(
        self,
        item: CaseT,
        *,
        actor: str,
        event_type: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        await self._audit.add(
            entity_type=self.kind.name,
            entity_id=item.display_id,
            actor=actor,
            event_type=event_type,
            details=details or {},
        )

    async def _record_transition(
        self, item: CaseT, transition: Transition, *, actor: str, details: dict[str, Any]
    ) -> None:
        await self._record(
            item,
            actor=actor,
            event_type=transition.event_type,
            details={
                "from_status": str(transition.from_status),
                "to_status": str(transition.to_status),
                **details,
            },
        )
        log.info(
            "case_transition",
            kind=self.kind.name,
            case_id=item.display_id,
            event_type=transition.event_type,
            from_status=str(transition.from_status),
            to_status=str(transition.to_status),
        )

    def _approved_amount(self, item: CaseT) -> Decimal | None:
        return getattr(item, self.kind.amount_field)

    async def review(
        self,
        display_id: str,
        *,
        actor: str,
        action: str,
        amount: Decimal | None = None,
        rejection_reason: str | None = None,
        comment: str | None = None,
    ) -> CaseT:
        item = await self._require(display_id)
        transition = specialist_decision(
            item,
            kind=self.kind,
            action=action,
            actor=actor,
            amount=amount,
            rejection_reason=rejection_reason,
            comment=comment,
        )

        if transition.to_status == CaseStatus.pending_manager_approval:
            await self._notifications.notify_employee(
                kind=self.kind,
                employee_id=item.employee_id,
                display_id=item.display_id,
                update="under_review",
            )
            await self._notifications.notify_payroll_managers(
                kind=self.kind, display_id=item.display_id
            )
        else:
            await self._notifications.notify_employee(
                kind=self.kind,
                employee_id=item.employee_id,
                display_id=item.display_id,
                update="rejected",
            )

        amount = self._approved_amount(item)
        await self._record_transition(
            item,
            transition,
            actor=actor,
            details={
                "amount": str(amount) if amount is not None else None,
                "rejection_reason": item.rejection_reason,
            },
        )
        await self._session.commit()
        return item

    async def confirm(
        self,
        display_id: str,
        *,
        actor: str,
        action: str = "approve",
        amount_override: Decimal | None = None,
        rejection_reason: str | None = None,
        comment: str | None = None,
    ) -> CaseT:
        if action == "reject":
            return await self.reject(
                display_id, actor=actor, rejection_reason=rejection_reason, comment=comment
            )
        if action != "approve":
            raise ValidationError('Invalid action. Must be "approve" or "reject"')

        item = await self._require(display_id)
        transition = manager_confirm(
            item, kind=self.kind, actor=actor, amount_override=amount_override, comment=comment
        )
        amount = self._approved_amount(item)
        if amount is None and self.kind.capped_by_claimed_amount:
            # Claims fall back to the claimed amount for the finance hand-off.
            amount = item.amount  # type: ignore[union-attr]

        await self._notifications.notify_employee(
            kind=self.kind,
            employee_id=item.employee_id,
            display_id=item.display_id,
            update="approved",
        )
        await self._notifications.notify_finance_staff(
            kind=self.kind, display_id=item.display_id, amount=amount
        )
        await self._record_transition(
            item,
            transition,
            actor=actor,
            details={"amount": str(amount) if amount is not None else None},
        )
        await self._session.commit()
        return item

    async def reject(
        self,
        display_id: str,
        *,
        actor: str,
        rejection_reason: str | None,
        comment: str | None = None,
    ) -> CaseT:
        item = await self._require(display_id)
        transition = manager_reject(
            item,
            kind=self.kind,
            actor=actor,
            rejection_reason=rejection_reason,
            comment=comment,
        )
        await self._notifications.notify_employee(
            kind=self.kind,
            employee_id=item.employee_id,
            display_id=item.display_id,
            update="rejected",
        )
        await self._record_transition(
            item, transition, actor=actor, details={"rejection_reason": item.rejection_reason}
        )
        await self._session.commit()
        return item


# --- Module Notes -----------------------------------------------------------
# `_require` loads with FOR UPDATE so two reviewers acting on the same item are
# serialized on backends that support row locks.
