"""
payroll_tracking.workflow.transitions

Status transitions for claims and disputes.

Responsibilities:
- Enforce the linear approval workflow:
  under review -> pending payroll Manager approval -> approved | rejected
  (a specialist may also reject straight from under review).
- Validate stage inputs (amounts, rejection reasons).
- Maintain the append-only `resolution_comment` log.

These functions mutate the in-memory ORM object only; persistence, notifications
and audit are the service layer's job.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Literal, Protocol

from payroll_tracking.db.models import CaseStatus
from payroll_tracking.errors import ValidationError, WorkflowError
from payroll_tracking.observability.logging import get_logger

log = get_logger(__name__)

ReviewAction = Literal["approve", "reject"]

SPECIALIST_PREFIX = "Payroll Specialist:"
MANAGER_CONFIRMED = "Manager confirmed"
_CENTS = Decimal("0.01")


class ReviewableCase(Protocol):
    status: CaseStatus
    rejection_reason: str | None
    resolution_comment: str | None
    specialist_id: str | None
    manager_id: str | None

    @property
    def display_id(self) -> str: ...


@dataclass(frozen=True, slots=True)
class CaseKind:
    name: str
    label: str
    amount_field: str
    amount_label: str
    proposal_label: str
    # Claims cannot be approved above what the employee asked for.
    capped_by_claimed_amount: bool


CLAIM = CaseKind(
    name="claim",
    label="Claim",
    amount_field="approved_amount",
    amount_label="Approved amount",
    proposal_label="Proposed approved amount",
    capped_by_claimed_amount=True,
)

DISPUTE = CaseKind(
    name="dispute",
    label="Dispute",
    amount_field="approved_refund_amount",
    amount_label="Approved refund amount",
    proposal_label="Proposed refund amount",
    capped_by_claimed_amount=False,
)


@dataclass(frozen=True, slots=True)
class Transition:
    event_type: str
    from_status: CaseStatus
    to_status: CaseStatus


def to_money(value: Decimal | int | float | str) -> Decimal:
    return Decimal(str(value)).quantize(_CENTS)


def append_comment(existing: str | None, line: str) -> str:
    return f"{existing}\n{line}" if existing else line


def ensure_not_processed(item: ReviewableCase, kind: CaseKind) -> None:
    if item.status == CaseStatus.approved:
        raise WorkflowError(
            f"{kind.label} has already been approved and cannot be modified"
        )
    if item.status == CaseStatus.rejected:
        raise WorkflowError(
            f"{kind.label} has already been rejected and cannot be modified"
        )


def _require_reason(reason: str | None, kind: CaseKind) -> str:
    if reason is None or not reason.strip():
        raise ValidationError(
            f"Rejection reason is required when rejecting a {kind.name}"
        )
    return reason.strip()


def _validate_amount(
    item: ReviewableCase, kind: CaseKind, value: Decimal | None, *, required: bool
) -> Decimal | None:
    if value is None:
        if required:
            raise ValidationError(
                f"{kind.amount_label} is required when approving a {kind.name}"
            )
        return None
    amount = to_money(value)
    if amount < 0:
        raise ValidationError(f"{kind.amount_label} cannot be negative")
    if kind.capped_by_claimed_amount:
        claimed = to_money(item.amount)  # type: ignore[attr-defined]
        if amount > claimed:
            raise ValidationError(
                f"{kind.amount_label} ({amount}) cannot exceed the claimed amount ({claimed})."
            )
    return amount


def specialist_decision(
    item: ReviewableCase,
    *,
    kind: CaseKind,
    action: str,
    actor: str,
    amount: Decimal | None = None,
    rejection_reason: str | None = None,
    comment: str | None = None,
) -> Transition:
    """
    First review stage, performed by a payroll specialist on an `under review` item.

    approve: records the proposed amount and hands over to a payroll manager.
    reject: closes the item.
    """
    if action not in ("approve", "reject"):
        raise ValidationError('Invalid action. Must be "approve" or "reject"')

    ensure_not_processed(item, kind)
    if item.status == CaseStatus.pending_manager_approval:
        raise WorkflowError(
            f"{kind.label} has already been approved by a Payroll Specialist "
            "and is awaiting manager confirmation"
        )
    if item.status != CaseStatus.under_review:
        raise WorkflowError(f"{kind.label} is not in under review status")

    from_status = item.status
    comment = comment.strip() if comment else None

    if action == "approve":
        approved = _validate_amount(item, kind, amount, required=True)
        setattr(item, kind.amount_field, approved)
        item.status = CaseStatus.pending_manager_approval
        body = comment or "Approved for manager review"
        item.resolution_comment = (
            f"{SPECIALIST_PREFIX} {body} ({kind.proposal_label}: {approved})"
        )
        event_type = f"{kind.name.upper()}_SPECIALIST_APPROVED"
    else:
        reason = _require_reason(rejection_reason, kind)
        item.status = CaseStatus.rejected
        item.rejection_reason = reason
        line = (
            f"Payroll Specialist rejected: {comment}. Reason: {reason}"
            if comment
            else f"Payroll Specialist rejected. Reason: {reason}"
        )
        item.resolution_comment = append_comment(item.resolution_comment, line)
        event_type = f"{kind.name.upper()}_SPECIALIST_REJECTED"

    item.specialist_id = actor
    return Transition(event_type=event_type, from_status=from_status, to_status=item.status)


def manager_confirm(
    item: ReviewableCase,
    *,
    kind: CaseKind,
    actor: str,
    amount_override: Decimal | None = None,
    comment: str | None = None,
) -> Transition:
    """
    Second stage: a payroll manager confirms the specialist's approval.
    The manager may override the approved amount within the same bounds.
    """
    ensure_not_processed(item, kind)
    if item.status != CaseStatus.pending_manager_approval:
        raise WorkflowError(
            f"{kind.label} must be approved by Payroll Specialist before manager confirmation"
        )

    if not item.resolution_comment:
        log.warning(
            "missing_specialist_comment",
            kind=kind.name,
            case_id=item.display_id,
        )
        item.resolution_comment = (
            f"{SPECIALIST_PREFIX} Approved for manager review "
            "(resolution comment was missing, but status indicates approval)"
        )
    if item.manager_id is not None:
        raise WorkflowError(
            f"{kind.label} {item.display_id} has already been confirmed by a manager"
        )

    override = _validate_amount(item, kind, amount_override, required=False)
    if override is not None:
        setattr(item, kind.amount_field, override)
    elif not getattr(item, kind.amount_field):
        log.warning("confirmed_without_amount", kind=kind.name, case_id=item.display_id)

    from_status = item.status
    item.status = CaseStatus.approved
    comment = comment.strip() if comment else None
    line = f"{MANAGER_CONFIRMED}: {comment}" if comment else f"{MANAGER_CONFIRMED} approval"
    item.resolution_comment = append_comment(item.resolution_comment, line)
    item.manager_id = actor
    return Transition(
        event_type=f"{kind.name.upper()}_MANAGER_CONFIRMED",
        from_status=from_status,
        to_status=item.status,
    )


def manager_reject(
    item: ReviewableCase,
    *,
    kind: CaseKind,
    actor: str,
    rejection_reason: str | None,
    comment: str | None = None,
) -> Transition:
    reason = _require_reason(rejection_reason, kind)
    ensure_not_processed(item, kind)
    if item.status != CaseStatus.pending_manager_approval:
        raise WorkflowError(
            f'{kind.label} {item.display_id} must be in "{CaseStatus.pending_manager_approval}" '
            f"status to be rejected by a manager. Current status: {item.status}"
        )

    from_status = item.status
    item.status = CaseStatus.rejected
    item.rejection_reason = reason
    comment = comment.strip() if comment else None
    line = (
        f"Manager rejected: {comment}. Reason: {reason}"
        if comment
        else f"Manager rejected. Reason: {reason}"
    )
    item.resolution_comment = append_comment(item.resolution_comment, line)
    item.manager_id = actor
    return Transition(
        event_type=f"{kind.name.upper()}_MANAGER_REJECTED",
        from_status=from_status,
        to_status=item.status,
    )
