"""
payroll_tracking.services.notification_service

In-app notifications for the claim/dispute workflow.

Responsibilities:
- Tell the employee when their claim/dispute changes stage.
- Tell payroll managers when an item awaits confirmation.
- Tell finance staff when an approved item needs a refund.
- Read/acknowledge notifications for the current caller. Read state is kept
  per reader, so one finance clerk acknowledging a role-wide notice does not
  hide it from the rest of the role.

Notifications are written in the caller's transaction; they commit or roll
back together with the status change that produced them.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Literal

from sqlalchemy.ext.asyncio import AsyncSession

from payroll_tracking.auth.models import Principal, SystemRole
from payroll_tracking.db.models import Notification, NotificationType
from payroll_tracking.db.repositories.notifications import NotificationRepo
from payroll_tracking.errors import NotFoundError
from payroll_tracking.workflow.transitions import CaseKind

EmployeeUpdate = Literal["approved", "rejected", "under_review"]

FINANCE_REFUND_TITLE_SUFFIX = "Approved - Refund Required"

_STATUS_TITLES: dict[EmployeeUpdate, str] = {
    "approved": "Approved",
    "rejected": "Rejected",
    "under_review": "Under Review",
}


@dataclass(frozen=True, slots=True)
class NotificationView:
    """A notification as seen by one reader."""

    id: uuid.UUID
    recipient_id: str | None
    recipient_role: str | None
    type: NotificationType
    title: str
    message: str
    related_entity_id: str | None
    related_module: str
    created_at: datetime
    is_read: bool

    @classmethod
    def of(cls, note: Notification, *, is_read: bool) -> NotificationView:
        return cls(
            id=note.id,
            recipient_id=note.recipient_id,
            recipient_role=note.recipient_role,
            type=note.type,
            title=note.title,
            message=note.message,
            related_entity_id=note.related_entity_id,
            related_module=note.related_module,
            created_at=note.created_at,
            is_read=is_read,
        )


def _entity_label(kind: CaseKind) -> str:
    return "Dispute" if kind.name == "dispute" else "Expense Claim"


def _entity_phrase(kind: CaseKind) -> str:
    return "dispute" if kind.name == "dispute" else "expense claim"


def finance_refund_title(kind: CaseKind) -> str:
    return f"{_entity_label(kind)} {FINANCE_REFUND_TITLE_SUFFIX}"


class NotificationService:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._repo = NotificationRepo(session)

    async def notify_employee(
        self,
        *,
        kind: CaseKind,
        employee_id: str,
        display_id: str,
        update: EmployeeUpdate,
    ) -> Notification:
        phrase = _entity_phrase(kind)
        messages: dict[EmployeeUpdate, str] = {
            "approved": f"Your {phrase} {display_id} has been approved and confirmed.",
            "rejected": f"Your {phrase} {display_id} has been rejected.",
            "under_review": (
                f"Your {phrase} {display_id} is now under review by a Payroll Specialist."
            ),
        }
        return await self._repo.add(
            recipient_id=employee_id,
            type=NotificationType.warning if update == "rejected" else NotificationType.info,
            title=f"{_entity_label(kind)} {_STATUS_TITLES[update]}",
            message=messages[update],
            related_entity_id=display_id,
        )

    async def notify_payroll_managers(self, *, kind: CaseKind, display_id: str) -> Notification:
        phrase = _entity_phrase(kind).capitalize()
        return await self._repo.add(
            recipient_role=SystemRole.payroll_manager,
            type=NotificationType.info,
            title=f"{_entity_label(kind)} Pending Manager Approval",
            message=(
                f"{phrase} {display_id} has been approved by the Payroll Specialist "
                "and is now awaiting your confirmation."
            ),
            related_entity_id=display_id,
        )

    async def notify_finance_staff(
        self, *, kind: CaseKind, display_id: str, amount: Decimal | None
    ) -> Notification:
        phrase = _entity_phrase(kind).capitalize()
        amount_label = "Approved refund amount" if kind.name == "dispute" else "Approved amount"
        return await self._repo.add(
            recipient_role=SystemRole.finance_staff,
            type=NotificationType.info,
            title=finance_refund_title(kind),
            message=(
                f"{phrase} {display_id} has been approved and confirmed. "
                f"{amount_label}: {amount if amount is not None else 0}. "
                "Please process the refund."
            ),
            related_entity_id=display_id,
        )

    async def list_for(
        self, principal: Principal, *, unread_only: bool = False, title: str | None = None
    ) -> list[NotificationView]:
        rows = await self._repo.list_for_recipient(
            recipient_id=principal.subject,
            roles=principal.roles,
            unread_only=unread_only,
            title=title,
        )
        return [NotificationView.of(note, is_read=is_read) for note, is_read in rows]

    async def mark_read(
        self, notification_id: uuid.UUID, principal: Principal
    ) -> NotificationView:
        note = await self._repo.get(notification_id)
        addressed = note is not None and (
            note.recipient_id == principal.subject
            or (note.recipient_role is not None and note.recipient_role in principal.roles)
            or principal.is_admin
        )
        if note is None or not addressed:
            raise NotFoundError("Notification not found")
        if not await self._repo.is_read_by(note.id, principal.subject):
            await self._repo.add_read(note.id, principal.subject)
            await self._session.commit()
        return NotificationView.of(note, is_read=True)
