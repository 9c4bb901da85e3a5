"""
payroll_tracking.db.models

Persistence schema for payroll tracking.

Responsibilities:
- Define ORM models for the claim/dispute approval workflow:
  - Claim: expense reimbursement request
  - Dispute: objection to a payslip
  - Refund: money owed back to an employee for an approved claim/dispute
  - Payslip: generated payroll record (written by payroll execution)
  - Notification: in-app messages for employees and staff roles
  - NotificationRead: per-reader read receipts for notifications
  - AuditEvent: append-only audit trail
"""

from __future__ import annotations

import enum
import uuid
from datetime import UTC, date, datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import (
    JSON,
    CheckConstraint,
    Date,
    Enum,
    ForeignKey,
    Index,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    Uuid as SAUuid,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from payroll_tracking.db.base import Base

Money = Numeric(14, 2, asdecimal=True)


def _utcnow() -> datetime:
    # Naive UTC timestamps; SQLite does not keep tz info.
    return datetime.now(tz=UTC).replace(tzinfo=None)


def _enum(enum_cls: type[enum.Enum]) -> Enum:
    # Persist the enum *values* ("under review"), not member names.
    return Enum(
        enum_cls,
        values_callable=lambda members: [m.value for m in members],
        native_enum=False,
        length=64,
    )


class CaseStatus(enum.StrEnum):
    # Shared by claims and disputes. Values are a stable API contract.
    under_review = "under review"
    pending_manager_approval = "pending payroll Manager approval"
    approved = "approved"
    rejected = "rejected"


ACTIVE_CASE_STATUSES = (
    CaseStatus.under_review,
    CaseStatus.pending_manager_approval,
    CaseStatus.approved,
)


class RefundStatus(enum.StrEnum):
    pending = "pending"
    paid = "paid"


class NotificationType(enum.StrEnum):
    info = "Info"
    warning = "Warning"


class Claim(Base):
    __tablename__ = "claims"

    id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    claim_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    employee_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    description: Mapped[str] = mapped_column(Text, nullable=False)
    claim_type: Mapped[str] = mapped_column(String(128), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Money, nullable=False)
    approved_amount: Mapped[Decimal | None] = mapped_column(Money, nullable=True)

    status: Mapped[CaseStatus] = mapped_column(_enum(CaseStatus), nullable=False, index=True)
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    resolution_comment: Mapped[str | None] = mapped_column(Text, nullable=True)

    specialist_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    manager_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    finance_staff_id: Mapped[str | None] = mapped_column(String(64), nullable=True)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow, onupdate=_utcnow)

    refunds: Mapped[list[Refund]] = relationship(back_populates="claim")

    __table_args__ = (CheckConstraint("amount >= 0", name="ck_claims_amount_non_negative"),)

    @property
    def display_id(self) -> str:
        return self.claim_id


class Dispute(Base):
    __tablename__ = "disputes"

    id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    dispute_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    employee_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    payslip_id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), ForeignKey("payslips.id"), nullable=False, index=True
    )

    description: Mapped[str] = mapped_column(Text, nullable=False)
    approved_refund_amount: Mapped[Decimal | None] = mapped_column(Money, nullable=True)

    status: Mapped[CaseStatus] = mapped_column(_enum(CaseStatus), nullable=False, index=True)
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    resolution_comment: Mapped[str | None] = mapped_column(Text, nullable=True)

    specialist_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    manager_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    finance_staff_id: Mapped[str | None] = mapped_column(String(64), nullable=True)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow, onupdate=_utcnow)

    payslip: Mapped[Payslip] = relationship(back_populates="disputes")
    refunds: Mapped[list[Refund]] = relationship(back_populates="dispute")

    # One non-rejected dispute per (payslip, employee).
    __table_args__ = (
        Index(
            "uq_disputes_active_payslip",
            "payslip_id",
            "employee_id",
            unique=True,
            sqlite_where=text("status != 'rejected'"),
            postgresql_where=text("status != 'rejected'"),
        ),
    )

    @property
    def display_id(self) -> str:
        return self.dispute_id


class Refund(Base):
    __tablename__ = "refunds"

    id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    # At most one refund per claim or dispute; NULLs never collide.
    claim_id: Mapped[uuid.UUID | None] = mapped_column(
        SAUuid(as_uuid=True), ForeignKey("claims.id"), nullable=True, unique=True
    )
    dispute_id: Mapped[uuid.UUID | None] = mapped_column(
        SAUuid(as_uuid=True), ForeignKey("disputes.id"), nullable=True, unique=True
    )
    employee_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    finance_staff_id: Mapped[str] = mapped_column(String(64), nullable=False)

    description: Mapped[str] = mapped_column(Text, nullable=False)
    amount: Mapped[Decimal] = mapped_column(Money, nullable=False)
    status: Mapped[RefundStatus] = mapped_column(_enum(RefundStatus), nullable=False, index=True)
    paid_in_payroll_run_id: Mapped[str | None] = mapped_column(String(64), nullable=True)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow, onupdate=_utcnow)

    claim: Mapped[Claim | None] = relationship(back_populates="refunds")
    dispute: Mapped[Dispute | None] = relationship(back_populates="refunds")

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_refunds_amount_positive"),
        CheckConstraint(
            "(claim_id IS NULL) <> (dispute_id IS NULL)", name="ck_refunds_single_source"
        ),
    )


class Payslip(Base):
    __tablename__ = "payslips"

    id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    employee_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    payroll_run_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    payroll_period: Mapped[date] = mapped_column(Date, nullable=False)

    base_salary: Mapped[Decimal] = mapped_column(Money, nullable=False)
    total_gross_salary: Mapped[Decimal] = mapped_column(Money, nullable=False)
    total_deductions: Mapped[Decimal] = mapped_column(Money, nullable=False)
    net_pay: Mapped[Decimal] = mapped_column(Money, nullable=False)

    # {"allowances": [...], "bonuses": [...], "benefits": [...], "refunds": [...]}
    earnings: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    # {"taxes": [...], "insurances": [...], "penalties": [...]}
    deductions: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    payment_status: Mapped[str] = mapped_column(String(32), nullable=False, default="pending")

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)

    disputes: Mapped[list[Dispute]] = relationship(back_populates="payslip")

    __table_args__ = (Index("ix_payslips_employee_period", "employee_id", "payroll_period"),)


class Notification(Base):
    __tablename__ = "notifications"

    id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    # Unicast notifications set recipient_id; role multicast sets recipient_role.
    recipient_id: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    recipient_role: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)

    type: Mapped[NotificationType] = mapped_column(_enum(NotificationType), nullable=False)
    title: Mapped[str] = mapped_column(String(256), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    related_entity_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    related_module: Mapped[str] = mapped_column(String(64), nullable=False, default="Payroll")

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow, index=True)


class NotificationRead(Base):
    """Read receipt: role-addressed notifications are read per holder, not per role."""

    __tablename__ = "notification_reads"

    id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    notification_id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), ForeignKey("notifications.id"), nullable=False
    )
    reader_id: Mapped[str] = mapped_column(String(64), nullable=False)
    read_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)

    __table_args__ = (
        UniqueConstraint("notification_id", "reader_id", name="uq_notification_reads_reader"),
    )


class AuditEvent(Base):
    __tablename__ = "audit_events"

    id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    entity_type: Mapped[str] = mapped_column(String(32), nullable=False)  # claim / dispute
    entity_id: Mapped[str] = mapped_column(String(64), nullable=False)  # business id

    actor: Mapped[str] = mapped_column(String(256), nullable=False)
    event_type: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    details: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow, index=True)

    __table_args__ = (Index("ix_audit_entity_created", "entity_type", "entity_id", "created_at"),)


# --- Module Notes -----------------------------------------------------------
# Payslip earnings/deductions stay JSON: their shape is owned by payroll execution
# and is only read here for breakdowns (see `services.payslip_breakdown`).
