"""
payroll_tracking.api.schemas

Request/response models shared by the claims, disputes and refunds routers.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class _OrmModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class SpecialistReviewRequest(BaseModel):
    action: Literal["approve", "reject"]
    # Claims: approved amount; disputes: approved refund amount.
    approved_amount: Decimal | None = None
    rejection_reason: str | None = Field(default=None, max_length=2000)
    comment: str | None = Field(default=None, max_length=2000)


class ManagerConfirmRequest(BaseModel):
    action: Literal["approve", "reject"] = "approve"
    approved_amount: Decimal | None = None
    rejection_reason: str | None = Field(default=None, max_length=2000)
    comment: str | None = Field(default=None, max_length=2000)


class ManagerRejectRequest(BaseModel):
    rejection_reason: str = Field(max_length=2000)
    comment: str | None = Field(default=None, max_length=2000)


class GenerateRefundRequest(BaseModel):
    description: str | None = Field(default=None, max_length=2000)
    # Disputes only; claims always refund the approved (or claimed) amount.
    refund_amount: Decimal | None = None


class ClaimResponse(_OrmModel):
    claim_id: str
    employee_id: str
    description: str
    claim_type: str
    amount: Decimal
    approved_amount: Decimal | None
    status: str
    rejection_reason: str | None
    resolution_comment: str | None
    specialist_id: str | None
    manager_id: str | None
    finance_staff_id: str | None
    created_at: datetime
    updated_at: datetime


class DisputeResponse(_OrmModel):
    dispute_id: str
    employee_id: str
    payslip_id: uuid.UUID
    description: str
    approved_refund_amount: Decimal | None
    status: str
    rejection_reason: str | None
    resolution_comment: str | None
    specialist_id: str | None
    manager_id: str | None
    finance_staff_id: str | None
    created_at: datetime
    updated_at: datetime


class RefundResponse(_OrmModel):
    id: uuid.UUID
    claim_id: uuid.UUID | None
    dispute_id: uuid.UUID | None
    employee_id: str
    finance_staff_id: str
    description: str
    amount: Decimal
    status: str
    paid_in_payroll_run_id: str | None
    created_at: datetime


class AuditEventResponse(_OrmModel):
    id: uuid.UUID
    event_type: str
    actor: str
    details: dict[str, Any]
    created_at: datetime
