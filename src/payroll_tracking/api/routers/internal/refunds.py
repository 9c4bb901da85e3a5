from __future__ import annotations

import uuid
from decimal import Decimal

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from payroll_tracking.api.deps import db_session
from payroll_tracking.auth.deps import require_roles
from payroll_tracking.auth.models import SystemRole
from payroll_tracking.services.refund_service import RefundService

router = APIRouter(dependencies=[Depends(require_roles(SystemRole.internal_system))])


class SettleRefundsRequest(BaseModel):
    employee_id: str = Field(min_length=1, max_length=64)
    payroll_run_id: str = Field(min_length=1, max_length=64)


class SettledRefund(BaseModel):
    refund_id: uuid.UUID
    description: str
    amount: Decimal


class SettleRefundsResponse(BaseModel):
    employee_id: str
    payroll_run_id: str
    refunds: list[SettledRefund]


@router.post("/settle", response_model=SettleRefundsResponse)
async def settle_refunds(
    body: SettleRefundsRequest,
    session: AsyncSession = Depends(db_session),
) -> SettleRefundsResponse:
    # Called once per employee while payroll execution builds the run's payslips.
    lines = await RefundService(session).settle_for_payroll_run(
        employee_id=body.employee_id, payroll_run_id=body.payroll_run_id
    )
    return SettleRefundsResponse(
        employee_id=body.employee_id,
        payroll_run_id=body.payroll_run_id,
        refunds=[SettledRefund.model_validate(line) for line in lines],
    )
