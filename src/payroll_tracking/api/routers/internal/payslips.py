from __future__ import annotations

from datetime import date
from decimal import Decimal

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_201_CREATED

from payroll_tracking.api.deps import db_session
from payroll_tracking.api.routers.payslips import PayslipResponse
from payroll_tracking.auth.deps import require_roles
from payroll_tracking.auth.models import SystemRole
from payroll_tracking.services.payslip_service import PayslipService

router = APIRouter(dependencies=[Depends(require_roles(SystemRole.internal_system))])


class EarningLine(BaseModel):
    name: str
    amount: Decimal
    description: str | None = None
    terms: str | None = None


class RefundLine(BaseModel):
    description: str
    amount: Decimal


class TaxLine(BaseModel):
    name: str
    rate: Decimal = Field(ge=0, le=100)
    description: str | None = None
    status: str | None = None


class InsuranceLine(BaseModel):
    name: str
    employee_rate: Decimal = Field(ge=0, le=100)
    employer_rate: Decimal = Field(ge=0, le=100)
    min_salary: Decimal | None = None
    max_salary: Decimal | None = None
    status: str | None = None


class PenaltyLine(BaseModel):
    reason: str
    amount: Decimal = Field(ge=0)


class Earnings(BaseModel):
    allowances: list[EarningLine] = Field(default_factory=list)
    bonuses: list[EarningLine] = Field(default_factory=list)
    benefits: list[EarningLine] = Field(default_factory=list)
    refunds: list[RefundLine] = Field(default_factory=list)


class Deductions(BaseModel):
    taxes: list[TaxLine] = Field(default_factory=list)
    insurances: list[InsuranceLine] = Field(default_factory=list)
    penalties: list[PenaltyLine] = Field(default_factory=list)


class PayslipRecordRequest(BaseModel):
    employee_id: str = Field(min_length=1, max_length=64)
    payroll_run_id: str = Field(min_length=1, max_length=64)
    payroll_period: date
    base_salary: Decimal = Field(ge=0)
    total_gross_salary: Decimal = Field(ge=0)
    total_deductions: Decimal = Field(ge=0)
    net_pay: Decimal
    earnings: Earnings = Field(default_factory=Earnings)
    deductions: Deductions = Field(default_factory=Deductions)
    payment_status: str = Field(default="pending", max_length=32)


@router.post("", response_model=PayslipResponse, status_code=HTTP_201_CREATED)
async def record_payslip(
    body: PayslipRecordRequest,
    session: AsyncSession = Depends(db_session),
) -> PayslipResponse:
    payslip = await PayslipService(session).record(
        employee_id=body.employee_id,
        payroll_run_id=body.payroll_run_id,
        payroll_period=body.payroll_period,
        base_salary=body.base_salary,
        total_gross_salary=body.total_gross_salary,
        total_deductions=body.total_deductions,
        net_pay=body.net_pay,
        earnings=body.earnings.model_dump(mode="json"),
        deductions=body.deductions.model_dump(mode="json"),
        payment_status=body.payment_status,
    )
    return PayslipResponse.model_validate(payslip)
