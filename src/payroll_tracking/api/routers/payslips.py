"""
payroll_tracking.api.routers.payslips

Employee payslip self-service.

Responsibilities:
- List/read payslips (own, or any for payroll specialists/managers).
- Serve derived breakdowns per payslip (tax, insurance, penalties, unpaid
  leave, employer contributions, compensations, leave compensation,
  transportation) and summed over all of the caller's payslips.
- Serve salary history and the current base salary.
"""

from __future__ import annotations

import uuid
from collections.abc import Awaitable, Callable
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Literal

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict
from sqlalchemy.ext.asyncio import AsyncSession

from payroll_tracking.api.deps import db_session
from payroll_tracking.auth.deps import get_principal
from payroll_tracking.auth.models import Principal
from payroll_tracking.services.payslip_service import PayslipService

router = APIRouter(prefix="/v1", tags=["payslips"])

BreakdownSection = Literal[
    "tax-deductions",
    "insurance-deductions",
    "penalty-deductions",
    "unpaid-leave-deductions",
    "employer-contributions",
    "compensations",
    "leave-compensation",
    "transportation",
]


class PayslipResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    employee_id: str
    payroll_run_id: str
    payroll_period: date
    base_salary: Decimal
    total_gross_salary: Decimal
    total_deductions: Decimal
    net_pay: Decimal
    earnings: dict[str, Any]
    deductions: dict[str, Any]
    payment_status: str
    created_at: datetime


class BreakdownResponse(BaseModel):
    payslip_id: uuid.UUID
    gross_salary: Decimal | None = None
    base_salary: Decimal | None = None
    items: list[dict[str, Any]]
    total: Decimal


class SalaryHistoryEntry(BaseModel):
    payslip_id: uuid.UUID
    payroll_run_id: str
    payroll_period: date
    base_salary: Decimal
    total_gross_salary: Decimal
    total_deductions: Decimal
    net_pay: Decimal
    payment_status: str


class AggregateResponse(BaseModel):
    payslip_count: int
    items: list[dict[str, Any]]
    total: Decimal


class BaseSalaryResponse(BaseModel):
    employee_id: str
    base_salary: Decimal | None
    latest_payroll_period: date | None
    payslip_id: uuid.UUID | None


# Path under /v1 -> breakdown section, summed over all of the caller's payslips.
AGGREGATE_PATHS: dict[str, str] = {
    "tax-deductions": "tax-deductions",
    "insurance-deductions": "insurance-deductions",
    "penalty-deductions": "penalty-deductions",
    "unpaid-leave-deductions": "unpaid-leave-deductions",
    "employer-contributions": "employer-contributions",
    "compensations": "compensations",
    "transportation-compensations": "transportation",
}


@router.get("/payslips", response_model=list[PayslipResponse])
async def list_my_payslips(
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(db_session),
) -> list[PayslipResponse]:
    payslips = await PayslipService(session).list_for_employee(principal.subject)
    return [PayslipResponse.model_validate(p) for p in payslips]


@router.get("/payslips/{payslip_id}", response_model=PayslipResponse)
async def get_payslip(
    payslip_id: uuid.UUID,
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(db_session),
) -> PayslipResponse:
    payslip = await PayslipService(session).get_visible(payslip_id, principal)
    return PayslipResponse.model_validate(payslip)


@router.get("/payslips/{payslip_id}/{section}", response_model=BreakdownResponse)
async def get_payslip_breakdown(
    payslip_id: uuid.UUID,
    section: BreakdownSection,
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(db_session),
) -> BreakdownResponse:
    data = await PayslipService(session).breakdown(payslip_id, principal, section=section)
    return BreakdownResponse.model_validate(data)


@router.get("/salary/history", response_model=list[SalaryHistoryEntry])
async def get_salary_history(
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(db_session),
) -> list[SalaryHistoryEntry]:
    history = await PayslipService(session).salary_history(principal.subject)
    return [SalaryHistoryEntry.model_validate(entry) for entry in history]


@router.get("/salary/base", response_model=BaseSalaryResponse)
async def get_base_salary(
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(db_session),
) -> BaseSalaryResponse:
    data = await PayslipService(session).base_salary(principal.subject)
    return BaseSalaryResponse.model_validate(data)


def _aggregate_endpoint(section: str) -> Callable[..., Awaitable[AggregateResponse]]:
    async def endpoint(
        principal: Principal = Depends(get_principal),
        session: AsyncSession = Depends(db_session),
    ) -> AggregateResponse:
        data = await PayslipService(session).aggregate(principal.subject, section=section)
        return AggregateResponse.model_validate(data)

    return endpoint


for _path, _section in AGGREGATE_PATHS.items():
    router.add_api_route(
        f"/{_path}",
        _aggregate_endpoint(_section),
        methods=["GET"],
        response_model=AggregateResponse,
        name=f"list_{_path.replace('-', '_')}",
    )
