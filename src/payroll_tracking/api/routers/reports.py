"""
payroll_tracking.api.routers.reports

Finance staff reports (JSON, generated on request).
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from payroll_tracking.api.deps import db_session
from payroll_tracking.auth.deps import require_roles
from payroll_tracking.auth.models import Principal, SystemRole
from payroll_tracking.services.reporting import ReportService, SummaryType, TaxDocumentType

router = APIRouter(prefix="/v1/reports", tags=["reports"])

_finance = require_roles(SystemRole.finance_staff)


class PayrollSummaryRequest(BaseModel):
    summary_type: SummaryType
    # Any date inside the month (Month-End) or year (Year-End) to summarise.
    period: date


class PayrollSummaryResponse(BaseModel):
    summary_type: str
    period_start: date
    period_end: date
    employees_count: int
    payroll_runs_count: int
    payslips_count: int
    total_gross_pay: Decimal
    total_net_pay: Decimal
    total_tax_deductions: Decimal
    total_insurance_deductions: Decimal
    total_employer_contributions: Decimal
    generated_at: datetime


class TaxInsuranceBenefitsRequest(BaseModel):
    document_type: TaxDocumentType
    year: int
    # "Q1".."Q4" for quarterly reports, "1".."12" for monthly summaries.
    period: str | None = Field(default=None, max_length=8)


class TaxLine(BaseModel):
    name: str
    rate: Decimal
    amount: Decimal


class TaxInsuranceBenefitsResponse(BaseModel):
    document_type: str
    year: int
    period: str | None
    period_start: date
    period_end: date
    tax_breakdown: list[TaxLine]
    total_tax_amount: Decimal
    total_insurance_amount: Decimal
    total_benefits_amount: Decimal
    payroll_runs_count: int
    generated_at: datetime


@router.post("/payroll-summary", response_model=PayrollSummaryResponse)
async def generate_payroll_summary(
    body: PayrollSummaryRequest,
    principal: Principal = Depends(_finance),
    session: AsyncSession = Depends(db_session),
) -> PayrollSummaryResponse:
    report = await ReportService(session).payroll_summary(
        summary_type=body.summary_type, period=body.period, requested_by=principal.subject
    )
    return PayrollSummaryResponse.model_validate(report)


@router.post("/tax-insurance-benefits", response_model=TaxInsuranceBenefitsResponse)
async def generate_tax_insurance_benefits_report(
    body: TaxInsuranceBenefitsRequest,
    principal: Principal = Depends(_finance),
    session: AsyncSession = Depends(db_session),
) -> TaxInsuranceBenefitsResponse:
    report = await ReportService(session).tax_insurance_benefits(
        document_type=body.document_type,
        year=body.year,
        period=body.period,
        requested_by=principal.subject,
    )
    return TaxInsuranceBenefitsResponse.model_validate(report)
