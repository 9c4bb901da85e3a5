"""
payroll_tracking.services.reporting

Finance reports aggregated on the fly from recorded payslips.

Responsibilities:
- Resolve report windows (month-end/year-end summaries; annual, quarterly
  and monthly tax documents).
- Payroll summary: gross/net pay, tax and insurance deductions, employer
  contributions, headcount and payroll run count for a window.
- Tax/insurance/benefits report: per-tax totals plus insurance and benefit
  totals for a window.

Report figures apply rates to each payslip's total gross salary. Reports are
returned as JSON and never stored.
"""

from __future__ import annotations

import calendar
from collections.abc import Sequence
from datetime import UTC, date, datetime
from decimal import Decimal
from typing import Any, Literal

from sqlalchemy.ext.asyncio import AsyncSession

from payroll_tracking.db.models import Payslip
from payroll_tracking.db.repositories.payslips import PayslipRepo
from payroll_tracking.errors import NotFoundError, ValidationError
from payroll_tracking.observability.logging import get_logger
from payroll_tracking.workflow.transitions import to_money

log = get_logger(__name__)

SummaryType = Literal["Month-End", "Year-End"]
TaxDocumentType = Literal["Annual Tax Statement", "Quarterly Tax Report", "Monthly Tax Summary"]

_ZERO = Decimal("0")


def _dec(value: Any) -> Decimal:
    if value is None or value == "":
        return _ZERO
    return Decimal(str(value))


def _month_end(year: int, month: int) -> date:
    return date(year, month, calendar.monthrange(year, month)[1])


def summary_window(summary_type: SummaryType, period: date) -> tuple[date, date]:
    if summary_type == "Year-End":
        return date(period.year, 1, 1), date(period.year, 12, 31)
    return date(period.year, period.month, 1), _month_end(period.year, period.month)


def tax_document_window(
    document_type: TaxDocumentType, year: int, period: str | None
) -> tuple[date, date]:
    if not 2000 <= year <= 2100:
        raise ValidationError("Valid year is required (between 2000 and 2100)")

    if document_type == "Quarterly Tax Report":
        if not period:
            raise ValidationError(
                'Period is required for Quarterly Tax Report (e.g., "Q1", "Q2", "Q3", "Q4")'
            )
        quarter = period.strip().upper().removeprefix("Q")
        if quarter not in {"1", "2", "3", "4"}:
            raise ValidationError(
                "Invalid period format for Quarterly Tax Report. Must be Q1, Q2, Q3, or Q4"
            )
        last_month = int(quarter) * 3
        return date(year, last_month - 2, 1), _month_end(year, last_month)

    if document_type == "Monthly Tax Summary":
        if not period:
            raise ValidationError(
                'Period is required for Monthly Tax Summary (e.g., "1" for January, '
                '"12" for December)'
            )
        month = period.strip()
        if not month.isdigit() or not 1 <= int(month) <= 12:
            raise ValidationError(
                "Invalid period format for Monthly Tax Summary. "
                "Must be a number between 1 and 12"
            )
        return date(year, int(month), 1), _month_end(year, int(month))

    return date(year, 1, 1), date(year, 12, 31)


def _percent(base: Decimal, rate: Any) -> Decimal:
    return base * _dec(rate) / Decimal(100)


def _deductions(payslip: Payslip, key: str) -> list[dict[str, Any]]:
    return list((payslip.deductions or {}).get(key) or [])


def payroll_summary(
    payslips: Sequence[Payslip], *, summary_type: SummaryType, start: date, end: date
) -> dict[str, Any]:
    tax = insurance = employer = _ZERO
    for p in payslips:
        gross = _dec(p.total_gross_salary)
        tax += sum((_percent(gross, t.get("rate")) for t in _deductions(p, "taxes")), _ZERO)
        for ins in _deductions(p, "insurances"):
            insurance += _percent(gross, ins.get("employee_rate"))
            employer += _percent(gross, ins.get("employer_rate"))

    return {
        "summary_type": summary_type,
        "period_start": start,
        "period_end": end,
        "employees_count": len({p.employee_id for p in payslips}),
        "payroll_runs_count": len({p.payroll_run_id for p in payslips}),
        "payslips_count": len(payslips),
        "total_gross_pay": to_money(sum((_dec(p.total_gross_salary) for p in payslips), _ZERO)),
        "total_net_pay": to_money(sum((_dec(p.net_pay) for p in payslips), _ZERO)),
        "total_tax_deductions": to_money(tax),
        "total_insurance_deductions": to_money(insurance),
        "total_employer_contributions": to_money(employer),
        "generated_at": datetime.now(tz=UTC),
    }


def tax_insurance_benefits_report(
    payslips: Sequence[Payslip],
    *,
    document_type: TaxDocumentType,
    year: int,
    period: str | None,
    start: date,
    end: date,
) -> dict[str, Any]:
    by_tax: dict[str, dict[str, Any]] = {}
    insurance = benefits = _ZERO
    for p in payslips:
        gross = _dec(p.total_gross_salary)
        for tax in _deductions(p, "taxes"):
            name = str(tax.get("name") or "Unnamed tax")
            row = by_tax.setdefault(
                name, {"name": name, "rate": _dec(tax.get("rate")), "amount": _ZERO}
            )
            row["amount"] += _percent(gross, tax.get("rate"))
        for ins in _deductions(p, "insurances"):
            insurance += _percent(gross, ins.get("employee_rate"))
        for benefit in (p.earnings or {}).get("benefits") or []:
            benefits += _dec(benefit.get("amount"))

    tax_rows = [{**row, "amount": to_money(row["amount"])} for row in by_tax.values()]
    return {
        "document_type": document_type,
        "year": year,
        "period": period,
        "period_start": start,
        "period_end": end,
        "tax_breakdown": tax_rows,
        "total_tax_amount": to_money(sum((r["amount"] for r in tax_rows), _ZERO)),
        "total_insurance_amount": to_money(insurance),
        "total_benefits_amount": to_money(benefits),
        "payroll_runs_count": len({p.payroll_run_id for p in payslips}),
        "generated_at": datetime.now(tz=UTC),
    }


class ReportService:
    def __init__(self, session: AsyncSession) -> None:
        self._payslips = PayslipRepo(session)

    async def _payslips_between(self, start: date, end: date) -> list[Payslip]:
        payslips = await self._payslips.list_in_period(start, end)
        if not payslips:
            raise NotFoundError("No payroll runs found for the specified period")
        return payslips

    async def payroll_summary(
        self, *, summary_type: SummaryType, period: date, requested_by: str
    ) -> dict[str, Any]:
        start, end = summary_window(summary_type, period)
        report = payroll_summary(
            await self._payslips_between(start, end),
            summary_type=summary_type,
            start=start,
            end=end,
        )
        log.info(
            "report_generated",
            report="payroll_summary",
            summary_type=summary_type,
            period_start=start.isoformat(),
            requested_by=requested_by,
        )
        return report

    async def tax_insurance_benefits(
        self,
        *,
        document_type: TaxDocumentType,
        year: int,
        period: str | None,
        requested_by: str,
    ) -> dict[str, Any]:
        start, end = tax_document_window(document_type, year, period)
        report = tax_insurance_benefits_report(
            await self._payslips_between(start, end),
            document_type=document_type,
            year=year,
            period=period,
            start=start,
            end=end,
        )
        log.info(
            "report_generated",
            report="tax_insurance_benefits",
            document_type=document_type,
            period_start=start.isoformat(),
            requested_by=requested_by,
        )
        return report
