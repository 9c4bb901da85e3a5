"""
tests.test_reports_api

Finance reports built from recorded payslips.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from decimal import Decimal
from typing import Any

import httpx
import pytest

AuthHeaders = Callable[..., dict[str, str]]
RecordPayslip = Callable[..., Awaitable[dict[str, Any]]]


async def _record_quarter(record_payslip: RecordPayslip) -> None:
    await record_payslip("EMP-1", payroll_run_id="RUN-2026-08", payroll_period="2026-08-31")
    await record_payslip("EMP-1")
    await record_payslip("EMP-2")


@pytest.mark.asyncio
async def test_month_end_payroll_summary(
    client: httpx.AsyncClient, auth: AuthHeaders, record_payslip: RecordPayslip
) -> None:
    await _record_quarter(record_payslip)

    r = await client.post(
        "/v1/reports/payroll-summary",
        json={"summary_type": "Month-End", "period": "2026-09-15"},
        headers=auth("FIN-1", "finance_staff"),
    )
    assert r.status_code == 200, r.text
    body = r.json()
    assert (body["period_start"], body["period_end"]) == ("2026-09-01", "2026-09-30")
    assert body["employees_count"] == 2
    assert body["payroll_runs_count"] == 1
    assert body["payslips_count"] == 2
    # Rates apply to total gross salary (11400 per payslip).
    assert Decimal(body["total_gross_pay"]) == Decimal("22800.00")
    assert Decimal(body["total_net_pay"]) == Decimal("19300.00")
    assert Decimal(body["total_tax_deductions"]) == Decimal("2280.00")
    assert Decimal(body["total_insurance_deductions"]) == Decimal("1140.00")
    assert Decimal(body["total_employer_contributions"]) == Decimal("1824.00")


@pytest.mark.asyncio
async def test_year_end_payroll_summary(
    client: httpx.AsyncClient, auth: AuthHeaders, record_payslip: RecordPayslip
) -> None:
    await _record_quarter(record_payslip)

    r = await client.post(
        "/v1/reports/payroll-summary",
        json={"summary_type": "Year-End", "period": "2026-01-01"},
        headers=auth("FIN-1", "finance_staff"),
    )
    body = r.json()
    assert (body["period_start"], body["period_end"]) == ("2026-01-01", "2026-12-31")
    assert body["payroll_runs_count"] == 2
    assert body["payslips_count"] == 3
    assert Decimal(body["total_gross_pay"]) == Decimal("34200.00")


@pytest.mark.asyncio
async def test_quarterly_tax_insurance_benefits_report(
    client: httpx.AsyncClient, auth: AuthHeaders, record_payslip: RecordPayslip
) -> None:
    await _record_quarter(record_payslip)

    r = await client.post(
        "/v1/reports/tax-insurance-benefits",
        json={"document_type": "Quarterly Tax Report", "year": 2026, "period": "Q3"},
        headers=auth("FIN-1", "finance_staff"),
    )
    assert r.status_code == 200, r.text
    body = r.json()
    assert (body["period_start"], body["period_end"]) == ("2026-07-01", "2026-09-30")
    [tax] = body["tax_breakdown"]
    assert tax["name"] == "Income Tax"
    assert Decimal(tax["rate"]) == Decimal("10")
    assert Decimal(tax["amount"]) == Decimal("3420.00")
    assert Decimal(body["total_tax_amount"]) == Decimal("3420.00")
    assert Decimal(body["total_insurance_amount"]) == Decimal("1710.00")
    assert Decimal(body["total_benefits_amount"]) == Decimal("300.00")
    assert body["payroll_runs_count"] == 2

    r = await client.post(
        "/v1/reports/tax-insurance-benefits",
        json={"document_type": "Monthly Tax Summary", "year": 2026, "period": "8"},
        headers=auth("FIN-1", "finance_staff"),
    )
    assert Decimal(r.json()["total_tax_amount"]) == Decimal("1140.00")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("body", "status", "detail"),
    [
        (
            {"document_type": "Quarterly Tax Report", "year": 2026, "period": "Q5"},
            400,
            "Invalid period format for Quarterly Tax Report. Must be Q1, Q2, Q3, or Q4",
        ),
        (
            {"document_type": "Monthly Tax Summary", "year": 2026},
            400,
            'Period is required for Monthly Tax Summary (e.g., "1" for January, '
            '"12" for December)',
        ),
        (
            {"document_type": "Annual Tax Statement", "year": 1999},
            400,
            "Valid year is required (between 2000 and 2100)",
        ),
        (
            {"document_type": "Annual Tax Statement", "year": 2025},
            404,
            "No payroll runs found for the specified period",
        ),
    ],
)
async def test_tax_report_validation(
    client: httpx.AsyncClient,
    auth: AuthHeaders,
    record_payslip: RecordPayslip,
    body: dict[str, Any],
    status: int,
    detail: str,
) -> None:
    await record_payslip("EMP-1")

    r = await client.post(
        "/v1/reports/tax-insurance-benefits", json=body, headers=auth("FIN-1", "finance_staff")
    )
    assert r.status_code == status
    assert r.json()["detail"] == detail


@pytest.mark.asyncio
async def test_reports_are_finance_only(client: httpx.AsyncClient, auth: AuthHeaders) -> None:
    body = {"summary_type": "Month-End", "period": "2026-09-01"}
    for headers in (auth("EMP-1"), auth("MGR-1", "payroll_manager")):
        r = await client.post("/v1/reports/payroll-summary", json=body, headers=headers)
        assert r.status_code == 403
