"""
tests.test_payslips_api

Payslip self-service: reads, derived breakdowns and salary history.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from decimal import Decimal
from typing import Any

import httpx
import pytest

AuthHeaders = Callable[..., dict[str, str]]
RecordPayslip = Callable[..., Awaitable[dict[str, Any]]]


@pytest.mark.asyncio
async def test_record_and_read_payslip(
    client: httpx.AsyncClient, auth: AuthHeaders, record_payslip: RecordPayslip
) -> None:
    payslip = await record_payslip("EMP-1")
    assert payslip["payroll_period"] == "2026-09-30"
    assert Decimal(payslip["net_pay"]) == Decimal("9650.00")
    assert payslip["payment_status"] == "pending"

    r = await client.get("/v1/payslips", headers=auth("EMP-1"))
    assert [p["id"] for p in r.json()] == [payslip["id"]]

    r = await client.get(f"/v1/payslips/{payslip['id']}", headers=auth("EMP-1"))
    assert r.status_code == 200
    assert r.json()["earnings"]["benefits"][0]["name"] == "Gym Membership"

    r = await client.get(f"/v1/payslips/{payslip['id']}", headers=auth("EMP-2"))
    assert r.status_code == 404

    r = await client.get(
        f"/v1/payslips/{payslip['id']}", headers=auth("PSP-1", "payroll_specialist")
    )
    assert r.status_code == 200

    # Finance staff review claims/disputes but not payslips.
    r = await client.get(f"/v1/payslips/{payslip['id']}", headers=auth("FIN-1", "finance_staff"))
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_only_payroll_execution_records_payslips(
    client: httpx.AsyncClient, auth: AuthHeaders
) -> None:
    r = await client.post(
        "/internal/v1/payslips",
        json={
            "employee_id": "EMP-1",
            "payroll_run_id": "RUN-1",
            "payroll_period": "2026-09-30",
            "base_salary": "1",
            "total_gross_salary": "1",
            "total_deductions": "0",
            "net_pay": "1",
        },
        headers=auth("EMP-1"),
    )
    assert r.status_code == 403


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("section", "total"),
    [
        ("tax-deductions", "1000.00"),
        ("insurance-deductions", "500.00"),
        ("employer-contributions", "900.00"),
        ("penalty-deductions", "250.00"),
        ("unpaid-leave-deductions", "200.00"),
        ("compensations", "400.00"),
    ],
)
async def test_payslip_breakdowns(
    client: httpx.AsyncClient,
    auth: AuthHeaders,
    record_payslip: RecordPayslip,
    section: str,
    total: str,
) -> None:
    payslip = await record_payslip("EMP-1")

    r = await client.get(f"/v1/payslips/{payslip['id']}/{section}", headers=auth("EMP-1"))
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["payslip_id"] == payslip["id"]
    assert Decimal(body["total"]) == Decimal(total)


@pytest.mark.asyncio
async def test_breakdown_details(
    client: httpx.AsyncClient, auth: AuthHeaders, record_payslip: RecordPayslip
) -> None:
    payslip = await record_payslip("EMP-1")
    headers = auth("EMP-1")

    r = await client.get(f"/v1/payslips/{payslip['id']}/unpaid-leave-deductions", headers=headers)
    assert [item["reason"] for item in r.json()["items"]] == ["Unpaid Leaves"]

    r = await client.get(f"/v1/payslips/{payslip['id']}/compensations", headers=headers)
    assert {item["name"] for item in r.json()["items"]} == {
        "Gym Membership",
        "Transportation Allowance",
    }

    r = await client.get(f"/v1/payslips/{payslip['id']}/tax-deductions", headers=headers)
    body = r.json()
    assert Decimal(body["base_salary"]) == Decimal("10000.00")
    assert Decimal(body["items"][0]["amount"]) == Decimal("1000.00")

    r = await client.get(f"/v1/payslips/{payslip['id']}/overtime", headers=headers)
    assert r.status_code == 422


@pytest.mark.asyncio
async def test_salary_history_newest_first(
    client: httpx.AsyncClient, auth: AuthHeaders, record_payslip: RecordPayslip
) -> None:
    await record_payslip("EMP-1", payroll_run_id="RUN-2026-08", payroll_period="2026-08-31")
    await record_payslip("EMP-1", payroll_run_id="RUN-2026-09", payroll_period="2026-09-30")
    await record_payslip("EMP-2")

    r = await client.get("/v1/salary/history", headers=auth("EMP-1"))
    assert r.status_code == 200
    history = r.json()
    assert [h["payroll_run_id"] for h in history] == ["RUN-2026-09", "RUN-2026-08"]
    assert Decimal(history[0]["net_pay"]) == Decimal("9650.00")


LEAVE_AND_COMMUTE_EARNINGS = {
    "allowances": [
        {"name": "Commuting", "amount": "150.00", "description": "Metro card"},
        {"name": "Housing", "amount": "1000.00"},
    ],
    "benefits": [
        {"name": "Annual Leave Encashment", "amount": "500.00", "terms": "5 unused days"},
        {"name": "Gym Membership", "amount": "100.00"},
    ],
}


@pytest.mark.asyncio
async def test_leave_compensation_and_transportation_per_payslip(
    client: httpx.AsyncClient, auth: AuthHeaders, record_payslip: RecordPayslip
) -> None:
    payslip = await record_payslip("EMP-1", earnings=LEAVE_AND_COMMUTE_EARNINGS)
    headers = auth("EMP-1")

    r = await client.get(f"/v1/payslips/{payslip['id']}/leave-compensation", headers=headers)
    assert r.status_code == 200, r.text
    body = r.json()
    assert [(i["name"], i["description"]) for i in body["items"]] == [
        ("Annual Leave Encashment", "5 unused days")
    ]
    assert Decimal(body["total"]) == Decimal("500.00")

    r = await client.get(f"/v1/payslips/{payslip['id']}/transportation", headers=headers)
    body = r.json()
    assert [(i["name"], i["description"]) for i in body["items"]] == [("Commuting", "Metro card")]
    assert Decimal(body["total"]) == Decimal("150.00")

    r = await client.get(f"/v1/payslips/{payslip['id']}/transportation", headers=auth("EMP-2"))
    assert r.status_code == 404


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("path", "total", "rows"),
    [
        ("tax-deductions", "2000.00", 2),
        ("insurance-deductions", "1000.00", 2),
        ("penalty-deductions", "500.00", 4),
        ("unpaid-leave-deductions", "400.00", 2),
        ("employer-contributions", "1800.00", 4),
        ("compensations", "800.00", 4),
        ("transportation-compensations", "600.00", 2),
    ],
)
async def test_breakdowns_across_all_payslips(
    client: httpx.AsyncClient,
    auth: AuthHeaders,
    record_payslip: RecordPayslip,
    path: str,
    total: str,
    rows: int,
) -> None:
    august = await record_payslip(
        "EMP-1", payroll_run_id="RUN-2026-08", payroll_period="2026-08-31"
    )
    september = await record_payslip("EMP-1")
    await record_payslip("EMP-2")

    r = await client.get(f"/v1/{path}", headers=auth("EMP-1"))
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["payslip_count"] == 2
    assert Decimal(body["total"]) == Decimal(total)
    assert len(body["items"]) == rows
    assert {i["payslip_id"] for i in body["items"]} == {august["id"], september["id"]}


@pytest.mark.asyncio
async def test_aggregates_for_employee_without_payslips(
    client: httpx.AsyncClient, auth: AuthHeaders
) -> None:
    r = await client.get("/v1/tax-deductions", headers=auth("EMP-9"))
    assert r.status_code == 200
    assert r.json()["items"] == []
    assert Decimal(r.json()["total"]) == Decimal("0")


@pytest.mark.asyncio
async def test_base_salary_comes_from_latest_payslip(
    client: httpx.AsyncClient, auth: AuthHeaders, record_payslip: RecordPayslip
) -> None:
    r = await client.get("/v1/salary/base", headers=auth("EMP-1"))
    assert r.status_code == 200
    assert r.json() == {
        "employee_id": "EMP-1",
        "base_salary": None,
        "latest_payroll_period": None,
        "payslip_id": None,
    }

    await record_payslip("EMP-1", payroll_run_id="RUN-2026-08", payroll_period="2026-08-31")
    latest = await record_payslip(
        "EMP-1", payroll_run_id="RUN-2026-10", payroll_period="2026-10-31", base_salary="10500.00"
    )

    r = await client.get("/v1/salary/base", headers=auth("EMP-1"))
    body = r.json()
    assert Decimal(body["base_salary"]) == Decimal("10500.00")
    assert body["latest_payroll_period"] == "2026-10-31"
    assert body["payslip_id"] == latest["id"]
