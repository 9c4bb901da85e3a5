"""
tests.test_refunds_api

Refund reads and settlement by payroll execution (internal API).
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from decimal import Decimal
from typing import Any

import httpx
import pytest

AuthHeaders = Callable[..., dict[str, str]]
RecordPayslip = Callable[..., Awaitable[dict[str, Any]]]


async def _refunded_claim(client: httpx.AsyncClient, auth: AuthHeaders, employee: str) -> str:
    r = await client.post(
        "/v1/claims",
        json={"description": "Hotel", "claim_type": "Accommodation", "amount": "400.00"},
        headers=auth(employee),
    )
    claim_id = r.json()["claim_id"]
    await client.patch(
        f"/v1/claims/{claim_id}/approve-reject",
        json={"action": "approve", "approved_amount": "400.00"},
        headers=auth("PSP-1", "payroll_specialist"),
    )
    await client.patch(
        f"/v1/claims/{claim_id}/confirm-approval",
        json={},
        headers=auth("MGR-1", "payroll_manager"),
    )
    r = await client.post(
        f"/v1/claims/{claim_id}/generate-refund", json={}, headers=auth("FIN-1", "finance_staff")
    )
    assert r.status_code == 201, r.text
    return r.json()["id"]


async def _refunded_dispute(
    client: httpx.AsyncClient, auth: AuthHeaders, record_payslip: RecordPayslip, employee: str
) -> str:
    payslip = await record_payslip(employee)
    r = await client.post(
        "/v1/disputes",
        json={"payslip_id": payslip["id"], "description": "Bonus missing"},
        headers=auth(employee),
    )
    dispute_id = r.json()["dispute_id"]
    await client.patch(
        f"/v1/disputes/{dispute_id}/approve-reject",
        json={"action": "approve", "approved_amount": "250.00"},
        headers=auth("PSP-1", "payroll_specialist"),
    )
    await client.patch(
        f"/v1/disputes/{dispute_id}/confirm-approval",
        json={},
        headers=auth("MGR-1", "payroll_manager"),
    )
    r = await client.post(
        f"/v1/disputes/{dispute_id}/generate-refund",
        json={},
        headers=auth("FIN-1", "finance_staff"),
    )
    assert r.status_code == 201, r.text
    return r.json()["id"]


@pytest.mark.asyncio
async def test_settle_refunds_for_payroll_run(
    client: httpx.AsyncClient, auth: AuthHeaders, record_payslip: RecordPayslip
) -> None:
    claim_refund = await _refunded_claim(client, auth, "EMP-1")
    dispute_refund = await _refunded_dispute(client, auth, record_payslip, "EMP-1")
    other_refund = await _refunded_claim(client, auth, "EMP-2")

    finance = auth("FIN-1", "finance_staff")
    r = await client.get("/v1/refunds/pending", headers=finance)
    assert {x["id"] for x in r.json()} == {claim_refund, dispute_refund, other_refund}

    internal = auth("payroll-execution", "internal_system")
    r = await client.post(
        "/internal/v1/refunds/settle",
        json={"employee_id": "EMP-1", "payroll_run_id": "RUN-2026-10"},
        headers=internal,
    )
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["payroll_run_id"] == "RUN-2026-10"
    lines = {line["refund_id"]: Decimal(line["amount"]) for line in body["refunds"]}
    assert lines == {claim_refund: Decimal("400.00"), dispute_refund: Decimal("250.00")}

    r = await client.get("/v1/refunds", headers=auth("EMP-1"))
    assert {x["status"] for x in r.json()} == {"paid"}
    assert {x["paid_in_payroll_run_id"] for x in r.json()} == {"RUN-2026-10"}

    r = await client.get("/v1/refunds/pending", headers=finance)
    assert [x["id"] for x in r.json()] == [other_refund]

    # Already settled refunds are not paid twice.
    r = await client.post(
        "/internal/v1/refunds/settle",
        json={"employee_id": "EMP-1", "payroll_run_id": "RUN-2026-11"},
        headers=internal,
    )
    assert r.json()["refunds"] == []


@pytest.mark.asyncio
async def test_settled_items_cannot_be_refunded_again(
    client: httpx.AsyncClient, auth: AuthHeaders, record_payslip: RecordPayslip
) -> None:
    await _refunded_claim(client, auth, "EMP-1")
    await _refunded_dispute(client, auth, record_payslip, "EMP-1")

    internal = auth("payroll-execution", "internal_system")
    r = await client.post(
        "/internal/v1/refunds/settle",
        json={"employee_id": "EMP-1", "payroll_run_id": "RUN-2026-10"},
        headers=internal,
    )
    assert len(r.json()["refunds"]) == 2

    finance = auth("FIN-2", "finance_staff")
    r = await client.post("/v1/claims/CLAIM-0001/generate-refund", json={}, headers=finance)
    assert r.status_code == 400
    assert r.json()["detail"] == (
        "A refund for this claim has already been paid in payroll run RUN-2026-10"
    )

    r = await client.post(
        "/v1/disputes/DISP-0001/generate-refund",
        json={"refund_amount": "10.00"},
        headers=finance,
    )
    assert r.status_code == 400
    assert r.json()["detail"] == (
        "A refund for this dispute has already been paid in payroll run RUN-2026-10"
    )

    r = await client.post(
        "/internal/v1/refunds/settle",
        json={"employee_id": "EMP-1", "payroll_run_id": "RUN-2026-11"},
        headers=internal,
    )
    assert r.json()["refunds"] == []

    r = await client.get("/v1/refunds", headers=auth("EMP-1"))
    assert len(r.json()) == 2


@pytest.mark.asyncio
async def test_refund_endpoints_require_roles(
    client: httpx.AsyncClient, auth: AuthHeaders
) -> None:
    r = await client.get("/v1/refunds/pending", headers=auth("EMP-1"))
    assert r.status_code == 403

    r = await client.post(
        "/internal/v1/refunds/settle",
        json={"employee_id": "EMP-1", "payroll_run_id": "RUN-2026-10"},
        headers=auth("FIN-1", "finance_staff"),
    )
    assert r.status_code == 403

    r = await client.get("/v1/refunds", headers=auth("EMP-1"))
    assert r.status_code == 200
    assert r.json() == []
