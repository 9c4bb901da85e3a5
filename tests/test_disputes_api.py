"""
tests.test_disputes_api

Payslip dispute workflow through the HTTP API.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from decimal import Decimal
from typing import Any

import httpx
import pytest

AuthHeaders = Callable[..., dict[str, str]]
RecordPayslip = Callable[..., Awaitable[dict[str, Any]]]


async def _open_dispute(
    client: httpx.AsyncClient, auth: AuthHeaders, payslip_id: str, employee: str = "EMP-1"
) -> dict[str, Any]:
    r = await client.post(
        "/v1/disputes",
        json={"payslip_id": payslip_id, "description": "Overtime hours missing"},
        headers=auth(employee),
    )
    assert r.status_code == 201, r.text
    return r.json()


async def _approve(
    client: httpx.AsyncClient, auth: AuthHeaders, dispute_id: str, amount: str = "75.50"
) -> None:
    r = await client.patch(
        f"/v1/disputes/{dispute_id}/approve-reject",
        json={"action": "approve", "approved_amount": amount},
        headers=auth("PSP-1", "payroll_specialist"),
    )
    assert r.status_code == 200, r.text
    r = await client.patch(
        f"/v1/disputes/{dispute_id}/confirm-approval",
        json={"comment": "Timesheets confirm overtime"},
        headers=auth("MGR-1", "payroll_manager"),
    )
    assert r.status_code == 200, r.text


@pytest.mark.asyncio
async def test_dispute_lifecycle_through_refund(
    client: httpx.AsyncClient, auth: AuthHeaders, record_payslip: RecordPayslip
) -> None:
    payslip = await record_payslip("EMP-1")

    dispute = await _open_dispute(client, auth, payslip["id"])
    assert dispute["dispute_id"] == "DISP-0001"
    assert dispute["status"] == "under review"
    assert dispute["payslip_id"] == payslip["id"]

    r = await client.get(
        "/v1/disputes/pending-specialist-approval",
        headers=auth("PSP-1", "payroll_specialist"),
    )
    assert [d["dispute_id"] for d in r.json()] == ["DISP-0001"]

    r = await client.patch(
        "/v1/disputes/DISP-0001/approve-reject",
        json={"action": "approve", "approved_amount": "75.50"},
        headers=auth("PSP-1", "payroll_specialist"),
    )
    assert r.status_code == 200
    assert r.json()["status"] == "pending payroll Manager approval"
    assert r.json()["resolution_comment"] == (
        "Payroll Specialist: Approved for manager review (Proposed refund amount: 75.50)"
    )

    r = await client.get(
        "/v1/disputes/pending-manager-approval", headers=auth("MGR-1", "payroll_manager")
    )
    assert [d["dispute_id"] for d in r.json()] == ["DISP-0001"]

    r = await client.patch(
        "/v1/disputes/DISP-0001/confirm-approval",
        json={},
        headers=auth("MGR-1", "payroll_manager"),
    )
    assert r.status_code == 200
    assert r.json()["status"] == "approved"
    assert Decimal(r.json()["approved_refund_amount"]) == Decimal("75.50")

    finance = auth("FIN-1", "finance_staff")
    r = await client.get("/v1/disputes/approved", headers=finance)
    assert [d["dispute_id"] for d in r.json()] == ["DISP-0001"]

    r = await client.get("/v1/notifications", headers=finance)
    assert [n["title"] for n in r.json()] == ["Dispute Approved - Refund Required"]

    # Claim refund notifications are filtered by title; disputes do not show up there.
    r = await client.get("/v1/claims/notifications", headers=finance)
    assert r.json() == []

    r = await client.post(
        "/v1/disputes/DISP-0001/generate-refund", json={"refund_amount": "0"}, headers=finance
    )
    assert r.status_code == 400
    assert r.json()["detail"] == "Refund amount must be greater than zero"

    r = await client.post("/v1/disputes/DISP-0001/generate-refund", json={}, headers=finance)
    assert r.status_code == 201, r.text
    refund = r.json()
    assert Decimal(refund["amount"]) == Decimal("75.50")
    assert refund["claim_id"] is None
    assert refund["dispute_id"] is not None
    assert refund["description"] == "Refund for approved dispute DISP-0001"

    r = await client.post("/v1/disputes/DISP-0001/generate-refund", json={}, headers=finance)
    assert r.status_code == 400

    r = await client.get("/v1/disputes/approved", headers=finance)
    assert r.json() == []

    r = await client.get("/v1/notifications", headers=auth("EMP-1"))
    assert {n["title"] for n in r.json()} == {"Dispute Under Review", "Dispute Approved"}


@pytest.mark.asyncio
async def test_dispute_requires_own_payslip_and_description(
    client: httpx.AsyncClient, auth: AuthHeaders, record_payslip: RecordPayslip
) -> None:
    payslip = await record_payslip("EMP-1")

    r = await client.post(
        "/v1/disputes",
        json={"payslip_id": payslip["id"], "description": "Not mine"},
        headers=auth("EMP-2"),
    )
    assert r.status_code == 404
    assert r.json()["detail"] == "Payslip not found or does not belong to this employee"

    r = await client.post(
        "/v1/disputes",
        json={"payslip_id": payslip["id"], "description": "   "},
        headers=auth("EMP-1"),
    )
    assert r.status_code == 400

    r = await client.post(
        "/v1/disputes",
        json={"payslip_id": "not-a-uuid", "description": "x"},
        headers=auth("EMP-1"),
    )
    assert r.status_code == 422


@pytest.mark.asyncio
async def test_one_active_dispute_per_payslip(
    client: httpx.AsyncClient, auth: AuthHeaders, record_payslip: RecordPayslip
) -> None:
    payslip = await record_payslip("EMP-1")
    await _open_dispute(client, auth, payslip["id"])

    r = await client.post(
        "/v1/disputes",
        json={"payslip_id": payslip["id"], "description": "Again"},
        headers=auth("EMP-1"),
    )
    assert r.status_code == 400
    assert r.json()["detail"] == "An active dispute already exists for this payslip"

    r = await client.patch(
        "/v1/disputes/DISP-0001/approve-reject",
        json={"action": "reject", "rejection_reason": "Hours were paid last month"},
        headers=auth("PSP-1", "payroll_specialist"),
    )
    assert r.status_code == 200
    assert r.json()["status"] == "rejected"

    # A rejected dispute no longer blocks the payslip.
    second = await _open_dispute(client, auth, payslip["id"])
    assert second["dispute_id"] == "DISP-0002"

    r = await client.get("/v1/disputes", headers=auth("EMP-1"))
    assert {d["dispute_id"] for d in r.json()} == {"DISP-0001", "DISP-0002"}


@pytest.mark.asyncio
async def test_concurrent_disputes_on_one_payslip(
    client: httpx.AsyncClient, auth: AuthHeaders, record_payslip: RecordPayslip
) -> None:
    payslip = await record_payslip("EMP-1")
    other = await record_payslip("EMP-2")

    def _post(payslip_id: str, employee: str) -> Awaitable[httpx.Response]:
        return client.post(
            "/v1/disputes",
            json={"payslip_id": payslip_id, "description": "Overtime hours missing"},
            headers=auth(employee),
        )

    responses = await asyncio.gather(
        *(_post(payslip["id"], "EMP-1") for _ in range(4)), _post(other["id"], "EMP-2")
    )

    same_payslip, other_payslip = responses[:4], responses[4]
    assert sorted(r.status_code for r in same_payslip) == [201, 400, 400, 400]
    assert {
        r.json()["detail"] for r in same_payslip if r.status_code == 400
    } == {"An active dispute already exists for this payslip"}
    assert other_payslip.status_code == 201

    created = [r.json()["dispute_id"] for r in responses if r.status_code == 201]
    assert sorted(created) == ["DISP-0001", "DISP-0002"]


@pytest.mark.asyncio
async def test_dispute_review_rules(
    client: httpx.AsyncClient, auth: AuthHeaders, record_payslip: RecordPayslip
) -> None:
    payslip = await record_payslip("EMP-1")
    await _open_dispute(client, auth, payslip["id"])

    r = await client.patch(
        "/v1/disputes/DISP-0001/approve-reject",
        json={"action": "approve"},
        headers=auth("PSP-1", "payroll_specialist"),
    )
    assert r.status_code == 400
    assert r.json()["detail"] == (
        "Approved refund amount is required when approving a dispute"
    )

    r = await client.post(
        "/v1/disputes/DISP-0001/generate-refund", json={}, headers=auth("FIN-1", "finance_staff")
    )
    assert r.status_code == 400
    assert r.json()["detail"] == "Refund can only be generated for approved disputes"

    r = await client.get("/v1/disputes/DISP-0001", headers=auth("EMP-2"))
    assert r.status_code == 404
    assert r.json()["detail"] == "Dispute not found or does not belong to this employee"

    r = await client.get("/v1/disputes/DISP-0001", headers=auth("MGR-1", "payroll_manager"))
    assert r.status_code == 200


@pytest.mark.asyncio
async def test_dispute_refund_amount_override(
    client: httpx.AsyncClient, auth: AuthHeaders, record_payslip: RecordPayslip
) -> None:
    payslip = await record_payslip("EMP-1")
    await _open_dispute(client, auth, payslip["id"])
    await _approve(client, auth, "DISP-0001")

    r = await client.post(
        "/v1/disputes/DISP-0001/generate-refund",
        json={"refund_amount": "60.00", "description": "Partial overtime refund"},
        headers=auth("FIN-1", "finance_staff"),
    )
    assert r.status_code == 201
    assert Decimal(r.json()["amount"]) == Decimal("60.00")
    assert r.json()["description"] == "Partial overtime refund"

    r = await client.get("/v1/disputes/DISP-0001/audit", headers=auth("EMP-1"))
    assert {e["event_type"] for e in r.json()} == {
        "DISPUTE_SUBMITTED",
        "DISPUTE_SPECIALIST_APPROVED",
        "DISPUTE_MANAGER_CONFIRMED",
        "DISPUTE_REFUND_GENERATED",
    }
