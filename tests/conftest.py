"""
tests.conftest

Shared fixtures: an app bound to a throwaway SQLite file, an httpx client over
ASGITransport, and helpers for minting tokens and recording payslips.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable
from pathlib import Path
from typing import Any

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI

from payroll_tracking.api.app import create_app
from payroll_tracking.auth.jwt import JwtConfig, issue_token
from payroll_tracking.settings import Settings

AuthHeaders = Callable[..., dict[str, str]]


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(env="test", database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")


@pytest_asyncio.fixture
async def app(settings: Settings) -> AsyncIterator[FastAPI]:
    app = create_app(settings=settings)
    # httpx ASGITransport does not run lifespan events; drive them here.
    async with app.router.lifespan_context(app):
        yield app


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncIterator[httpx.AsyncClient]:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
def auth(settings: Settings) -> AuthHeaders:
    cfg = JwtConfig.from_settings(settings)

    def _headers(subject: str, *roles: str) -> dict[str, str]:
        token = issue_token(cfg=cfg, subject=subject, roles=list(roles) or ["employee"])
        return {"Authorization": f"Bearer {token}"}

    return _headers


def payslip_payload(employee_id: str, **overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "employee_id": employee_id,
        "payroll_run_id": "RUN-2026-09",
        "payroll_period": "2026-09-30",
        "base_salary": "10000.00",
        "total_gross_salary": "11400.00",
        "total_deductions": "1750.00",
        "net_pay": "9650.00",
        "earnings": {
            "allowances": [
                {"name": "Transportation Allowance", "amount": "300.00"},
                {"name": "Housing", "amount": "1000.00"},
            ],
            "benefits": [{"name": "Gym Membership", "amount": "100.00", "terms": "Monthly"}],
        },
        "deductions": {
            "taxes": [{"name": "Income Tax", "rate": "10", "status": "active"}],
            "insurances": [
                {"name": "Health Insurance", "employee_rate": "5", "employer_rate": "8"}
            ],
            "penalties": [
                {"reason": "Unpaid Leaves", "amount": "200.00"},
                {"reason": "Late arrival", "amount": "50.00"},
            ],
        },
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def record_payslip(
    client: httpx.AsyncClient, auth: AuthHeaders
) -> Callable[..., Awaitable[dict[str, Any]]]:
    async def _record(employee_id: str, **overrides: Any) -> dict[str, Any]:
        r = await client.post(
            "/internal/v1/payslips",
            json=payslip_payload(employee_id, **overrides),
            headers=auth("payroll-execution", "internal_system"),
        )
        assert r.status_code == 201, r.text
        return r.json()

    return _record
