from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal
from typing import Any

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from payroll_tracking.db.models import Payslip


class PayslipRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self,
        *,
        employee_id: str,
        payroll_run_id: str,
        payroll_period: date,
        base_salary: Decimal,
        total_gross_salary: Decimal,
        total_deductions: Decimal,
        net_pay: Decimal,
        earnings: dict[str, Any],
        deductions: dict[str, Any],
        payment_status: str,
    ) -> Payslip:
        payslip = Payslip(
            employee_id=employee_id,
            payroll_run_id=payroll_run_id,
            payroll_period=payroll_period,
            base_salary=base_salary,
            total_gross_salary=total_gross_salary,
            total_deductions=total_deductions,
            net_pay=net_pay,
            earnings=earnings,
            deductions=deductions,
            payment_status=payment_status,
        )
        self._session.add(payslip)
        await self._session.flush()
        return payslip

    async def get(self, payslip_id: uuid.UUID) -> Payslip | None:
        return await self._session.get(Payslip, payslip_id)

    async def get_for_employee(self, payslip_id: uuid.UUID, employee_id: str) -> Payslip | None:
        stmt = select(Payslip).where(Payslip.id == payslip_id, Payslip.employee_id == employee_id)
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def list_for_employee(self, employee_id: str) -> list[Payslip]:
        # Newest period first; latest payslip drives "current base salary".
        stmt = (
            select(Payslip)
            .where(Payslip.employee_id == employee_id)
            .order_by(desc(Payslip.payroll_period), desc(Payslip.created_at))
        )
        return list((await self._session.execute(stmt)).scalars().all())

    async def list_in_period(self, start: date, end: date) -> list[Payslip]:
        stmt = (
            select(Payslip)
            .where(Payslip.payroll_period >= start, Payslip.payroll_period <= end)
            .order_by(Payslip.payroll_period, Payslip.employee_id)
        )
        return list((await self._session.execute(stmt)).scalars().all())
