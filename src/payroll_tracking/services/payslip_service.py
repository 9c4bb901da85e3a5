"""
payroll_tracking.services.payslip_service

Payslip access for employees and payroll staff.

Responsibilities:
- Record payslips produced by payroll execution (internal API).
- Enforce payslip visibility: owners, payroll specialists/managers, admin.
- Expose the derived breakdowns in `services.payslip_breakdown`, per payslip
  and summed over all of an employee's payslips.
- Report the current base salary (latest payslip).
"""

from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from payroll_tracking.auth.models import Principal
from payroll_tracking.db.models import Payslip
from payroll_tracking.db.repositories.payslips import PayslipRepo
from payroll_tracking.errors import NotFoundError
from payroll_tracking.observability.logging import get_logger
from payroll_tracking.services import payslip_breakdown

log = get_logger(__name__)


class PayslipService:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._payslips = PayslipRepo(session)

    async def record(
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
        payment_status: str = "pending",
    ) -> Payslip:
        payslip = await self._payslips.create(
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
        await self._session.commit()
        log.info(
            "payslip_recorded",
            payslip_id=str(payslip.id),
            employee_id=employee_id,
            payroll_run_id=payroll_run_id,
        )
        return payslip

    async def get_visible(self, payslip_id: uuid.UUID, principal: Principal) -> Payslip:
        if principal.can_view_any_payslip:
            payslip = await self._payslips.get(payslip_id)
        else:
            payslip = await self._payslips.get_for_employee(payslip_id, principal.subject)
        if payslip is None:
            raise NotFoundError("Payslip not found or does not belong to this employee")
        return payslip

    async def list_for_employee(self, employee_id: str) -> list[Payslip]:
        return await self._payslips.list_for_employee(employee_id)

    async def salary_history(self, employee_id: str) -> list[dict[str, Any]]:
        return payslip_breakdown.salary_history(await self.list_for_employee(employee_id))

    async def breakdown(
        self, payslip_id: uuid.UUID, principal: Principal, *, section: str
    ) -> dict[str, Any]:
        build = payslip_breakdown.SECTIONS.get(section)
        if build is None:
            raise NotFoundError(f"Unknown payslip section: {section}")
        return build(await self.get_visible(payslip_id, principal))

    async def aggregate(self, employee_id: str, *, section: str) -> dict[str, Any]:
        if section not in payslip_breakdown.SECTIONS:
            raise NotFoundError(f"Unknown payslip section: {section}")
        payslips = await self.list_for_employee(employee_id)
        return payslip_breakdown.across_payslips(payslips, section)

    async def base_salary(self, employee_id: str) -> dict[str, Any]:
        return payslip_breakdown.base_salary(
            employee_id, await self.list_for_employee(employee_id)
        )
