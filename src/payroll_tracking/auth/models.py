"""
payroll_tracking.auth.models

Auth domain models.

Responsibilities:
- Define the system roles used for RBAC.
- Define the authenticated identity type (`Principal`) injected into endpoints.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass


class SystemRole(enum.StrEnum):
    employee = "employee"
    payroll_specialist = "payroll_specialist"
    payroll_manager = "payroll_manager"
    finance_staff = "finance_staff"
    internal_system = "internal_system"
    admin = "admin"


# Roles allowed to read any employee's claims and disputes.
CASE_REVIEWER_ROLES = frozenset(
    {SystemRole.payroll_specialist, SystemRole.payroll_manager, SystemRole.finance_staff}
)

# Roles allowed to read any employee's payslips.
PAYSLIP_REVIEWER_ROLES = frozenset({SystemRole.payroll_specialist, SystemRole.payroll_manager})


@dataclass(frozen=True, slots=True)
class Principal:
    """
    Authenticated caller identity. `subject` is the employee id.
    """

    subject: str
    roles: frozenset[str]

    @property
    def is_admin(self) -> bool:
        return SystemRole.admin in self.roles

    def has_any(self, roles: frozenset[str]) -> bool:
        return self.is_admin or bool(self.roles & roles)

    @property
    def can_view_any_case(self) -> bool:
        return self.has_any(CASE_REVIEWER_ROLES)

    @property
    def can_view_any_payslip(self) -> bool:
        return self.has_any(PAYSLIP_REVIEWER_ROLES)
