"""
payroll_tracking.services.payslip_breakdown

Read-only breakdowns derived from a payslip's earnings/deductions snapshot.

Rates are percentages applied to the payslip's base salary. All amounts are
rounded to cents.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from decimal import Decimal
from functools import partial
from typing import Any

from payroll_tracking.db.models import Payslip
from payroll_tracking.workflow.transitions import to_money

UNPAID_LEAVE_REASON = "unpaid leaves"
TRANSPORT_KEYWORDS = ("transport", "commuting", "travel")
LEAVE_KEYWORDS = ("leave", "encashment", "unused")


def _dec(value: Any) -> Decimal:
    if value is None or value == "":
        return Decimal("0")
    return Decimal(str(value))


def _percent_of(base: Decimal, rate: Any) -> Decimal:
    return to_money(base * _dec(rate) / Decimal(100))


def _items(snapshot: dict[str, Any] | None, key: str) -> list[dict[str, Any]]:
    return list((snapshot or {}).get(key) or [])


def is_unpaid_leave_penalty(penalty: dict[str, Any]) -> bool:
    reason = penalty.get("reason")
    return isinstance(reason, str) and reason.strip().lower() == UNPAID_LEAVE_REASON


def tax_breakdown(payslip: Payslip) -> dict[str, Any]:
    base = _dec(payslip.base_salary)
    rows = [
        {
            "name": tax.get("name"),
            "description": tax.get("description"),
            "rate": _dec(tax.get("rate")),
            "applied_to": to_money(base),
            "amount": _percent_of(base, tax.get("rate")),
            "status": tax.get("status"),
        }
        for tax in _items(payslip.deductions, "taxes")
    ]
    return {
        "payslip_id": payslip.id,
        "gross_salary": payslip.total_gross_salary,
        "base_salary": to_money(base),
        "items": rows,
        "total": _total(r["amount"] for r in rows),
    }


def insurance_breakdown(payslip: Payslip) -> dict[str, Any]:
    base = _dec(payslip.base_salary)
    rows = [
        {
            "name": ins.get("name"),
            "employee_rate": _dec(ins.get("employee_rate")),
            "employer_rate": _dec(ins.get("employer_rate")),
            "applied_to": to_money(base),
            "employee_contribution": _percent_of(base, ins.get("employee_rate")),
            "employer_contribution": _percent_of(base, ins.get("employer_rate")),
            "min_salary": ins.get("min_salary"),
            "max_salary": ins.get("max_salary"),
            "status": ins.get("status"),
        }
        for ins in _items(payslip.deductions, "insurances")
    ]
    return {
        "payslip_id": payslip.id,
        "gross_salary": payslip.total_gross_salary,
        "base_salary": to_money(base),
        "items": rows,
        "total": _total(r["employee_contribution"] for r in rows),
    }


def penalty_breakdown(payslip: Payslip, *, unpaid_leave_only: bool = False) -> dict[str, Any]:
    penalties = _items(payslip.deductions, "penalties")
    if unpaid_leave_only:
        penalties = [p for p in penalties if is_unpaid_leave_penalty(p)]
    rows = [
        {"reason": p.get("reason"), "amount": to_money(_dec(p.get("amount")))} for p in penalties
    ]
    return {
        "payslip_id": payslip.id,
        "items": rows,
        "total": _total(r["amount"] for r in rows),
    }


def _insurance_base(base: Decimal, insurance: dict[str, Any]) -> Decimal:
    floor, ceiling = insurance.get("min_salary"), insurance.get("max_salary")
    if floor is not None and base < _dec(floor):
        return _dec(floor)
    if ceiling is not None and base > _dec(ceiling):
        return _dec(ceiling)
    return base


def employer_contributions(payslip: Payslip) -> dict[str, Any]:
    """
    Employer insurance share (base salary clamped to the bracket's min/max
    salary) plus benefits paid by the employer.
    """
    base = _dec(payslip.base_salary)
    rows: list[dict[str, Any]] = []
    for ins in _items(payslip.deductions, "insurances"):
        insured = _insurance_base(base, ins)
        rows.append(
            {
                "type": "Insurance",
                "name": ins.get("name"),
                "rate": _dec(ins.get("employer_rate")),
                "calculation_base": to_money(insured),
                "amount": _percent_of(insured, ins.get("employer_rate")),
            }
        )
    for benefit in _items(payslip.earnings, "benefits"):
        rows.append(
            {
                "type": "Benefit",
                "name": benefit.get("name"),
                "rate": None,
                "calculation_base": None,
                "amount": to_money(_dec(benefit.get("amount"))),
            }
        )
    return {
        "payslip_id": payslip.id,
        "items": rows,
        "total": _total(r["amount"] for r in rows),
    }


def _is_transport(allowance: dict[str, Any]) -> bool:
    name = str(allowance.get("name") or "").lower()
    return any(word in name for word in TRANSPORT_KEYWORDS)


def compensations(payslip: Payslip) -> dict[str, Any]:
    """Benefits plus transport-type allowances (transport/commuting/travel)."""
    rows = [
        {"name": b.get("name"), "amount": to_money(_dec(b.get("amount"))), "terms": b.get("terms")}
        for b in _items(payslip.earnings, "benefits")
    ]
    rows.extend(
        {"name": a.get("name"), "amount": to_money(_dec(a.get("amount"))), "terms": None}
        for a in _items(payslip.earnings, "allowances")
        if _is_transport(a)
    )
    return {
        "payslip_id": payslip.id,
        "items": rows,
        "total": _total(r["amount"] for r in rows),
    }


def leave_compensation(payslip: Payslip) -> dict[str, Any]:
    """Benefits paid out for unused or encashed leave days."""
    rows = [
        {
            "name": b.get("name"),
            "amount": to_money(_dec(b.get("amount"))),
            "description": b.get("terms") or b.get("name"),
        }
        for b in _items(payslip.earnings, "benefits")
        if any(word in str(b.get("name") or "").lower() for word in LEAVE_KEYWORDS)
    ]
    return {
        "payslip_id": payslip.id,
        "items": rows,
        "total": _total(r["amount"] for r in rows),
    }


def transportation(payslip: Payslip) -> dict[str, Any]:
    rows = [
        {
            "name": a.get("name"),
            "amount": to_money(_dec(a.get("amount"))),
            "description": a.get("description"),
        }
        for a in _items(payslip.earnings, "allowances")
        if _is_transport(a)
    ]
    return {
        "payslip_id": payslip.id,
        "items": rows,
        "total": _total(r["amount"] for r in rows),
    }


SECTIONS: dict[str, Callable[[Payslip], dict[str, Any]]] = {
    "tax-deductions": tax_breakdown,
    "insurance-deductions": insurance_breakdown,
    "penalty-deductions": penalty_breakdown,
    "unpaid-leave-deductions": partial(penalty_breakdown, unpaid_leave_only=True),
    "employer-contributions": employer_contributions,
    "compensations": compensations,
    "leave-compensation": leave_compensation,
    "transportation": transportation,
}


def across_payslips(payslips: Sequence[Payslip], section: str) -> dict[str, Any]:
    """
    One section over many payslips: every row is tagged with the payslip it
    came from, and the total is the sum of the per-payslip totals.
    """
    build = SECTIONS[section]
    rows: list[dict[str, Any]] = []
    totals: list[Decimal] = []
    for payslip in payslips:
        part = build(payslip)
        totals.append(part["total"])
        rows.extend(
            {"payslip_id": payslip.id, "payroll_period": payslip.payroll_period, **item}
            for item in part["items"]
        )
    return {"payslip_count": len(payslips), "items": rows, "total": _total(totals)}


def base_salary(employee_id: str, payslips: Sequence[Payslip]) -> dict[str, Any]:
    # `payslips` is newest period first; an employee without payslips has no base yet.
    latest = payslips[0] if payslips else None
    return {
        "employee_id": employee_id,
        "base_salary": latest.base_salary if latest else None,
        "latest_payroll_period": latest.payroll_period if latest else None,
        "payslip_id": latest.id if latest else None,
    }


def salary_history(payslips: Iterable[Payslip]) -> list[dict[str, Any]]:
    return [
        {
            "payslip_id": p.id,
            "payroll_run_id": p.payroll_run_id,
            "payroll_period": p.payroll_period,
            "base_salary": p.base_salary,
            "total_gross_salary": p.total_gross_salary,
            "total_deductions": p.total_deductions,
            "net_pay": p.net_pay,
            "payment_status": p.payment_status,
        }
        for p in payslips
    ]


def _total(amounts: Iterable[Decimal]) -> Decimal:
    return to_money(sum(amounts, Decimal("0")))
