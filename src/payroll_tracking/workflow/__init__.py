"""
payroll_tracking.workflow

Claim/dispute approval workflow (status machine, no I/O).
"""

from payroll_tracking.workflow.transitions import (
    CLAIM,
    DISPUTE,
    CaseKind,
    Transition,
    manager_confirm,
    manager_reject,
    specialist_decision,
)

__all__ = [
    "CLAIM",
    "DISPUTE",
    "CaseKind",
    "Transition",
    "manager_confirm",
    "manager_reject",
    "specialist_decision",
]
