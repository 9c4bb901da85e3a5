"""
payroll_tracking.api.routers.internal.router

Internal router aggregator: mounts per-resource internal routers under `/internal/v1`.
"""

from __future__ import annotations

from fastapi import APIRouter

from payroll_tracking.api.routers.internal import payslips, refunds

router = APIRouter(prefix="/internal/v1", tags=["internal"])

# Each included router is protected by RBAC role `internal_system`.
router.include_router(payslips.router, prefix="/payslips")
router.include_router(refunds.router, prefix="/refunds")
