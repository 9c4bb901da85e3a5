"""
payroll_tracking.api.routers.disputes

Payslip dispute endpoints; mirrors the claims router stage by stage.
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_201_CREATED

from payroll_tracking.api.deps import db_session, settings_dep
from payroll_tracking.api.schemas import (
    AuditEventResponse,
    DisputeResponse,
    GenerateRefundRequest,
    ManagerConfirmRequest,
    ManagerRejectRequest,
    RefundResponse,
    SpecialistReviewRequest,
)
from payroll_tracking.auth.deps import get_principal, require_roles
from payroll_tracking.auth.models import Principal, SystemRole
from payroll_tracking.services.dispute_service import DisputeService
from payroll_tracking.settings import Settings

router = APIRouter(prefix="/v1/disputes", tags=["disputes"])


class DisputeCreateRequest(BaseModel):
    payslip_id: uuid.UUID
    description: str = Field(max_length=4000)


def _service(
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> DisputeService:
    return DisputeService(session=session, settings=settings)


@router.post("", response_model=DisputeResponse, status_code=HTTP_201_CREATED)
async def submit_dispute(
    body: DisputeCreateRequest,
    principal: Principal = Depends(get_principal),
    svc: DisputeService = Depends(_service),
) -> DisputeResponse:
    dispute = await svc.create(
        employee_id=principal.subject,
        payslip_id=body.payslip_id,
        description=body.description,
    )
    return DisputeResponse.model_validate(dispute)


@router.get("", response_model=list[DisputeResponse])
async def list_my_disputes(
    principal: Principal = Depends(get_principal),
    svc: DisputeService = Depends(_service),
) -> list[DisputeResponse]:
    disputes = await svc.list_for_employee(principal.subject)
    return [DisputeResponse.model_validate(d) for d in disputes]


@router.get(
    "/pending-specialist-approval",
    response_model=list[DisputeResponse],
    dependencies=[Depends(require_roles(SystemRole.payroll_specialist))],
)
async def list_disputes_under_review(
    svc: DisputeService = Depends(_service),
) -> list[DisputeResponse]:
    return [DisputeResponse.model_validate(d) for d in await svc.list_under_review()]


@router.get(
    "/pending-manager-approval",
    response_model=list[DisputeResponse],
    dependencies=[Depends(require_roles(SystemRole.payroll_manager))],
)
async def list_disputes_pending_manager_approval(
    svc: DisputeService = Depends(_service),
) -> list[DisputeResponse]:
    return [DisputeResponse.model_validate(d) for d in await svc.list_pending_manager_approval()]


@router.get(
    "/approved",
    response_model=list[DisputeResponse],
    dependencies=[Depends(require_roles(SystemRole.finance_staff))],
)
async def list_approved_disputes(
    svc: DisputeService = Depends(_service),
) -> list[DisputeResponse]:
    return [DisputeResponse.model_validate(d) for d in await svc.list_approved_awaiting_refund()]


@router.get("/{dispute_id}", response_model=DisputeResponse)
async def get_dispute(
    dispute_id: str,
    principal: Principal = Depends(get_principal),
    svc: DisputeService = Depends(_service),
) -> DisputeResponse:
    return DisputeResponse.model_validate(await svc.get_visible(dispute_id, principal))


@router.get("/{dispute_id}/audit", response_model=list[AuditEventResponse])
async def get_dispute_audit(
    dispute_id: str,
    principal: Principal = Depends(get_principal),
    svc: DisputeService = Depends(_service),
) -> list[AuditEventResponse]:
    events = await svc.audit_trail(dispute_id, principal)
    return [AuditEventResponse.model_validate(e) for e in events]


@router.patch("/{dispute_id}/approve-reject", response_model=DisputeResponse)
async def review_dispute(
    dispute_id: str,
    body: SpecialistReviewRequest,
    principal: Principal = Depends(require_roles(SystemRole.payroll_specialist)),
    svc: DisputeService = Depends(_service),
) -> DisputeResponse:
    dispute = await svc.review(
        dispute_id,
        actor=principal.subject,
        action=body.action,
        amount=body.approved_amount,
        rejection_reason=body.rejection_reason,
        comment=body.comment,
    )
    return DisputeResponse.model_validate(dispute)


@router.patch("/{dispute_id}/confirm-approval", response_model=DisputeResponse)
async def confirm_dispute(
    dispute_id: str,
    body: ManagerConfirmRequest,
    principal: Principal = Depends(require_roles(SystemRole.payroll_manager)),
    svc: DisputeService = Depends(_service),
) -> DisputeResponse:
    dispute = await svc.confirm(
        dispute_id,
        actor=principal.subject,
        action=body.action,
        amount_override=body.approved_amount,
        rejection_reason=body.rejection_reason,
        comment=body.comment,
    )
    return DisputeResponse.model_validate(dispute)


@router.patch("/{dispute_id}/reject", response_model=DisputeResponse)
async def reject_dispute(
    dispute_id: str,
    body: ManagerRejectRequest,
    principal: Principal = Depends(require_roles(SystemRole.payroll_manager)),
    svc: DisputeService = Depends(_service),
) -> DisputeResponse:
    dispute = await svc.reject(
        dispute_id,
        actor=principal.subject,
        rejection_reason=body.rejection_reason,
        comment=body.comment,
    )
    return DisputeResponse.model_validate(dispute)


@router.post(
    "/{dispute_id}/generate-refund",
    response_model=RefundResponse,
    status_code=HTTP_201_CREATED,
)
async def generate_dispute_refund(
    dispute_id: str,
    body: GenerateRefundRequest,
    principal: Principal = Depends(require_roles(SystemRole.finance_staff)),
    svc: DisputeService = Depends(_service),
) -> RefundResponse:
    refund = await svc.generate_refund(
        dispute_id,
        finance_staff_id=principal.subject,
        refund_amount=body.refund_amount,
        description=body.description,
    )
    return RefundResponse.model_validate(refund)
