"""
payroll_tracking.api.routers.claims

Expense claim endpoints.

Responsibilities:
- Employee self-service: submit and read own claims.
- Payroll specialist review, payroll manager confirmation/rejection.
- Finance staff: approved-claims queue, refund generation, refund notifications.
"""

from __future__ import annotations

from decimal import Decimal

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_201_CREATED

from payroll_tracking.api.deps import db_session, settings_dep
from payroll_tracking.api.schemas import (
    AuditEventResponse,
    ClaimResponse,
    GenerateRefundRequest,
    ManagerConfirmRequest,
    ManagerRejectRequest,
    RefundResponse,
    SpecialistReviewRequest,
)
from payroll_tracking.api.routers.notifications import NotificationResponse
from payroll_tracking.auth.deps import get_principal, require_roles
from payroll_tracking.auth.models import Principal, SystemRole
from payroll_tracking.services.claim_service import ClaimService
from payroll_tracking.services.notification_service import (
    NotificationService,
    finance_refund_title,
)
from payroll_tracking.settings import Settings
from payroll_tracking.workflow.transitions import CLAIM

router = APIRouter(prefix="/v1/claims", tags=["claims"])


class ClaimCreateRequest(BaseModel):
    description: str = Field(max_length=4000)
    claim_type: str = Field(max_length=128)
    amount: Decimal
    # Optional caller-chosen business id; generated (CLAIM-0001...) when omitted.
    claim_id: str | None = Field(default=None, max_length=64)


def _service(
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> ClaimService:
    return ClaimService(session=session, settings=settings)


@router.post("", response_model=ClaimResponse, status_code=HTTP_201_CREATED)
async def submit_claim(
    body: ClaimCreateRequest,
    principal: Principal = Depends(get_principal),
    svc: ClaimService = Depends(_service),
) -> ClaimResponse:
    claim = await svc.create(
        employee_id=principal.subject,
        description=body.description,
        claim_type=body.claim_type,
        amount=body.amount,
        claim_id=body.claim_id,
    )
    return ClaimResponse.model_validate(claim)


@router.get("", response_model=list[ClaimResponse])
async def list_my_claims(
    principal: Principal = Depends(get_principal),
    svc: ClaimService = Depends(_service),
) -> list[ClaimResponse]:
    return [ClaimResponse.model_validate(c) for c in await svc.list_for_employee(principal.subject)]


@router.get(
    "/pending-specialist-approval",
    response_model=list[ClaimResponse],
    dependencies=[Depends(require_roles(SystemRole.payroll_specialist))],
)
async def list_claims_under_review(
    svc: ClaimService = Depends(_service),
) -> list[ClaimResponse]:
    return [ClaimResponse.model_validate(c) for c in await svc.list_under_review()]


@router.get(
    "/pending-manager-approval",
    response_model=list[ClaimResponse],
    dependencies=[Depends(require_roles(SystemRole.payroll_manager))],
)
async def list_claims_pending_manager_approval(
    svc: ClaimService = Depends(_service),
) -> list[ClaimResponse]:
    return [ClaimResponse.model_validate(c) for c in await svc.list_pending_manager_approval()]


@router.get(
    "/approved",
    response_model=list[ClaimResponse],
    dependencies=[Depends(require_roles(SystemRole.finance_staff))],
)
async def list_approved_claims(
    svc: ClaimService = Depends(_service),
) -> list[ClaimResponse]:
    # Only approved claims that do not have a refund yet.
    return [ClaimResponse.model_validate(c) for c in await svc.list_approved_awaiting_refund()]


@router.get("/notifications", response_model=list[NotificationResponse])
async def list_refund_notifications(
    unread_only: bool = Query(default=True),
    principal: Principal = Depends(require_roles(SystemRole.finance_staff)),
    session: AsyncSession = Depends(db_session),
) -> list[NotificationResponse]:
    notes = await NotificationService(session).list_for(
        principal, unread_only=unread_only, title=finance_refund_title(CLAIM)
    )
    return [NotificationResponse.model_validate(n) for n in notes]


@router.get("/{claim_id}", response_model=ClaimResponse)
async def get_claim(
    claim_id: str,
    principal: Principal = Depends(get_principal),
    svc: ClaimService = Depends(_service),
) -> ClaimResponse:
    return ClaimResponse.model_validate(await svc.get_visible(claim_id, principal))


@router.get("/{claim_id}/audit", response_model=list[AuditEventResponse])
async def get_claim_audit(
    claim_id: str,
    principal: Principal = Depends(get_principal),
    svc: ClaimService = Depends(_service),
) -> list[AuditEventResponse]:
    events = await svc.audit_trail(claim_id, principal)
    return [AuditEventResponse.model_validate(e) for e in events]


@router.patch("/{claim_id}/approve-reject", response_model=ClaimResponse)
async def review_claim(
    claim_id: str,
    body: SpecialistReviewRequest,
    principal: Principal = Depends(require_roles(SystemRole.payroll_specialist)),
    svc: ClaimService = Depends(_service),
) -> ClaimResponse:
    claim = await svc.review(
        claim_id,
        actor=principal.subject,
        action=body.action,
        amount=body.approved_amount,
        rejection_reason=body.rejection_reason,
        comment=body.comment,
    )
    return ClaimResponse.model_validate(claim)


@router.patch("/{claim_id}/confirm-approval", response_model=ClaimResponse)
async def confirm_claim(
    claim_id: str,
    body: ManagerConfirmRequest,
    principal: Principal = Depends(require_roles(SystemRole.payroll_manager)),
    svc: ClaimService = Depends(_service),
) -> ClaimResponse:
    claim = await svc.confirm(
        claim_id,
        actor=principal.subject,
        action=body.action,
        amount_override=body.approved_amount,
        rejection_reason=body.rejection_reason,
        comment=body.comment,
    )
    return ClaimResponse.model_validate(claim)


@router.patch("/{claim_id}/reject", response_model=ClaimResponse)
async def reject_claim(
    claim_id: str,
    body: ManagerRejectRequest,
    principal: Principal = Depends(require_roles(SystemRole.payroll_manager)),
    svc: ClaimService = Depends(_service),
) -> ClaimResponse:
    claim = await svc.reject(
        claim_id,
        actor=principal.subject,
        rejection_reason=body.rejection_reason,
        comment=body.comment,
    )
    return ClaimResponse.model_validate(claim)


@router.post(
    "/{claim_id}/generate-refund",
    response_model=RefundResponse,
    status_code=HTTP_201_CREATED,
)
async def generate_claim_refund(
    claim_id: str,
    body: GenerateRefundRequest,
    principal: Principal = Depends(require_roles(SystemRole.finance_staff)),
    svc: ClaimService = Depends(_service),
) -> RefundResponse:
    refund = await svc.generate_refund(
        claim_id, finance_staff_id=principal.subject, description=body.description
    )
    return RefundResponse.model_validate(refund)


# --- Module Notes -----------------------------------------------------------
# Fixed paths (/approved, /notifications, ...) are declared before /{claim_id}
# so they are matched first.
