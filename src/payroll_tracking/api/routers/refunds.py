from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from payroll_tracking.api.deps import db_session
from payroll_tracking.api.schemas import RefundResponse
from payroll_tracking.auth.deps import get_principal, require_roles
from payroll_tracking.auth.models import Principal, SystemRole
from payroll_tracking.services.refund_service import RefundService

router = APIRouter(prefix="/v1/refunds", tags=["refunds"])


@router.get("", response_model=list[RefundResponse])
async def list_my_refunds(
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(db_session),
) -> list[RefundResponse]:
    refunds = await RefundService(session).list_for_employee(principal.subject)
    return [RefundResponse.model_validate(r) for r in refunds]


@router.get(
    "/pending",
    response_model=list[RefundResponse],
    dependencies=[Depends(require_roles(SystemRole.finance_staff))],
)
async def list_pending_refunds(
    session: AsyncSession = Depends(db_session),
) -> list[RefundResponse]:
    return [RefundResponse.model_validate(r) for r in await RefundService(session).list_pending()]
