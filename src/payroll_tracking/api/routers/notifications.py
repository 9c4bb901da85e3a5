"""
payroll_tracking.api.routers.notifications

In-app notifications for the current caller (direct and role-addressed).
"""

from __future__ import annotations

import uuid
from datetime import datetime

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict
from sqlalchemy.ext.asyncio import AsyncSession

from payroll_tracking.api.deps import db_session
from payroll_tracking.auth.deps import get_principal
from payroll_tracking.auth.models import Principal
from payroll_tracking.services.notification_service import NotificationService

router = APIRouter(prefix="/v1/notifications", tags=["notifications"])


class NotificationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    recipient_id: str | None
    recipient_role: str | None
    type: str
    title: str
    message: str
    related_entity_id: str | None
    related_module: str
    is_read: bool
    created_at: datetime


@router.get("", response_model=list[NotificationResponse])
async def list_notifications(
    unread_only: bool = Query(default=False),
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(db_session),
) -> list[NotificationResponse]:
    notes = await NotificationService(session).list_for(principal, unread_only=unread_only)
    return [NotificationResponse.model_validate(n) for n in notes]


@router.patch("/{notification_id}/read", response_model=NotificationResponse)
async def mark_notification_read(
    notification_id: uuid.UUID,
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(db_session),
) -> NotificationResponse:
    note = await NotificationService(session).mark_read(notification_id, principal)
    return NotificationResponse.model_validate(note)
