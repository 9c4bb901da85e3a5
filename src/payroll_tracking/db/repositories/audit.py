"""
payroll_tracking.db.repositories.audit

Repository for `AuditEvent` entities.

Responsibilities:
- Append audit events for every workflow action on claims and disputes.
- Query the audit trail of a single claim/dispute.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from payroll_tracking.db.models import AuditEvent


class AuditRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(
        self,
        *,
        entity_type: str,
        entity_id: str,
        actor: str,
        event_type: str,
        details: dict[str, Any],
    ) -> AuditEvent:
        # Append-only: no update/delete in normal operation.
        ev = AuditEvent(
            entity_type=entity_type,
            entity_id=entity_id,
            actor=actor,
            event_type=event_type,
            details=details,
        )
        self._session.add(ev)
        await self._session.flush()
        return ev

    async def list_for_entity(
        self, *, entity_type: str, entity_id: str, limit: int = 200
    ) -> list[AuditEvent]:
        # Oldest-first so the trail reads as the workflow happened.
        stmt = (
            select(AuditEvent)
            .where(AuditEvent.entity_type == entity_type, AuditEvent.entity_id == entity_id)
            .order_by(AuditEvent.created_at)
            .limit(limit)
        )
        return list((await self._session.execute(stmt)).scalars().all())
