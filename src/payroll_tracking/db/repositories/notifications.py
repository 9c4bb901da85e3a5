from __future__ import annotations

import uuid

from sqlalchemy import desc, exists, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from payroll_tracking.db.models import Notification, NotificationRead, NotificationType


class NotificationRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(
        self,
        *,
        type: NotificationType,
        title: str,
        message: str,
        related_entity_id: str | None,
        recipient_id: str | None = None,
        recipient_role: str | None = None,
    ) -> Notification:
        note = Notification(
            recipient_id=recipient_id,
            recipient_role=recipient_role,
            type=type,
            title=title,
            message=message,
            related_entity_id=related_entity_id,
            related_module="Payroll",
        )
        self._session.add(note)
        await self._session.flush()
        return note

    async def get(self, notification_id: uuid.UUID) -> Notification | None:
        return await self._session.get(Notification, notification_id)

    async def is_read_by(self, notification_id: uuid.UUID, reader_id: str) -> bool:
        stmt = select(
            exists().where(
                NotificationRead.notification_id == notification_id,
                NotificationRead.reader_id == reader_id,
            )
        )
        return bool((await self._session.execute(stmt)).scalar())

    async def add_read(self, notification_id: uuid.UUID, reader_id: str) -> None:
        self._session.add(NotificationRead(notification_id=notification_id, reader_id=reader_id))
        await self._session.flush()

    async def list_for_recipient(
        self,
        *,
        recipient_id: str,
        roles: frozenset[str],
        unread_only: bool = False,
        title: str | None = None,
        limit: int = 200,
    ) -> list[tuple[Notification, bool]]:
        """Notifications addressed to the caller, each with the caller's own read flag."""
        read_by_caller = exists().where(
            NotificationRead.notification_id == Notification.id,
            NotificationRead.reader_id == recipient_id,
        )
        addressed = [Notification.recipient_id == recipient_id]
        if roles:
            addressed.append(Notification.recipient_role.in_(sorted(roles)))
        stmt = select(Notification, read_by_caller.label("is_read")).where(or_(*addressed))
        if unread_only:
            stmt = stmt.where(~read_by_caller)
        if title is not None:
            stmt = stmt.where(Notification.title == title)
        stmt = stmt.order_by(desc(Notification.created_at)).limit(limit)
        rows = (await self._session.execute(stmt)).all()
        return [(note, bool(is_read)) for note, is_read in rows]
