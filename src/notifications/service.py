"""In-app notifications: per-user inbox with read state.

A notification is only ever visible to its recipient; anyone else gets
NotFoundError, including ADMIN.
"""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime

from sqlalchemy import ColumnElement, Select, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from src.api.errors import NotFoundError
from src.models.enums import NotificationPriority, NotificationType
from src.models.notification import Notification
from src.schemas.common import Actor
from src.schemas.notifications import NotificationCreate

logger = logging.getLogger(__name__)


def _with_links(stmt: Select[tuple[Notification]]) -> Select[tuple[Notification]]:
    return stmt.options(
        selectinload(Notification.case),
        selectinload(Notification.document),
        selectinload(Notification.appointment),
    )


async def list_notifications(
    db: AsyncSession,
    actor: Actor,
    page: int = 1,
    limit: int = 20,
    is_read: bool | None = None,
    type: NotificationType | None = None,
    priority: NotificationPriority | None = None,
) -> tuple[list[Notification], int]:
    """The actor's notifications, newest first. Returns (page, total)."""
    clauses: list[ColumnElement[bool]] = [Notification.user_id == actor.id]
    if is_read is not None:
        clauses.append(Notification.is_read.is_(is_read))
    if type:
        clauses.append(Notification.type == type.value)
    if priority:
        clauses.append(Notification.priority == priority.value)

    result = await db.execute(select(func.count(Notification.id)).where(*clauses))
    total = result.scalar() or 0

    result = await db.execute(
        _with_links(select(Notification))
        .where(*clauses)
        .order_by(Notification.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    return list(result.scalars().all()), total


async def unread_count(db: AsyncSession, actor: Actor) -> int:
    result = await db.execute(
        select(func.count(Notification.id)).where(
            Notification.user_id == actor.id,
            Notification.is_read.is_(False),
        )
    )
    return result.scalar() or 0


async def _load(db: AsyncSession, notification_id: uuid.UUID) -> Notification | None:
    result = await db.execute(
        _with_links(select(Notification))
        .where(Notification.id == notification_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_notification(db: AsyncSession, notification_id: uuid.UUID, actor: Actor) -> Notification:
    notification = await _load(db, notification_id)
    if notification is None or notification.user_id != actor.id:
        raise NotFoundError("Notificação não encontrada")
    return notification


async def create_notification(db: AsyncSession, actor: Actor, data: NotificationCreate) -> Notification:
    """Create a notification. Only ADMIN may address someone other than themselves."""
    recipient = data.user_id if actor.is_admin and data.user_id else actor.id
    notification = Notification(
        user_id=recipient,
        title=data.title,
        message=data.message,
        type=data.type.value,
        priority=data.priority.value,
        action_url=data.action_url,
        meta=data.metadata,
        is_read=False,
        case_id=data.case_id,
        document_id=data.document_id,
        appointment_id=data.appointment_id,
    )
    db.add(notification)
    await db.flush()

    loaded = await _load(db, notification.id)
    if loaded is None:
        raise NotFoundError("Notificação não encontrada")
    logger.info("Notification %s created for %s by %s", loaded.id, recipient, actor.id)
    return loaded


async def mark_read(db: AsyncSession, notification_id: uuid.UUID, actor: Actor) -> Notification:
    notification = await get_notification(db, notification_id, actor)
    if not notification.is_read:
        notification.is_read = True
        notification.read_at = datetime.now(UTC)
        await db.flush()
        await db.refresh(notification, attribute_names=["updated_at"])
    return notification


async def mark_all_read(db: AsyncSession, actor: Actor) -> int:
    """Mark every unread notification of the actor as read. Returns how many changed."""
    result = await db.execute(
        update(Notification)
        .where(Notification.user_id == actor.id, Notification.is_read.is_(False))
        .values(is_read=True, read_at=datetime.now(UTC))
    )
    return result.rowcount or 0


async def delete_notification(db: AsyncSession, notification_id: uuid.UUID, actor: Actor) -> None:
    notification = await get_notification(db, notification_id, actor)
    await db.delete(notification)
    await db.flush()
