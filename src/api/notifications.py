"""Notification inbox endpoints for the authenticated user."""
# ruff: noqa: B008

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.db.engine import get_session
from src.models.enums import NotificationPriority, NotificationType
from src.notifications import service
from src.schemas.common import Actor, MessageResponse, Pagination, total_pages
from src.schemas.notifications import (
    NotificationCreate,
    NotificationListResponse,
    NotificationOut,
    UnreadCountResponse,
)
from src.security.auth import get_current_actor

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=NotificationListResponse)
async def list_notifications(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    is_read: bool | None = Query(None, alias="isRead"),
    type: NotificationType | None = Query(None),
    priority: NotificationPriority | None = Query(None),
    db: AsyncSession = Depends(get_session),
    actor: Actor = Depends(get_current_actor),
) -> NotificationListResponse:
    notifications, total = await service.list_notifications(
        db, actor, page=page, limit=limit, is_read=is_read, type=type, priority=priority
    )
    return NotificationListResponse(
        data=[NotificationOut.model_validate(n) for n in notifications],
        pagination=Pagination(page=page, limit=limit, total=total, total_pages=total_pages(total, limit)),
    )


@router.get("/unread-count", response_model=UnreadCountResponse)
async def get_unread_count(
    db: AsyncSession = Depends(get_session),
    actor: Actor = Depends(get_current_actor),
) -> UnreadCountResponse:
    return UnreadCountResponse(count=await service.unread_count(db, actor))


@router.post("", response_model=NotificationOut, status_code=status.HTTP_201_CREATED)
async def create_notification(
    body: NotificationCreate,
    db: AsyncSession = Depends(get_session),
    actor: Actor = Depends(get_current_actor),
) -> NotificationOut:
    notification = await service.create_notification(db, actor, body)
    await db.commit()
    return NotificationOut.model_validate(notification)


@router.put("/mark-all-read", response_model=MessageResponse)
async def mark_all_read(
    db: AsyncSession = Depends(get_session),
    actor: Actor = Depends(get_current_actor),
) -> MessageResponse:
    await service.mark_all_read(db, actor)
    await db.commit()
    return MessageResponse(message="Todas as notificações foram marcadas como lidas")


@router.put("/{notification_id}/read", response_model=NotificationOut)
async def mark_read(
    notification_id: uuid.UUID,
    db: AsyncSession = Depends(get_session),
    actor: Actor = Depends(get_current_actor),
) -> NotificationOut:
    notification = await service.mark_read(db, notification_id, actor)
    await db.commit()
    return NotificationOut.model_validate(notification)


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_notification(
    notification_id: uuid.UUID,
    db: AsyncSession = Depends(get_session),
    actor: Actor = Depends(get_current_actor),
) -> Response:
    await service.delete_notification(db, notification_id, actor)
    await db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
