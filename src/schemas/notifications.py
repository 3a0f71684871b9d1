"""Pydantic schemas for in-app notifications."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from pydantic import Field

from src.models.enums import NotificationPriority, NotificationType
from src.schemas.common import ApiModel, CaseRef, Pagination


class NotificationCreate(ApiModel):
    title: str = Field(min_length=1)
    message: str = Field(min_length=1)
    type: NotificationType
    priority: NotificationPriority = NotificationPriority.MEDIUM
    action_url: str | None = None
    metadata: dict[str, Any] | None = None
    case_id: uuid.UUID | None = None
    document_id: uuid.UUID | None = None
    appointment_id: uuid.UUID | None = None
    # Honoured for ADMIN only; everyone else notifies themselves
    user_id: uuid.UUID | None = None


class NotificationDocumentRef(ApiModel):
    id: uuid.UUID
    name: str
    type: str


class NotificationAppointmentRef(ApiModel):
    id: uuid.UUID
    title: str
    start_date: datetime
    type: str


class NotificationOut(ApiModel):
    id: uuid.UUID
    title: str
    message: str
    type: str
    priority: str
    is_read: bool
    read_at: datetime | None = None
    action_url: str | None = None
    metadata: dict[str, Any] | None = Field(default=None, validation_alias="meta")
    user_id: uuid.UUID
    case_id: uuid.UUID | None = None
    document_id: uuid.UUID | None = None
    appointment_id: uuid.UUID | None = None
    created_at: datetime
    case: CaseRef | None = None
    document: NotificationDocumentRef | None = None
    appointment: NotificationAppointmentRef | None = None


class NotificationListResponse(ApiModel):
    data: list[NotificationOut]
    pagination: Pagination


class UnreadCountResponse(ApiModel):
    count: int
