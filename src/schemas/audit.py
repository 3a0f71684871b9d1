"""Pydantic schemas for the audit trail read side (listing and stats)."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from pydantic import Field

from src.models.enums import AuditPeriod
from src.schemas.common import ApiModel, UserRefWithAvatar


class AuditLogOut(ApiModel):
    id: uuid.UUID
    action: str
    entity: str
    entity_id: str | None = None
    entity_name: str | None = None
    user_id: uuid.UUID
    user_email: str
    user_name: str
    description: str | None = None
    old_data: dict[str, Any] | None = None
    new_data: dict[str, Any] | None = None
    metadata: dict[str, Any] | None = Field(default=None, validation_alias="meta")
    ip_address: str | None = None
    user_agent: str | None = None
    created_at: datetime
    user: UserRefWithAvatar | None = None


class AuditLogListResponse(ApiModel):
    logs: list[AuditLogOut]
    total: int
    page: int
    limit: int
    total_pages: int


class ActionStat(ApiModel):
    action: str
    count: int


class EntityStat(ApiModel):
    entity: str
    count: int


class UserStat(ApiModel):
    user_id: uuid.UUID
    user_name: str
    user_email: str
    count: int


class AuditStatsResponse(ApiModel):
    total_logs: int
    period: AuditPeriod
    start_date: datetime
    action_stats: list[ActionStat]
    entity_stats: list[EntityStat]
    user_stats: list[UserStat]
