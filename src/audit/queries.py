"""Read side of the audit trail: filtered listing, single lookup and stats."""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime, timedelta
from typing import Any

from sqlalchemy import ColumnElement, Select, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from src.models.audit import AuditLog
from src.models.enums import AuditAction, AuditEntity, AuditPeriod

logger = logging.getLogger(__name__)

TOP_USERS = 10


def period_start(period: AuditPeriod, now: datetime | None = None) -> datetime:
    """First instant covered by a stats period.

    `week` is a rolling seven days; the others start at the calendar
    boundary (month is month-to-date, not a rolling 30 days).
    """
    now = now or datetime.now(UTC)
    if period is AuditPeriod.TODAY:
        return now.replace(hour=0, minute=0, second=0, microsecond=0)
    if period is AuditPeriod.WEEK:
        return now - timedelta(days=7)
    if period is AuditPeriod.YEAR:
        return now.replace(month=1, day=1, hour=0, minute=0, second=0, microsecond=0)
    return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def build_filters(
    user_id: uuid.UUID | None = None,
    entity: AuditEntity | None = None,
    action: AuditAction | None = None,
    entity_id: str | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    search: str | None = None,
) -> list[ColumnElement[bool]]:
    """Translate listing filters into WHERE clauses (ANDed by the caller)."""
    clauses: list[ColumnElement[bool]] = []
    if user_id:
        clauses.append(AuditLog.user_id == user_id)
    if entity:
        clauses.append(AuditLog.entity == entity.value)
    if action:
        clauses.append(AuditLog.action == action.value)
    if entity_id:
        clauses.append(AuditLog.entity_id == entity_id)
    if start_date:
        clauses.append(AuditLog.created_at >= start_date)
    if end_date:
        clauses.append(AuditLog.created_at <= end_date)
    if search:
        clauses.append(
            or_(
                AuditLog.user_email.icontains(search, autoescape=True),
                AuditLog.user_name.icontains(search, autoescape=True),
                AuditLog.entity_name.icontains(search, autoescape=True),
                AuditLog.description.icontains(search, autoescape=True),
            )
        )
    return clauses


async def get_audit_logs_paginated(
    db: AsyncSession,
    page: int = 1,
    per_page: int = 50,
    **filters: Any,
) -> tuple[list[AuditLog], int]:
    """Get paginated audit log, newest first. Returns (logs, total_count)."""
    clauses = build_filters(**filters)

    query: Select[tuple[AuditLog]] = select(AuditLog).options(selectinload(AuditLog.user))
    count_query = select(func.count(AuditLog.id))
    if clauses:
        query = query.where(*clauses)
        count_query = count_query.where(*clauses)

    result = await db.execute(count_query)
    total = result.scalar() or 0

    offset = (page - 1) * per_page
    result = await db.execute(
        query.order_by(AuditLog.created_at.desc()).offset(offset).limit(per_page)
    )
    logs = list(result.scalars().all())

    return logs, total


async def get_audit_log(db: AsyncSession, log_id: uuid.UUID) -> AuditLog | None:
    result = await db.execute(
        select(AuditLog).where(AuditLog.id == log_id).options(selectinload(AuditLog.user))
    )
    return result.scalar_one_or_none()


async def get_audit_stats(
    db: AsyncSession,
    period: AuditPeriod = AuditPeriod.MONTH,
    entity: AuditEntity | None = None,
    now: datetime | None = None,
) -> dict[str, Any]:
    """Counts by action, by entity and by user (top 10) within the period window."""
    start = period_start(period, now)
    clauses: list[ColumnElement[bool]] = [AuditLog.created_at >= start]
    if entity:
        clauses.append(AuditLog.entity == entity.value)

    result = await db.execute(select(func.count(AuditLog.id)).where(*clauses))
    total = result.scalar() or 0

    action_count = func.count(AuditLog.id).label("count")
    result = await db.execute(
        select(AuditLog.action, action_count)
        .where(*clauses)
        .group_by(AuditLog.action)
        .order_by(action_count.desc())
    )
    action_stats = [{"action": action, "count": count} for action, count in result.all()]

    entity_count = func.count(AuditLog.id).label("count")
    result = await db.execute(
        select(AuditLog.entity, entity_count)
        .where(*clauses)
        .group_by(AuditLog.entity)
        .order_by(entity_count.desc())
    )
    entity_stats = [{"entity": ent, "count": count} for ent, count in result.all()]

    user_count = func.count(AuditLog.id).label("count")
    result = await db.execute(
        select(AuditLog.user_id, AuditLog.user_name, AuditLog.user_email, user_count)
        .where(*clauses)
        .group_by(AuditLog.user_id, AuditLog.user_name, AuditLog.user_email)
        .order_by(user_count.desc())
        .limit(TOP_USERS)
    )
    user_stats = [
        {"user_id": uid, "user_name": name, "user_email": email, "count": count}
        for uid, name, email, count in result.all()
    ]

    return {
        "total_logs": total,
        "period": period,
        "start_date": start,
        "action_stats": action_stats,
        "entity_stats": entity_stats,
        "user_stats": user_stats,
    }
