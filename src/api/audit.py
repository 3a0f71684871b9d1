"""Audit trail read endpoints, ADMIN only."""
# ruff: noqa: B008

from __future__ import annotations

import uuid
from datetime import datetime

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.errors import NotFoundError
from src.audit.queries import get_audit_log, get_audit_logs_paginated, get_audit_stats
from src.db.engine import get_session
from src.models.enums import AuditAction, AuditEntity, AuditPeriod, UserRole
from src.schemas.audit import AuditLogListResponse, AuditLogOut, AuditStatsResponse
from src.schemas.common import total_pages
from src.security.auth import require_roles

router = APIRouter(
    prefix="/audit",
    tags=["audit"],
    dependencies=[Depends(require_roles(UserRole.ADMIN))],
)


@router.get("", response_model=AuditLogListResponse)
async def list_audit_logs(
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=100),
    user_id: uuid.UUID | None = Query(None, alias="userId"),
    entity: AuditEntity | None = Query(None),
    action: AuditAction | None = Query(None),
    entity_id: str | None = Query(None, alias="entityId"),
    start_date: datetime | None = Query(None, alias="startDate"),
    end_date: datetime | None = Query(None, alias="endDate"),
    search: str | None = Query(None),
    db: AsyncSession = Depends(get_session),
) -> AuditLogListResponse:
    """Filtered audit log, newest first."""
    logs, total = await get_audit_logs_paginated(
        db,
        page=page,
        per_page=limit,
        user_id=user_id,
        entity=entity,
        action=action,
        entity_id=entity_id,
        start_date=start_date,
        end_date=end_date,
        search=search or None,
    )
    return AuditLogListResponse(
        logs=[AuditLogOut.model_validate(log) for log in logs],
        total=total,
        page=page,
        limit=limit,
        total_pages=total_pages(total, limit),
    )


@router.get("/stats", response_model=AuditStatsResponse)
async def audit_stats(
    period: AuditPeriod = Query(AuditPeriod.MONTH),
    entity: AuditEntity | None = Query(None),
    db: AsyncSession = Depends(get_session),
) -> AuditStatsResponse:
    stats = await get_audit_stats(db, period=period, entity=entity)
    return AuditStatsResponse.model_validate(stats)


@router.get("/{log_id}", response_model=AuditLogOut)
async def get_audit_entry(
    log_id: uuid.UUID,
    db: AsyncSession = Depends(get_session),
) -> AuditLogOut:
    log = await get_audit_log(db, log_id)
    if log is None:
        raise NotFoundError("Log de auditoria não encontrado")
    return AuditLogOut.model_validate(log)
