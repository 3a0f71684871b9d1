"""Audit recorder: persists entity lifecycle events to the audit_logs table.

Handlers receive an AuditRecorder through a FastAPI dependency and call it
after their own unit of work has been committed. Each write uses its own
session.

Never raises; failures are logged and swallowed, with no retry
(at-most-once delivery).
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import Request
from pydantic_core import to_jsonable_python
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.db.engine import async_session_factory
from src.models.audit import AuditLog
from src.models.enums import AuditAction, AuditEntity
from src.schemas.common import Actor

logger = logging.getLogger(__name__)

# Descriptions shown on the audit screen (pt-BR, like the rest of the UI)
DESCRIPTIONS: dict[AuditAction, str] = {
    AuditAction.CREATE: "Criou {entity}: {name}",
    AuditAction.UPDATE: "Atualizou {entity}: {name}",
    AuditAction.DELETE: "Excluiu {entity}: {name}",
    AuditAction.VIEW: "Visualizou {entity}: {name}",
    AuditAction.DOWNLOAD: "Baixou {entity}: {name}",
    AuditAction.LOGIN: "Usuário fez login",
    AuditAction.LOGOUT: "Usuário fez logout",
    AuditAction.DUPLICATE: "Duplicou {entity}: {source} → {name}",
    AuditAction.GENERATE: "Gerou {entity}: {name} a partir de {source}",
}


def describe(action: AuditAction, entity: AuditEntity, name: str = "", source: str = "") -> str:
    """Render the human-readable description for an action."""
    return DESCRIPTIONS[action].format(entity=entity.value.lower(), name=name, source=source)


def _jsonable(value: Any) -> Any:
    """Make snapshots JSONB-safe (UUIDs, datetimes, enums, Pydantic models)."""
    if value is None:
        return None
    return to_jsonable_python(value)


class AuditRecorder:
    """Best-effort writer for audit records."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def record(
        self,
        action: AuditAction,
        entity: AuditEntity,
        actor: Actor,
        *,
        entity_id: Any = None,
        entity_name: str | None = None,
        description: str | None = None,
        old_data: Any = None,
        new_data: Any = None,
        metadata: dict[str, Any] | None = None,
        request: Request | None = None,
    ) -> None:
        """Write one audit record. Failures are logged and swallowed."""
        try:
            entry = AuditLog(
                action=action.value,
                entity=entity.value,
                entity_id=str(entity_id) if entity_id is not None else None,
                entity_name=entity_name,
                user_id=actor.id,
                user_email=actor.email,
                user_name=actor.name,
                description=description,
                old_data=_jsonable(old_data),
                new_data=_jsonable(new_data),
                meta=_jsonable(metadata),
                ip_address=request.client.host if request is not None and request.client else None,
                user_agent=request.headers.get("user-agent") if request is not None else None,
            )
            async with self._session_factory() as db:
                db.add(entry)
                await db.commit()
        except Exception:
            logger.exception(
                "Failed to persist audit record: %s %s (id=%s, actor=%s)",
                action.value,
                entity.value,
                entity_id,
                actor.id,
            )

    # ── Action helpers ───────────────────────────────────────────────

    async def log_create(
        self,
        entity: AuditEntity,
        entity_id: Any,
        entity_name: str,
        actor: Actor,
        new_data: Any = None,
        metadata: dict[str, Any] | None = None,
        request: Request | None = None,
    ) -> None:
        await self.record(
            AuditAction.CREATE,
            entity,
            actor,
            entity_id=entity_id,
            entity_name=entity_name,
            description=describe(AuditAction.CREATE, entity, entity_name),
            new_data=new_data,
            metadata=metadata,
            request=request,
        )

    async def log_update(
        self,
        entity: AuditEntity,
        entity_id: Any,
        entity_name: str,
        actor: Actor,
        old_data: Any = None,
        new_data: Any = None,
        metadata: dict[str, Any] | None = None,
        request: Request | None = None,
    ) -> None:
        await self.record(
            AuditAction.UPDATE,
            entity,
            actor,
            entity_id=entity_id,
            entity_name=entity_name,
            description=describe(AuditAction.UPDATE, entity, entity_name),
            old_data=old_data,
            new_data=new_data,
            metadata=metadata,
            request=request,
        )

    async def log_delete(
        self,
        entity: AuditEntity,
        entity_id: Any,
        entity_name: str,
        actor: Actor,
        old_data: Any = None,
        metadata: dict[str, Any] | None = None,
        request: Request | None = None,
    ) -> None:
        await self.record(
            AuditAction.DELETE,
            entity,
            actor,
            entity_id=entity_id,
            entity_name=entity_name,
            description=describe(AuditAction.DELETE, entity, entity_name),
            old_data=old_data,
            metadata=metadata,
            request=request,
        )

    async def log_login(
        self,
        actor: Actor,
        metadata: dict[str, Any] | None = None,
        request: Request | None = None,
    ) -> None:
        await self.record(
            AuditAction.LOGIN,
            AuditEntity.USER,
            actor,
            entity_id=actor.id,
            entity_name=actor.name,
            description=describe(AuditAction.LOGIN, AuditEntity.USER),
            metadata=metadata,
            request=request,
        )

    async def log_logout(
        self,
        actor: Actor,
        metadata: dict[str, Any] | None = None,
        request: Request | None = None,
    ) -> None:
        await self.record(
            AuditAction.LOGOUT,
            AuditEntity.USER,
            actor,
            entity_id=actor.id,
            entity_name=actor.name,
            description=describe(AuditAction.LOGOUT, AuditEntity.USER),
            metadata=metadata,
            request=request,
        )

    async def log_view(
        self,
        entity: AuditEntity,
        entity_id: Any,
        entity_name: str,
        actor: Actor,
        metadata: dict[str, Any] | None = None,
        request: Request | None = None,
    ) -> None:
        await self.record(
            AuditAction.VIEW,
            entity,
            actor,
            entity_id=entity_id,
            entity_name=entity_name,
            description=describe(AuditAction.VIEW, entity, entity_name),
            metadata=metadata,
            request=request,
        )

    async def log_download(
        self,
        entity: AuditEntity,
        entity_id: Any,
        entity_name: str,
        actor: Actor,
        metadata: dict[str, Any] | None = None,
        request: Request | None = None,
    ) -> None:
        await self.record(
            AuditAction.DOWNLOAD,
            entity,
            actor,
            entity_id=entity_id,
            entity_name=entity_name,
            description=describe(AuditAction.DOWNLOAD, entity, entity_name),
            metadata=metadata,
            request=request,
        )

    async def log_export(
        self,
        entity: AuditEntity,
        actor: Actor,
        description: str,
        metadata: dict[str, Any] | None = None,
        request: Request | None = None,
    ) -> None:
        """Exports have no single target entity; the caller writes the description."""
        await self.record(
            AuditAction.EXPORT,
            entity,
            actor,
            description=description,
            metadata=metadata,
            request=request,
        )

    async def log_duplicate(
        self,
        entity: AuditEntity,
        original_id: Any,
        original_name: str,
        new_id: Any,
        new_name: str,
        actor: Actor,
        metadata: dict[str, Any] | None = None,
        request: Request | None = None,
    ) -> None:
        """The copy is the audited entity; the original goes into metadata."""
        await self.record(
            AuditAction.DUPLICATE,
            entity,
            actor,
            entity_id=new_id,
            entity_name=new_name,
            description=describe(AuditAction.DUPLICATE, entity, new_name, source=original_name),
            metadata={**(metadata or {}), "originalId": str(original_id), "originalName": original_name},
            request=request,
        )

    async def log_generate(
        self,
        entity: AuditEntity,
        source_id: Any,
        source_name: str,
        target_id: Any,
        target_name: str,
        actor: Actor,
        metadata: dict[str, Any] | None = None,
        request: Request | None = None,
    ) -> None:
        """The generated artifact is the audited entity; its source goes into metadata."""
        await self.record(
            AuditAction.GENERATE,
            entity,
            actor,
            entity_id=target_id,
            entity_name=target_name,
            description=describe(AuditAction.GENERATE, entity, target_name, source=source_name),
            metadata={**(metadata or {}), "sourceId": str(source_id), "sourceName": source_name},
            request=request,
        )


_recorder = AuditRecorder(async_session_factory)


def get_audit_recorder() -> AuditRecorder:
    """FastAPI dependency; override in tests with a mock recorder."""
    return _recorder
