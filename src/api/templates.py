"""Document template endpoints: CRUD, duplicate, generate and stats.

Every mutation commits before its audit entry is written.
"""
# ruff: noqa: B008

from __future__ import annotations

import uuid
from enum import Enum
from typing import Any, TypeVar

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.errors import InvalidRequestError
from src.audit.recorder import AuditRecorder, get_audit_recorder
from src.db.engine import get_session
from src.models.enums import AuditEntity, TemplateCategory, TemplateType
from src.schemas.common import Actor, MessageResponse
from src.schemas.templates import (
    DuplicateTemplateRequest,
    GenerateDocumentRequest,
    GenerateDocumentResponse,
    TemplateCreate,
    TemplateListResponse,
    TemplateMutationResponse,
    TemplateOut,
    TemplateStats,
    TemplateUpdate,
)
from src.security.auth import get_current_actor
from src.templates import service
from src.templates.service import TemplateFilters, snapshot

router = APIRouter(prefix="/templates", tags=["templates"])

ALL = "ALL"

E = TypeVar("E", bound=Enum)


def _parse_filter(value: str | None, enum: type[E], param: str) -> E | None:
    """`ALL` (or nothing) disables a filter; anything else must be a member."""
    if value is None or value == ALL:
        return None
    try:
        return enum(value)
    except ValueError:
        raise InvalidRequestError(
            "Invalid parameters",
            details=[{"loc": ["query", param], "msg": f"Invalid value: {value}", "type": "enum"}],
        ) from None


def _parse_visibility(value: str | None) -> bool | None:
    if value is None or value == ALL:
        return None
    if value in ("true", "false"):
        return value == "true"
    raise InvalidRequestError(
        "Invalid parameters",
        details=[{"loc": ["query", "isPublic"], "msg": "Expected ALL, true or false", "type": "enum"}],
    )


@router.get("", response_model=TemplateListResponse)
async def list_templates(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    type: str | None = Query(None),
    category: str | None = Query(None),
    search: str | None = Query(None),
    is_public: str | None = Query(None, alias="isPublic"),
    created_by: uuid.UUID | None = Query(None, alias="createdBy"),
    db: AsyncSession = Depends(get_session),
    actor: Actor = Depends(get_current_actor),
) -> TemplateListResponse:
    """Paginated list of the active templates the caller can see."""
    filters = TemplateFilters(
        type=_parse_filter(type, TemplateType, "type"),
        category=_parse_filter(category, TemplateCategory, "category"),
        search=search or None,
        is_public=_parse_visibility(is_public),
        created_by=created_by,
    )
    templates, pagination = await service.list_templates(db, actor, filters, page=page, limit=limit)
    return TemplateListResponse(
        templates=[TemplateOut.model_validate(t) for t in templates],
        pagination=pagination,
    )


# Declared before /{template_id} so "stats" is not parsed as an id
@router.get("/stats", response_model=TemplateStats)
async def template_stats(
    db: AsyncSession = Depends(get_session),
    actor: Actor = Depends(get_current_actor),
) -> TemplateStats:
    return await service.get_template_stats(db, actor)


@router.get("/{template_id}", response_model=TemplateOut)
async def get_template(
    template_id: uuid.UUID,
    db: AsyncSession = Depends(get_session),
    actor: Actor = Depends(get_current_actor),
) -> TemplateOut:
    template = await service.get_template(db, template_id, actor)
    return TemplateOut.model_validate(template)


@router.post("", response_model=TemplateMutationResponse, status_code=status.HTTP_201_CREATED)
async def create_template(
    body: TemplateCreate,
    request: Request,
    db: AsyncSession = Depends(get_session),
    actor: Actor = Depends(get_current_actor),
    audit: AuditRecorder = Depends(get_audit_recorder),
) -> TemplateMutationResponse:
    template = await service.create_template(db, actor, body)
    await db.commit()

    await audit.log_create(
        AuditEntity.TEMPLATE,
        template.id,
        template.name,
        actor,
        new_data=snapshot(template),
        metadata={"type": template.type, "category": template.category},
        request=request,
    )
    return TemplateMutationResponse(
        message="Template criado com sucesso",
        template=TemplateOut.model_validate(template),
    )


@router.put("/{template_id}", response_model=TemplateMutationResponse)
async def update_template(
    template_id: uuid.UUID,
    body: TemplateUpdate,
    request: Request,
    db: AsyncSession = Depends(get_session),
    actor: Actor = Depends(get_current_actor),
    audit: AuditRecorder = Depends(get_audit_recorder),
) -> TemplateMutationResponse:
    before, template = await service.update_template(db, template_id, actor, body)
    await db.commit()

    await audit.log_update(
        AuditEntity.TEMPLATE,
        template.id,
        template.name,
        actor,
        old_data=before,
        new_data=snapshot(template),
        metadata={"version": template.version},
        request=request,
    )
    return TemplateMutationResponse(
        message="Template atualizado com sucesso",
        template=TemplateOut.model_validate(template),
    )


@router.delete("/{template_id}", response_model=MessageResponse)
async def delete_template(
    template_id: uuid.UUID,
    request: Request,
    db: AsyncSession = Depends(get_session),
    actor: Actor = Depends(get_current_actor),
    audit: AuditRecorder = Depends(get_audit_recorder),
) -> MessageResponse:
    """Soft delete; the template disappears from every listing."""
    before, template = await service.delete_template(db, template_id, actor)
    await db.commit()

    await audit.log_delete(
        AuditEntity.TEMPLATE,
        template.id,
        template.name,
        actor,
        old_data=before,
        metadata={"deletionType": "soft"},
        request=request,
    )
    return MessageResponse(message="Template excluído com sucesso")


@router.post(
    "/{template_id}/duplicate",
    response_model=TemplateMutationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def duplicate_template(
    template_id: uuid.UUID,
    body: DuplicateTemplateRequest,
    request: Request,
    db: AsyncSession = Depends(get_session),
    actor: Actor = Depends(get_current_actor),
    audit: AuditRecorder = Depends(get_audit_recorder),
) -> TemplateMutationResponse:
    original, copy = await service.duplicate_template(db, template_id, actor, body.name)
    await db.commit()

    await audit.log_duplicate(
        AuditEntity.TEMPLATE,
        original.id,
        original.name,
        copy.id,
        copy.name,
        actor,
        metadata={"originalType": original.type, "originalCategory": original.category},
        request=request,
    )
    return TemplateMutationResponse(
        message="Template duplicado com sucesso",
        template=TemplateOut.model_validate(copy),
    )


@router.post("/{template_id}/generate", response_model=GenerateDocumentResponse)
async def generate_document(
    template_id: uuid.UUID,
    body: GenerateDocumentRequest,
    request: Request,
    db: AsyncSession = Depends(get_session),
    actor: Actor = Depends(get_current_actor),
    audit: AuditRecorder = Depends(get_audit_recorder),
) -> GenerateDocumentResponse:
    """Render the template with the supplied values and count the use."""
    template, document = await service.generate_document(
        db, template_id, actor, body.variables, document_name=body.document_name
    )
    await db.commit()

    metadata: dict[str, Any] = {
        "templateType": template.type,
        "templateCategory": template.category,
        "variablesUsed": len(body.variables),
        "templateUsageCount": template.usage_count,
    }
    if body.case_id:
        metadata["caseId"] = str(body.case_id)
    await audit.log_generate(
        AuditEntity.DOCUMENT,
        template.id,
        template.name,
        document.id,
        document.name,
        actor,
        metadata=metadata,
        request=request,
    )
    return GenerateDocumentResponse(message="Documento gerado com sucesso", document=document)
