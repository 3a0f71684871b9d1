"""Template operations: listing, CRUD, duplication, generation and stats.

Functions take the request-scoped session and the calling actor. They
flush but never commit; the router commits and then writes the audit
record. Anything the actor may not see raises NotFoundError.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import ColumnElement, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy.orm.attributes import set_committed_value

from src.api.errors import NotFoundError
from src.models.enums import TemplateCategory, TemplateType
from src.models.template import Template
from src.schemas.common import Actor, total_pages
from src.schemas.templates import (
    CategoryCount,
    GeneratedDocument,
    TemplateCreate,
    TemplateOut,
    TemplatePagination,
    TemplateStats,
    TemplateUpdate,
    TopTemplate,
    TypeCount,
)
from src.security.permissions import Access, can_access_template, template_visibility_clause

logger = logging.getLogger(__name__)

TOP_USED = 5


# ── Rendering ────────────────────────────────────────────────────────


def _format_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def render_content(content: str, variables: dict[str, Any]) -> str:
    """Replace every `{{key}}` marker for the supplied keys.

    Markers without a supplied value are left untouched. Keys are matched
    literally.

    >>> render_content("Olá {{nome}}, seu caso {{numero}} foi atualizado.", {"nome": "Ana"})
    'Olá Ana, seu caso {{numero}} foi atualizado.'
    """
    rendered = content
    for key, value in variables.items():
        rendered = rendered.replace("{{" + key + "}}", _format_value(value))
    return rendered


def snapshot(template: Template) -> dict[str, Any]:
    """JSON-ready copy of a template for audit old/new data."""
    return TemplateOut.model_validate(template).model_dump(
        mode="json", by_alias=True, exclude={"created_by"}
    )


# ── Loading ──────────────────────────────────────────────────────────


async def _load(db: AsyncSession, template_id: uuid.UUID) -> Template | None:
    result = await db.execute(
        select(Template)
        .where(Template.id == template_id)
        .options(selectinload(Template.created_by))
    )
    return result.scalar_one_or_none()


async def _refresh(db: AsyncSession, template: Template) -> None:
    """Flush, then reload server-side columns and the owner reference."""
    await db.flush()
    await db.refresh(template)
    await db.refresh(template, attribute_names=["created_by"])


async def get_template(
    db: AsyncSession,
    template_id: uuid.UUID,
    actor: Actor,
    access: Access = Access.READ,
) -> Template:
    """Fetch a template the actor may access, or raise NotFoundError."""
    template = await _load(db, template_id)
    if template is None or not can_access_template(template, actor, access):
        raise NotFoundError("Template não encontrado")
    return template


# ── Listing ──────────────────────────────────────────────────────────


@dataclass(frozen=True)
class TemplateFilters:
    type: TemplateType | None = None
    category: TemplateCategory | None = None
    search: str | None = None
    is_public: bool | None = None
    created_by: uuid.UUID | None = None


def _filter_clauses(filters: TemplateFilters, actor: Actor) -> list[ColumnElement[bool]]:
    clauses: list[ColumnElement[bool]] = [Template.is_active.is_(True)]
    if filters.type:
        clauses.append(Template.type == filters.type.value)
    if filters.category:
        clauses.append(Template.category == filters.category.value)
    if filters.is_public is not None:
        clauses.append(Template.is_public.is_(filters.is_public))
    if filters.created_by:
        clauses.append(Template.created_by_id == filters.created_by)
    if filters.search:
        term = filters.search.strip()
        clauses.append(
            or_(
                Template.name.icontains(term, autoescape=True),
                Template.description.icontains(term, autoescape=True),
                Template.tags.any(term),
            )
        )
    visibility = template_visibility_clause(actor)
    if visibility is not None:
        clauses.append(visibility)
    return clauses


async def list_templates(
    db: AsyncSession,
    actor: Actor,
    filters: TemplateFilters,
    page: int = 1,
    limit: int = 10,
) -> tuple[list[Template], TemplatePagination]:
    """Visible, active templates matching the filters, newest first."""
    clauses = _filter_clauses(filters, actor)

    result = await db.execute(select(func.count(Template.id)).where(*clauses))
    total = result.scalar() or 0

    result = await db.execute(
        select(Template)
        .where(*clauses)
        .options(selectinload(Template.created_by))
        .order_by(Template.created_at.desc(), Template.id.asc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    templates = list(result.scalars().all())

    pages = total_pages(total, limit)
    return templates, TemplatePagination(
        page=page,
        limit=limit,
        total=total,
        total_pages=pages,
        has_next=page < pages,
        has_prev=page > 1,
    )


# ── Mutations ────────────────────────────────────────────────────────


async def create_template(db: AsyncSession, actor: Actor, data: TemplateCreate) -> Template:
    template = Template(
        name=data.name,
        description=data.description,
        type=data.type.value,
        category=data.category.value,
        content=data.content,
        variables=[v.model_dump(mode="json", by_alias=True) for v in data.variables],
        tags=list(data.tags),
        is_public=data.is_public,
        is_active=True,
        usage_count=0,
        version=1,
        created_by_id=actor.id,
    )
    db.add(template)
    await _refresh(db, template)
    logger.info("Template %s created by %s", template.id, actor.id)
    return template


async def update_template(
    db: AsyncSession,
    template_id: uuid.UUID,
    actor: Actor,
    data: TemplateUpdate,
) -> tuple[dict[str, Any], Template]:
    """Apply a partial update. Returns (snapshot before, updated template)."""
    template = await get_template(db, template_id, actor, Access.WRITE)
    before = snapshot(template)

    changes = data.model_dump(exclude_unset=True)
    for field, value in changes.items():
        if field == "variables":
            value = [v.model_dump(mode="json", by_alias=True) for v in data.variables or []]
        elif field in ("type", "category") and value is not None:
            value = value.value
        elif value is None and field in ("name", "type", "category", "content", "is_public", "tags"):
            # Non-nullable columns: explicit null means "leave as is"
            continue
        setattr(template, field, value)

    result = await db.execute(
        update(Template)
        .where(Template.id == template.id)
        .values(version=Template.version + 1)
        .returning(Template.version)
        .execution_options(synchronize_session=False)
    )
    set_committed_value(template, "version", result.scalar_one())
    await _refresh(db, template)
    logger.info("Template %s updated to v%d by %s", template.id, template.version, actor.id)
    return before, template


async def delete_template(
    db: AsyncSession, template_id: uuid.UUID, actor: Actor
) -> tuple[dict[str, Any], Template]:
    """Soft delete: the row stays, `is_active` goes false. Returns (snapshot before, template)."""
    template = await get_template(db, template_id, actor, Access.WRITE)
    before = snapshot(template)
    template.is_active = False
    await db.flush()
    logger.info("Template %s soft-deleted by %s", template.id, actor.id)
    return before, template


async def duplicate_template(
    db: AsyncSession,
    template_id: uuid.UUID,
    actor: Actor,
    name: str,
) -> tuple[Template, Template]:
    """Copy a visible template under a new name. Returns (original, copy).

    The copy always starts private, owned by the caller, at version 1 with
    zero usage.
    """
    original = await get_template(db, template_id, actor, Access.READ)
    copy = Template(
        name=name,
        description=original.description,
        type=original.type,
        category=original.category,
        content=original.content,
        variables=list(original.variables or []),
        tags=list(original.tags or []),
        is_public=False,
        is_active=True,
        usage_count=0,
        version=1,
        created_by_id=actor.id,
    )
    db.add(copy)
    await _refresh(db, copy)
    logger.info("Template %s duplicated as %s by %s", original.id, copy.id, actor.id)
    return original, copy


async def generate_document(
    db: AsyncSession,
    template_id: uuid.UUID,
    actor: Actor,
    variables: dict[str, Any],
    document_name: str | None = None,
    now: datetime | None = None,
) -> tuple[Template, GeneratedDocument]:
    """Render a visible template and count the use.

    usage_count is incremented in a single UPDATE ... RETURNING.
    """
    template = await get_template(db, template_id, actor, Access.READ)
    content = render_content(template.content, variables)

    result = await db.execute(
        update(Template)
        .where(Template.id == template.id)
        .values(usage_count=Template.usage_count + 1)
        .returning(Template.usage_count)
    )
    template.usage_count = result.scalar_one()

    now = now or datetime.now(UTC)
    name = document_name or f"{template.name} - {now.strftime('%d/%m/%Y')}"
    document = GeneratedDocument(id=f"doc_{uuid.uuid4().hex}", name=name, content=content)
    logger.info("Document %s generated from template %s by %s", document.id, template.id, actor.id)
    return template, document


# ── Stats ────────────────────────────────────────────────────────────


async def get_template_stats(db: AsyncSession, actor: Actor) -> TemplateStats:
    """Aggregates over the active templates the actor can see."""
    clauses = _filter_clauses(TemplateFilters(), actor)

    result = await db.execute(
        select(
            func.count(Template.id),
            func.count(Template.id).filter(Template.is_public.is_(True)),
        ).where(*clauses)
    )
    total, public = result.one()

    type_count = func.count(Template.id).label("count")
    result = await db.execute(
        select(Template.type, type_count)
        .where(*clauses)
        .group_by(Template.type)
        .order_by(type_count.desc())
    )
    by_type = [TypeCount(type=t, count=c) for t, c in result.all()]

    category_count = func.count(Template.id).label("count")
    result = await db.execute(
        select(Template.category, category_count)
        .where(*clauses)
        .group_by(Template.category)
        .order_by(category_count.desc())
    )
    by_category = [CategoryCount(category=cat, count=c) for cat, c in result.all()]

    result = await db.execute(
        select(Template.id, Template.name, Template.usage_count, Template.type, Template.category)
        .where(*clauses)
        .order_by(Template.usage_count.desc(), Template.name.asc())
        .limit(TOP_USED)
    )
    top_used = [
        TopTemplate(id=tid, name=name, usage_count=usage, type=t, category=cat)
        for tid, name, usage, t, cat in result.all()
    ]

    total = total or 0
    public = public or 0
    return TemplateStats(
        total=total,
        public=public,
        private=total - public,
        by_type=by_type,
        by_category=by_category,
        top_used=top_used,
    )
