"""Tests for the templates service.

Covers:
- Placeholder rendering (known keys replaced, unknown markers kept)
- Visibility and write rules (owner, ADMIN, public, inactive)
- Update bumps version by exactly one
- Duplicate produces a private copy owned by the caller
- Generate counts the use and synthesizes a document
- Soft delete and list pagination
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from src.api.errors import NotFoundError
from src.models.enums import TemplateCategory, TemplateType, UserRole
from src.models.template import Template
from src.schemas.common import Actor
from src.schemas.templates import TemplateCreate, TemplateUpdate
from src.templates.service import (
    TemplateFilters,
    create_template,
    delete_template,
    duplicate_template,
    generate_document,
    get_template,
    get_template_stats,
    list_templates,
    render_content,
    snapshot,
    update_template,
)

# ── Helpers ──────────────────────────────────────────────────────────


def _make_actor(role: UserRole = UserRole.LAWYER, actor_id: uuid.UUID | None = None) -> Actor:
    return Actor(
        id=actor_id or uuid.uuid4(),
        email="ana@juscrm.com.br",
        name="Ana Souza",
        role=role,
    )


def _make_template(
    owner_id: uuid.UUID | None = None,
    *,
    is_public: bool = False,
    is_active: bool = True,
    version: int = 1,
    usage_count: int = 0,
    content: str = "Olá {{nome}}, seu caso {{numero}} foi atualizado.",
) -> Template:
    now = datetime(2026, 10, 1, 12, 0, tzinfo=UTC)
    return Template(
        id=uuid.uuid4(),
        name="Comunicado ao cliente",
        description="Aviso de andamento",
        type=TemplateType.LETTER.value,
        category=TemplateCategory.LABOR_LAW.value,
        content=content,
        variables=[{"name": "nome", "label": "Nome", "type": "text", "required": True}],
        tags=["cliente"],
        is_public=is_public,
        is_active=is_active,
        usage_count=usage_count,
        version=version,
        created_by_id=owner_id or uuid.uuid4(),
        created_at=now,
        updated_at=now,
    )


def _make_db() -> AsyncMock:
    db = AsyncMock()
    db.add = MagicMock()
    return db


# ── Rendering ────────────────────────────────────────────────────────


class TestRenderContent:
    def test_known_key_replaced_unknown_kept(self):
        result = render_content(
            "Olá {{nome}}, seu caso {{numero}} foi atualizado.",
            {"nome": "Ana"},
        )
        assert result == "Olá Ana, seu caso {{numero}} foi atualizado."

    def test_every_occurrence_replaced(self):
        assert render_content("{{a}} e {{a}}", {"a": "x"}) == "x e x"

    def test_none_renders_empty(self):
        assert render_content("[{{x}}]", {"x": None}) == "[]"

    def test_numbers_and_booleans(self):
        assert render_content("{{n}} {{b}}", {"n": 42, "b": True}) == "42 true"

    def test_key_with_regex_characters_is_literal(self):
        assert render_content("{{a.b}} {{axb}}", {"a.b": "1"}) == "1 {{axb}}"

    def test_extra_keys_ignored(self):
        assert render_content("sem marcadores", {"nome": "Ana"}) == "sem marcadores"


class TestSnapshot:
    def test_camel_case_json(self):
        template = _make_template(version=3)
        data = snapshot(template)
        assert data["version"] == 3
        assert data["isActive"] is True
        assert data["createdById"] == str(template.created_by_id)
        assert "createdBy" not in data


# ── Access ───────────────────────────────────────────────────────────


class TestGetTemplate:
    @pytest.mark.asyncio()
    async def test_owner_can_read_private(self):
        actor = _make_actor()
        template = _make_template(actor.id)
        with patch("src.templates.service._load", new_callable=AsyncMock, return_value=template):
            assert await get_template(_make_db(), template.id, actor) is template

    @pytest.mark.asyncio()
    async def test_private_of_someone_else_is_not_found(self):
        template = _make_template()
        with patch("src.templates.service._load", new_callable=AsyncMock, return_value=template):
            with pytest.raises(NotFoundError):
                await get_template(_make_db(), template.id, _make_actor())

    @pytest.mark.asyncio()
    async def test_inactive_hidden_from_admin(self):
        template = _make_template(is_active=False)
        with patch("src.templates.service._load", new_callable=AsyncMock, return_value=template):
            with pytest.raises(NotFoundError):
                await get_template(_make_db(), template.id, _make_actor(UserRole.ADMIN))

    @pytest.mark.asyncio()
    async def test_missing_is_not_found(self):
        with patch("src.templates.service._load", new_callable=AsyncMock, return_value=None):
            with pytest.raises(NotFoundError):
                await get_template(_make_db(), uuid.uuid4(), _make_actor(UserRole.ADMIN))


# ── Create / update / delete ─────────────────────────────────────────


class TestCreateTemplate:
    @pytest.mark.asyncio()
    async def test_owned_by_caller_at_version_one(self):
        db = _make_db()
        actor = _make_actor()
        body = TemplateCreate(name="Petição inicial", type=TemplateType.PETITION, content="Texto")

        template = await create_template(db, actor, body)

        db.add.assert_called_once_with(template)
        db.flush.assert_awaited_once()
        assert template.created_by_id == actor.id
        assert template.version == 1
        assert template.usage_count == 0
        assert template.category == TemplateCategory.GENERAL.value
        assert template.is_public is False


class TestTagStorage:
    def test_long_tags_accepted_and_stored_unbounded(self):
        tag = "rescisão indireta por descumprimento grave das obrigações contratuais"
        assert len(tag) > 50

        data = TemplateCreate(name="Petição inicial", type=TemplateType.PETITION, content="Texto", tags=[tag])

        assert data.tags == [tag]
        assert Template.__table__.c.tags.type.item_type.length is None


class TestUpdateTemplate:
    @pytest.mark.asyncio()
    async def test_version_incremented_once(self):
        actor = _make_actor()
        template = _make_template(actor.id, version=4)
        db = _make_db()
        db.execute.return_value = MagicMock(scalar_one=MagicMock(return_value=5))

        with patch("src.templates.service._load", new_callable=AsyncMock, return_value=template):
            before, updated = await update_template(
                db, template.id, actor, TemplateUpdate(name="Novo nome", is_public=True)
            )

        assert before["version"] == 4
        assert before["name"] == "Comunicado ao cliente"
        assert updated.version == 5
        assert updated.name == "Novo nome"
        assert updated.is_public is True
        # Untouched fields stay as they were
        assert updated.content == "Olá {{nome}}, seu caso {{numero}} foi atualizado."

        # Bumped by a single UPDATE ... RETURNING
        db.execute.assert_awaited_once()
        statement = db.execute.call_args.args[0]
        assert "templates.version +" in str(statement)

    @pytest.mark.asyncio()
    async def test_enum_fields_stored_as_values(self):
        actor = _make_actor(UserRole.ADMIN)
        template = _make_template()
        db = _make_db()
        db.execute.return_value = MagicMock(scalar_one=MagicMock(return_value=2))
        with patch("src.templates.service._load", new_callable=AsyncMock, return_value=template):
            _, updated = await update_template(
                db, template.id, actor, TemplateUpdate(type=TemplateType.CONTRACT)
            )
        assert updated.type == "CONTRACT"

    @pytest.mark.asyncio()
    async def test_public_template_not_writable_by_others(self):
        template = _make_template(is_public=True)
        with patch("src.templates.service._load", new_callable=AsyncMock, return_value=template):
            with pytest.raises(NotFoundError):
                await update_template(_make_db(), template.id, _make_actor(), TemplateUpdate(name="Outro"))
        assert template.version == 1


class TestDeleteTemplate:
    @pytest.mark.asyncio()
    async def test_soft_delete(self):
        actor = _make_actor()
        template = _make_template(actor.id)
        db = _make_db()
        with patch("src.templates.service._load", new_callable=AsyncMock, return_value=template):
            before, deleted = await delete_template(db, template.id, actor)

        assert before["isActive"] is True
        assert deleted.is_active is False
        db.delete.assert_not_called()


# ── Duplicate / generate ─────────────────────────────────────────────


class TestDuplicateTemplate:
    @pytest.mark.asyncio()
    async def test_copy_is_private_and_owned_by_caller(self):
        actor = _make_actor()
        original = _make_template(is_public=True, version=7, usage_count=12)
        db = _make_db()

        with patch("src.templates.service._load", new_callable=AsyncMock, return_value=original):
            source, copy = await duplicate_template(db, original.id, actor, "Cópia")

        assert source is original
        db.add.assert_called_once_with(copy)
        assert copy.name == "Cópia"
        assert copy.is_public is False
        assert copy.created_by_id == actor.id
        assert copy.version == 1
        assert copy.usage_count == 0
        assert copy.content == original.content
        assert copy.tags == original.tags
        assert copy.tags is not original.tags

    @pytest.mark.asyncio()
    async def test_invisible_source_is_not_found(self):
        original = _make_template()
        with patch("src.templates.service._load", new_callable=AsyncMock, return_value=original):
            with pytest.raises(NotFoundError):
                await duplicate_template(_make_db(), original.id, _make_actor(), "Cópia")


class TestGenerateDocument:
    @pytest.mark.asyncio()
    async def test_renders_and_counts_use(self):
        template = _make_template(is_public=True, usage_count=5)
        db = _make_db()
        update_result = MagicMock()
        update_result.scalar_one.return_value = 6
        db.execute.return_value = update_result

        with patch("src.templates.service._load", new_callable=AsyncMock, return_value=template):
            source, document = await generate_document(
                db,
                template.id,
                _make_actor(),
                {"nome": "Ana"},
                now=datetime(2026, 10, 19, 9, 30, tzinfo=UTC),
            )

        db.execute.assert_awaited_once()
        assert source.usage_count == 6
        assert document.content == "Olá Ana, seu caso {{numero}} foi atualizado."
        assert document.name == "Comunicado ao cliente - 19/10/2026"
        assert document.id.startswith("doc_")

    @pytest.mark.asyncio()
    async def test_explicit_document_name(self):
        template = _make_template(is_public=True)
        db = _make_db()
        db.execute.return_value = MagicMock(scalar_one=MagicMock(return_value=1))

        with patch("src.templates.service._load", new_callable=AsyncMock, return_value=template):
            _, document = await generate_document(
                db, template.id, _make_actor(), {}, document_name="Carta Ana"
            )
        assert document.name == "Carta Ana"

    @pytest.mark.asyncio()
    async def test_private_template_of_other_user_not_found(self):
        template = _make_template()
        db = _make_db()
        with patch("src.templates.service._load", new_callable=AsyncMock, return_value=template):
            with pytest.raises(NotFoundError):
                await generate_document(db, template.id, _make_actor(), {"nome": "Ana"})
        db.execute.assert_not_awaited()


# ── Listing ──────────────────────────────────────────────────────────


class TestListTemplates:
    @pytest.mark.asyncio()
    async def test_pagination_flags(self):
        db = _make_db()
        count_result = MagicMock()
        count_result.scalar.return_value = 25
        rows_result = MagicMock()
        rows = [_make_template(is_public=True) for _ in range(10)]
        rows_result.scalars.return_value.all.return_value = rows
        db.execute.side_effect = [count_result, rows_result]

        templates, pagination = await list_templates(
            db, _make_actor(), TemplateFilters(search="cliente"), page=2, limit=10
        )

        assert templates == rows
        assert pagination.total == 25
        assert pagination.total_pages == 3
        assert pagination.has_next is True
        assert pagination.has_prev is True

    @pytest.mark.asyncio()
    async def test_last_page(self):
        db = _make_db()
        count_result = MagicMock()
        count_result.scalar.return_value = 3
        rows_result = MagicMock()
        rows_result.scalars.return_value.all.return_value = []
        db.execute.side_effect = [count_result, rows_result]

        _, pagination = await list_templates(db, _make_actor(UserRole.ADMIN), TemplateFilters())

        assert pagination.total_pages == 1
        assert pagination.has_next is False
        assert pagination.has_prev is False


# ── Stats ────────────────────────────────────────────────────────────


def _make_stats_db(total: int, public: int, by_type: list, by_category: list, top: list) -> AsyncMock:
    db = _make_db()
    totals = MagicMock()
    totals.one.return_value = (total, public)
    grouped = []
    for rows in (by_type, by_category, top):
        result = MagicMock()
        result.all.return_value = rows
        grouped.append(result)
    db.execute.side_effect = [totals, *grouped]
    return db


class TestTemplateStats:
    @pytest.mark.asyncio()
    async def test_public_private_split_and_breakdowns(self):
        top_id = uuid.uuid4()
        db = _make_stats_db(
            7,
            3,
            by_type=[("LETTER", 4), ("CONTRACT", 3)],
            by_category=[("LABOR_LAW", 7)],
            top=[(top_id, "Procuração", 42, "PROCURATION", "LABOR_LAW")],
        )

        stats = await get_template_stats(db, _make_actor(UserRole.ADMIN))

        assert stats.total == 7
        assert stats.public == 3
        assert stats.private == 4
        assert [(t.type, t.count) for t in stats.by_type] == [("LETTER", 4), ("CONTRACT", 3)]
        assert [(c.category, c.count) for c in stats.by_category] == [("LABOR_LAW", 7)]
        assert stats.top_used[0].id == top_id
        assert stats.top_used[0].usage_count == 42

    @pytest.mark.asyncio()
    async def test_top_used_limited_to_five(self):
        db = _make_stats_db(0, 0, by_type=[], by_category=[], top=[])

        await get_template_stats(db, _make_actor(UserRole.ADMIN))

        top_query = db.execute.call_args_list[3].args[0]
        assert "ORDER BY templates.usage_count DESC" in str(top_query)
        assert 5 in top_query.compile().params.values()

    @pytest.mark.asyncio()
    async def test_empty_table_counts_zero(self):
        db = _make_stats_db(None, None, by_type=[], by_category=[], top=[])

        stats = await get_template_stats(db, _make_actor(UserRole.ADMIN))

        assert (stats.total, stats.public, stats.private) == (0, 0, 0)

    @pytest.mark.asyncio()
    async def test_only_active_templates_counted(self):
        db = _make_stats_db(0, 0, by_type=[], by_category=[], top=[])

        await get_template_stats(db, _make_actor(UserRole.ADMIN))

        for call in db.execute.call_args_list:
            sql = str(call.args[0])
            assert "templates.is_active IS true" in sql
            assert "templates.created_by_id" not in sql

    @pytest.mark.asyncio()
    async def test_non_admin_sees_public_and_own_only(self):
        db = _make_stats_db(0, 0, by_type=[], by_category=[], top=[])

        await get_template_stats(db, _make_actor())

        for call in db.execute.call_args_list:
            assert "templates.created_by_id" in str(call.args[0])
