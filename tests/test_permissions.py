"""Tests for template visibility and write rules."""

from __future__ import annotations

import uuid
from unittest.mock import MagicMock

import pytest

from src.models.enums import UserRole
from src.schemas.common import Actor
from src.security.permissions import Access, can_access_template, template_visibility_clause


def _make_actor(role: UserRole = UserRole.LAWYER) -> Actor:
    return Actor(id=uuid.uuid4(), email="x@juscrm.com.br", name="X", role=role)


def _make_template(owner_id: uuid.UUID, *, is_public: bool = False, is_active: bool = True) -> MagicMock:
    template = MagicMock()
    template.created_by_id = owner_id
    template.is_public = is_public
    template.is_active = is_active
    return template


class TestCanAccessTemplate:
    @pytest.mark.parametrize("access", [Access.READ, Access.WRITE])
    def test_owner(self, access):
        actor = _make_actor()
        assert can_access_template(_make_template(actor.id), actor, access) is True

    @pytest.mark.parametrize("access", [Access.READ, Access.WRITE])
    def test_admin_on_private(self, access):
        actor = _make_actor(UserRole.ADMIN)
        assert can_access_template(_make_template(uuid.uuid4()), actor, access) is True

    def test_public_grants_read_only(self):
        actor = _make_actor(UserRole.ASSISTANT)
        template = _make_template(uuid.uuid4(), is_public=True)
        assert can_access_template(template, actor, Access.READ) is True
        assert can_access_template(template, actor, Access.WRITE) is False

    def test_private_of_other_user(self):
        actor = _make_actor()
        assert can_access_template(_make_template(uuid.uuid4()), actor, Access.READ) is False

    @pytest.mark.parametrize("role", list(UserRole))
    def test_inactive_invisible_to_every_role(self, role):
        actor = _make_actor(role)
        template = _make_template(actor.id, is_public=True, is_active=False)
        assert can_access_template(template, actor, Access.READ) is False


class TestVisibilityClause:
    def test_admin_unrestricted(self):
        assert template_visibility_clause(_make_actor(UserRole.ADMIN)) is None

    def test_others_restricted_to_public_or_own(self):
        actor = _make_actor()
        sql = str(template_visibility_clause(actor))
        assert "templates.is_public" in sql
        assert "templates.created_by_id" in sql
