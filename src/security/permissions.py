"""Template access rules, shared by every template operation.

Reads (get, list, duplicate, generate): ADMIN, the owner, or anyone when public.
Writes (update, delete): ADMIN or the owner; public visibility grants nothing.
Inactive templates are invisible to everyone, ADMIN included.
"""

from __future__ import annotations

from enum import Enum

from sqlalchemy import ColumnElement, or_

from src.models.template import Template
from src.schemas.common import Actor


class Access(str, Enum):
    READ = "read"
    WRITE = "write"


def can_access_template(template: Template, actor: Actor, access: Access) -> bool:
    """Return True if `actor` may perform an `access`-kind operation on `template`."""
    if not template.is_active:
        return False
    if actor.is_admin or template.created_by_id == actor.id:
        return True
    return access is Access.READ and template.is_public


def template_visibility_clause(actor: Actor) -> ColumnElement[bool] | None:
    """SQL counterpart of the READ rule, for listing queries. None means no restriction."""
    if actor.is_admin:
        return None
    return or_(Template.is_public.is_(True), Template.created_by_id == actor.id)
