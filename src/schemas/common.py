"""Shared Pydantic building blocks for the REST API.

Responses are emitted with camelCase keys (the dashboard's convention);
request bodies accept either camelCase or snake_case.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from src.models.enums import UserRole


class ApiModel(BaseModel):
    """Base for every API schema: camelCase aliases, ORM-friendly."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


@dataclass(frozen=True)
class Actor:
    """The authenticated identity performing a request. Never persisted."""

    id: uuid.UUID
    email: str
    name: str
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


class UserRef(ApiModel):
    id: uuid.UUID
    name: str
    email: str


class UserRefWithAvatar(UserRef):
    avatar: str | None = None


class CaseRef(ApiModel):
    id: uuid.UUID
    title: str
    number: str | None = None


class Pagination(ApiModel):
    page: int
    limit: int
    total: int
    total_pages: int


def total_pages(total: int, limit: int) -> int:
    """Number of pages needed to show `total` rows `limit` at a time (ceil)."""
    if limit <= 0:
        return 0
    return (total + limit - 1) // limit


class MessageResponse(ApiModel):
    message: str
