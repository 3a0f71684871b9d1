"""Template model: reusable legal document bodies with {{placeholder}} markers.

Soft-deleted via `is_active=False`; inactive templates are invisible everywhere.
`version` is bumped once per successful update.
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING, Any

from sqlalchemy import Boolean, ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import ARRAY, JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models.base import Base, EntityMixin
from src.models.enums import TemplateCategory

if TYPE_CHECKING:
    from src.models.user import User


class Template(EntityMixin, Base):
    """A document template owned by the user who created it."""

    __tablename__ = "templates"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(String(500))
    type: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    category: Mapped[str] = mapped_column(
        String(20), default=TemplateCategory.GENERAL.value, nullable=False, index=True
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)

    # [{name, label, type, required, defaultValue?, options?}, ...]
    variables: Mapped[list[dict[str, Any]]] = mapped_column(JSONB, default=list, nullable=False)
    tags: Mapped[list[str]] = mapped_column(ARRAY(String), default=list, nullable=False)

    # Visibility and lifecycle
    is_public: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False, index=True)
    usage_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    version: Mapped[int] = mapped_column(Integer, default=1, nullable=False)

    # Owner
    created_by_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True
    )
    created_by: Mapped[User] = relationship("User")

    def __repr__(self) -> str:
        return f"<Template id={self.id} name={self.name!r} v{self.version} active={self.is_active}>"
