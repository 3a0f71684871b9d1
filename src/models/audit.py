"""AuditLog model: immutable audit trail for entity lifecycle events.

Each row names one actor and one action+entity pair.
This table is append-only; no updates or deletes.
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING, Any

from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models.base import Base, EntityMixin

if TYPE_CHECKING:
    from src.models.user import User


class AuditLog(EntityMixin, Base):
    """Immutable audit trail entry."""

    __tablename__ = "audit_logs"

    # Event classification
    action: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    entity: Mapped[str] = mapped_column(String(20), nullable=False, index=True)

    # Target (ids are strings: generated documents carry synthesized ids)
    entity_id: Mapped[str | None] = mapped_column(String(100), index=True)
    entity_name: Mapped[str | None] = mapped_column(String(255))

    # Actor, denormalized
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True
    )
    user_email: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    user_name: Mapped[str] = mapped_column(String(200), nullable=False, default="")

    description: Mapped[str | None] = mapped_column(Text)

    # Snapshots and free-form payload
    old_data: Mapped[dict[str, Any] | None] = mapped_column(JSONB)
    new_data: Mapped[dict[str, Any] | None] = mapped_column(JSONB)
    meta: Mapped[dict[str, Any] | None] = mapped_column("metadata", JSONB)

    # Request context
    ip_address: Mapped[str | None] = mapped_column(String(64))
    user_agent: Mapped[str | None] = mapped_column(String(500))

    user: Mapped[User] = relationship("User")

    def __repr__(self) -> str:
        return f"<AuditLog action={self.action} entity={self.entity} id={self.entity_id}>"
