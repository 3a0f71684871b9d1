"""Document model: files attached to a case (storage is handled elsewhere)."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models.base import Base, EntityMixin
from src.models.enums import DocumentType

if TYPE_CHECKING:
    from src.models.case import Case
    from src.models.user import User


class Document(EntityMixin, Base):
    """An uploaded document."""

    __tablename__ = "documents"

    # Foreign keys
    case_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("cases.id"), index=True
    )
    uploaded_by_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True
    )

    # Document metadata
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[str] = mapped_column(String(30), default=DocumentType.OTHER.value, nullable=False)
    filename: Mapped[str] = mapped_column(String(255), nullable=False)
    mime_type: Mapped[str | None] = mapped_column(String(100))
    size: Mapped[int | None] = mapped_column(Integer, comment="File size in bytes")
    url: Mapped[str | None] = mapped_column(String(500), comment="Static file URL")

    # Relationships
    case: Mapped[Case | None] = relationship("Case", back_populates="documents")
    uploaded_by: Mapped[User] = relationship("User")

    def __repr__(self) -> str:
        return f"<Document id={self.id} type={self.type} filename={self.filename}>"
