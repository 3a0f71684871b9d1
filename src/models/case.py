"""Case model: a labor claim handled by one lawyer for one client."""

from __future__ import annotations

import uuid
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Numeric, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models.base import Base, EntityMixin
from src.models.enums import CaseStatus, CaseType

if TYPE_CHECKING:
    from src.models.appointment import Appointment
    from src.models.document import Document
    from src.models.user import User


class Case(EntityMixin, Base):
    """A client's labor claim."""

    __tablename__ = "cases"

    number: Mapped[str | None] = mapped_column(String(50), unique=True, comment="Court process number")
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    type: Mapped[str] = mapped_column(String(40), default=CaseType.OTHER.value, nullable=False)
    status: Mapped[str] = mapped_column(String(20), default=CaseStatus.DRAFT.value, nullable=False)
    value: Mapped[Decimal | None] = mapped_column(Numeric(14, 2))

    # Foreign keys
    client_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True
    )
    lawyer_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id"), index=True
    )

    # Relationships
    client: Mapped[User] = relationship("User", back_populates="assigned_cases", foreign_keys=[client_id])
    lawyer: Mapped[User | None] = relationship("User", foreign_keys=[lawyer_id])
    documents: Mapped[list[Document]] = relationship("Document", back_populates="case")
    appointments: Mapped[list[Appointment]] = relationship("Appointment", back_populates="case")

    def __repr__(self) -> str:
        return f"<Case id={self.id} number={self.number} status={self.status}>"
