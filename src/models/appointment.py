"""Appointment model: hearings, meetings, deadlines and calls on the agenda."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models.base import Base, EntityMixin
from src.models.enums import AppointmentStatus, AppointmentType

if TYPE_CHECKING:
    from src.models.case import Case
    from src.models.user import User


class Appointment(EntityMixin, Base):
    """A scheduled event, optionally tied to a case."""

    __tablename__ = "appointments"

    # Foreign keys
    case_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("cases.id"), index=True
    )
    lawyer_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    location: Mapped[str | None] = mapped_column(String(255))
    type: Mapped[str] = mapped_column(String(20), default=AppointmentType.MEETING.value, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), default=AppointmentStatus.SCHEDULED.value, nullable=False
    )

    # Scheduling
    start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    meeting_url: Mapped[str | None] = mapped_column(String(500))

    # Relationships
    case: Mapped[Case | None] = relationship("Case", back_populates="appointments")
    lawyer: Mapped[User] = relationship("User")

    def __repr__(self) -> str:
        return f"<Appointment id={self.id} type={self.type} at={self.start_date}>"
