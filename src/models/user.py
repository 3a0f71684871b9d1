"""User and ClientProfile models: staff members and the practice's clients.

Clients are users with role CLIENT plus a one-to-one ClientProfile holding
the labor-law specific data (CPF/CNPJ, employer, phone).
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, ForeignKey, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models.base import Base, EntityMixin
from src.models.enums import ClientType, UserRole

if TYPE_CHECKING:
    from src.models.case import Case


class User(EntityMixin, Base):
    """Anyone who can authenticate: admins, lawyers, assistants and clients."""

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    role: Mapped[str] = mapped_column(String(20), default=UserRole.CLIENT.value, nullable=False, index=True)
    avatar: Mapped[str | None] = mapped_column(String(500))

    # Deactivated users cannot authenticate and are hidden from search
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False, index=True)

    # Relationships
    client_profile: Mapped[ClientProfile | None] = relationship(
        "ClientProfile", back_populates="user", uselist=False
    )
    assigned_cases: Mapped[list[Case]] = relationship(
        "Case", back_populates="client", foreign_keys="Case.client_id"
    )

    def __repr__(self) -> str:
        return f"<User id={self.id} role={self.role} active={self.is_active}>"


class ClientProfile(EntityMixin, Base):
    """Registration data for a client user."""

    __tablename__ = "client_profiles"

    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    type: Mapped[str] = mapped_column(String(20), default=ClientType.INDIVIDUAL.value, nullable=False)

    # Identifiers (Brazilian tax ids)
    cpf: Mapped[str | None] = mapped_column(String(14), index=True)
    cnpj: Mapped[str | None] = mapped_column(String(18), index=True)

    # Contact
    phone: Mapped[str | None] = mapped_column(String(20))
    city: Mapped[str | None] = mapped_column(String(100))
    state: Mapped[str | None] = mapped_column(String(2))

    # Employment (the other side of the labor claim)
    company: Mapped[str | None] = mapped_column(String(200))
    position: Mapped[str | None] = mapped_column(String(100))

    user: Mapped[User] = relationship("User", back_populates="client_profile")

    def __repr__(self) -> str:
        return f"<ClientProfile user={self.user_id} type={self.type}>"
