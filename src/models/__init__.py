"""SQLAlchemy ORM models for JusCRM.

Import all models here so Alembic and Base.metadata.create_all() discover them.
"""

from __future__ import annotations

from src.models.appointment import Appointment
from src.models.audit import AuditLog
from src.models.base import Base
from src.models.case import Case
from src.models.document import Document
from src.models.enums import (
    AppointmentStatus,
    AppointmentType,
    AuditAction,
    AuditEntity,
    AuditPeriod,
    CaseStatus,
    CaseType,
    ClientType,
    DocumentType,
    NotificationPriority,
    NotificationType,
    SearchType,
    TemplateCategory,
    TemplateType,
    TemplateVariableType,
    UserRole,
)
from src.models.notification import Notification
from src.models.template import Template
from src.models.user import ClientProfile, User

__all__ = [
    # Base
    "Base",
    # Models
    "User",
    "ClientProfile",
    "Case",
    "Document",
    "Appointment",
    "Notification",
    "Template",
    "AuditLog",
    # Enums
    "UserRole",
    "ClientType",
    "CaseStatus",
    "CaseType",
    "DocumentType",
    "AppointmentType",
    "AppointmentStatus",
    "NotificationType",
    "NotificationPriority",
    "TemplateType",
    "TemplateCategory",
    "TemplateVariableType",
    "AuditAction",
    "AuditEntity",
    "AuditPeriod",
    "SearchType",
]
