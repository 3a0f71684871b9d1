"""Domain enums used across SQLAlchemy models and Pydantic schemas.

All enums use str mixin for JSON serialization; values are stored as plain strings.
"""

from __future__ import annotations

from enum import Enum


class UserRole(str, Enum):
    """Who the authenticated actor is inside the practice."""

    ADMIN = "ADMIN"
    LAWYER = "LAWYER"
    ASSISTANT = "ASSISTANT"
    CLIENT = "CLIENT"


class ClientType(str, Enum):
    INDIVIDUAL = "INDIVIDUAL"
    COMPANY = "COMPANY"


class CaseStatus(str, Enum):
    """Case lifecycle states."""

    DRAFT = "DRAFT"
    ACTIVE = "ACTIVE"
    SUSPENDED = "SUSPENDED"
    CLOSED = "CLOSED"
    ARCHIVED = "ARCHIVED"


class CaseType(str, Enum):
    """Labor-law claim types handled by the practice."""

    RESCISAO_INDIRETA = "RESCISAO_INDIRETA"
    HORAS_EXTRAS = "HORAS_EXTRAS"
    ADICIONAL_INSALUBRIDADE = "ADICIONAL_INSALUBRIDADE"
    ADICIONAL_PERICULOSIDADE = "ADICIONAL_PERICULOSIDADE"
    ASSEDIO_MORAL = "ASSEDIO_MORAL"
    ACIDENTE_TRABALHO = "ACIDENTE_TRABALHO"
    EQUIPARACAO_SALARIAL = "EQUIPARACAO_SALARIAL"
    DEMISSAO_SEM_JUSTA_CAUSA = "DEMISSAO_SEM_JUSTA_CAUSA"
    FGTS = "FGTS"
    SEGURO_DESEMPREGO = "SEGURO_DESEMPREGO"
    OTHER = "OTHER"


class DocumentType(str, Enum):
    CONTRACT = "CONTRACT"
    PROCURATION = "PROCURATION"
    EVIDENCE = "EVIDENCE"
    PETITION = "PETITION"
    DECISION = "DECISION"
    PROTOCOL = "PROTOCOL"
    OTHER = "OTHER"


class AppointmentType(str, Enum):
    HEARING = "HEARING"
    MEETING = "MEETING"
    DEADLINE = "DEADLINE"
    CALL = "CALL"


class AppointmentStatus(str, Enum):
    """Appointment lifecycle states."""

    SCHEDULED = "SCHEDULED"
    CONFIRMED = "CONFIRMED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    RESCHEDULED = "RESCHEDULED"


class NotificationType(str, Enum):
    CASE_DEADLINE = "CASE_DEADLINE"
    APPOINTMENT_REMINDER = "APPOINTMENT_REMINDER"
    DOCUMENT_UPLOADED = "DOCUMENT_UPLOADED"
    CASE_UPDATE = "CASE_UPDATE"
    PAYMENT_DUE = "PAYMENT_DUE"
    SYSTEM_ANNOUNCEMENT = "SYSTEM_ANNOUNCEMENT"
    NEW_MESSAGE = "NEW_MESSAGE"


class NotificationPriority(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"


class TemplateType(str, Enum):
    """Kind of legal document a template produces."""

    PETITION = "PETITION"
    CONTRACT = "CONTRACT"
    LETTER = "LETTER"
    PROCURATION = "PROCURATION"
    MOTION = "MOTION"
    APPEAL = "APPEAL"
    AGREEMENT = "AGREEMENT"
    EMAIL = "EMAIL"
    NOTIFICATION = "NOTIFICATION"
    OTHER = "OTHER"


class TemplateCategory(str, Enum):
    LABOR_LAW = "LABOR_LAW"
    CIVIL_LAW = "CIVIL_LAW"
    CORPORATE_LAW = "CORPORATE_LAW"
    FAMILY_LAW = "FAMILY_LAW"
    CRIMINAL_LAW = "CRIMINAL_LAW"
    ADMINISTRATIVE = "ADMINISTRATIVE"
    GENERAL = "GENERAL"


class TemplateVariableType(str, Enum):
    TEXT = "text"
    DATE = "date"
    NUMBER = "number"
    BOOLEAN = "boolean"
    SELECT = "select"


class AuditAction(str, Enum):
    """What happened to the audited entity."""

    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    LOGIN = "LOGIN"
    LOGOUT = "LOGOUT"
    VIEW = "VIEW"
    DOWNLOAD = "DOWNLOAD"
    EXPORT = "EXPORT"
    UPLOAD = "UPLOAD"
    APPROVE = "APPROVE"
    REJECT = "REJECT"
    ARCHIVE = "ARCHIVE"
    RESTORE = "RESTORE"
    SHARE = "SHARE"
    UNSHARE = "UNSHARE"
    DUPLICATE = "DUPLICATE"
    GENERATE = "GENERATE"


class AuditEntity(str, Enum):
    """Which kind of record an audit entry refers to."""

    USER = "USER"
    CLIENT = "CLIENT"
    CASE = "CASE"
    DOCUMENT = "DOCUMENT"
    APPOINTMENT = "APPOINTMENT"
    ACTIVITY = "ACTIVITY"
    NOTIFICATION = "NOTIFICATION"
    REPORT = "REPORT"
    TEMPLATE = "TEMPLATE"
    SYSTEM = "SYSTEM"


class SearchType(str, Enum):
    """Entity filter accepted by the unified search."""

    ALL = "ALL"
    CLIENTS = "CLIENTS"
    CASES = "CASES"
    DOCUMENTS = "DOCUMENTS"
    APPOINTMENTS = "APPOINTMENTS"


class AuditPeriod(str, Enum):
    """Window for the audit stats screen."""

    TODAY = "today"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"
