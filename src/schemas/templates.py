"""Pydantic schemas for document templates and document generation."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from pydantic import Field, field_validator

from src.models.enums import TemplateCategory, TemplateType, TemplateVariableType
from src.schemas.common import ApiModel, UserRef


class TemplateVariable(ApiModel):
    """Declared placeholder: what the UI asks for before generation."""

    name: str
    label: str
    type: TemplateVariableType
    required: bool = False
    default_value: str | None = None
    options: list[str] | None = None


class TemplateCreate(ApiModel):
    name: str = Field(min_length=3, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    type: TemplateType
    category: TemplateCategory = TemplateCategory.GENERAL
    content: str = Field(min_length=1)
    variables: list[TemplateVariable] = Field(default_factory=list)
    is_public: bool = False
    tags: list[str] = Field(default_factory=list)


class TemplateUpdate(ApiModel):
    """Partial update; only fields present in the body are applied."""

    name: str | None = Field(default=None, min_length=3, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    type: TemplateType | None = None
    category: TemplateCategory | None = None
    content: str | None = Field(default=None, min_length=1)
    variables: list[TemplateVariable] | None = None
    is_public: bool | None = None
    tags: list[str] | None = None


class TemplateOut(ApiModel):
    id: uuid.UUID
    name: str
    description: str | None = None
    type: str
    category: str
    content: str
    variables: list[dict[str, Any]] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    is_public: bool
    is_active: bool
    usage_count: int
    version: int
    created_by_id: uuid.UUID
    created_by: UserRef | None = None
    created_at: datetime
    updated_at: datetime


class TemplatePagination(ApiModel):
    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool


class TemplateListResponse(ApiModel):
    templates: list[TemplateOut]
    pagination: TemplatePagination


class TemplateMutationResponse(ApiModel):
    message: str
    template: TemplateOut


class DuplicateTemplateRequest(ApiModel):
    name: str

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            msg = "Name is required to duplicate a template"
            raise ValueError(msg)
        return stripped


class GenerateDocumentRequest(ApiModel):
    variables: dict[str, Any]
    document_name: str | None = Field(default=None, min_length=1)
    case_id: uuid.UUID | None = None


class GeneratedDocument(ApiModel):
    id: str
    name: str
    content: str


class GenerateDocumentResponse(ApiModel):
    message: str
    document: GeneratedDocument


# ── Stats ────────────────────────────────────────────────────────────


class TypeCount(ApiModel):
    type: str
    count: int


class CategoryCount(ApiModel):
    category: str
    count: int


class TopTemplate(ApiModel):
    id: uuid.UUID
    name: str
    usage_count: int
    type: str
    category: str


class TemplateStats(ApiModel):
    total: int
    public: int
    private: int
    by_type: list[TypeCount]
    by_category: list[CategoryCount]
    top_used: list[TopTemplate]
