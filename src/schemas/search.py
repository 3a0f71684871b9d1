"""Pydantic schemas for the unified search and autocomplete suggestions."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import Field

from src.models.enums import SearchType
from src.schemas.common import ApiModel, CaseRef, UserRef

# ── Hits ─────────────────────────────────────────────────────────────


class ClientProfileOut(ApiModel):
    id: uuid.UUID
    type: str
    cpf: str | None = None
    cnpj: str | None = None
    phone: str | None = None
    city: str | None = None
    state: str | None = None
    company: str | None = None
    position: str | None = None


class ClientHit(ApiModel):
    """A client user matching the query, with profile and case count."""

    id: uuid.UUID
    name: str
    email: str
    avatar: str | None = None
    is_active: bool
    created_at: datetime
    client_profile: ClientProfileOut | None = None
    cases_count: int = 0


class CaseHit(ApiModel):
    id: uuid.UUID
    number: str | None = None
    title: str
    description: str | None = None
    type: str
    status: str
    created_at: datetime
    client: UserRef
    lawyer: UserRef | None = None
    documents_count: int = 0
    appointments_count: int = 0


class DocumentHit(ApiModel):
    id: uuid.UUID
    name: str
    type: str
    filename: str
    mime_type: str | None = None
    size: int | None = None
    url: str | None = None
    created_at: datetime
    case: CaseRef | None = None
    uploaded_by: UserRef


class AppointmentHit(ApiModel):
    id: uuid.UUID
    title: str
    description: str | None = None
    location: str | None = None
    type: str
    status: str
    start_date: datetime
    end_date: datetime
    case: CaseRef | None = None
    lawyer: UserRef


# ── Search envelope ──────────────────────────────────────────────────


class SearchResults(ApiModel):
    clients: list[ClientHit] = Field(default_factory=list)
    cases: list[CaseHit] = Field(default_factory=list)
    documents: list[DocumentHit] = Field(default_factory=list)
    appointments: list[AppointmentHit] = Field(default_factory=list)


class SearchMeta(ApiModel):
    total: int
    query: str
    type: SearchType
    execution_time: int = Field(description="Milliseconds spent serving the search")
    page: int
    limit: int
    total_pages: int


class SearchCounts(ApiModel):
    """Independent per-entity totals; `current_page` is the rows on this page."""

    clients: int = 0
    cases: int = 0
    documents: int = 0
    appointments: int = 0
    current_page: int = 0


class SearchResponse(ApiModel):
    results: SearchResults
    meta: SearchMeta
    counts: SearchCounts


# ── Suggestions ──────────────────────────────────────────────────────


class Suggestion(ApiModel):
    id: uuid.UUID
    text: str
    type: str  # client | case | document
    subtitle: str
    url: str


class SuggestionsResponse(ApiModel):
    suggestions: list[Suggestion]
