"""Unified search: one free-text query fanned out over clients, cases,
documents and appointments.

Every enabled entity contributes two independent queries (a count and a
page fetch). All of them run concurrently, each on its own session.
Each entity is paginated on its own: page 2 returns the second slice of
every entity, not a globally ranked page.
"""

from __future__ import annotations

import asyncio
import logging
import math
import time
from abc import ABC, abstractmethod
from collections.abc import Coroutine
from typing import Any

from sqlalchemy import ColumnElement, Row, Select, and_, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from src.api.errors import InvalidRequestError, SearchError
from src.config import settings
from src.models.appointment import Appointment
from src.models.case import Case
from src.models.document import Document
from src.models.enums import SearchType, UserRole
from src.models.user import ClientProfile, User
from src.schemas.common import ApiModel, total_pages
from src.schemas.search import (
    AppointmentHit,
    CaseHit,
    ClientHit,
    DocumentHit,
    SearchCounts,
    SearchMeta,
    SearchResponse,
    SearchResults,
    Suggestion,
    SuggestionsResponse,
)

logger = logging.getLogger(__name__)

QUERY_MIN_LENGTH = 2
QUERY_MAX_LENGTH = 100
MAX_LIMIT = 50
MAX_SUGGESTIONS = 20


def normalize_query(raw: str) -> str:
    """Trim and lowercase the query, enforcing the 2–100 character bounds."""
    term = raw.strip().lower()
    if not QUERY_MIN_LENGTH <= len(term) <= QUERY_MAX_LENGTH:
        raise InvalidRequestError(
            "Invalid parameters",
            details=[{
                "loc": ["query", "query"],
                "msg": f"Query must be between {QUERY_MIN_LENGTH} and {QUERY_MAX_LENGTH} characters",
                "type": "string_length",
            }],
        )
    return term


def _link(kind: str, entity_id: Any) -> str:
    return f"{settings.branding.frontend_base_path}/{kind}/{entity_id}"


# ── Per-entity searchers ─────────────────────────────────────────────


class EntitySearcher(ABC):
    """Predicate, statements and serialization for one searchable entity."""

    key: str
    search_type: SearchType
    model: type[Any]

    @abstractmethod
    def predicate(self, term: str) -> ColumnElement[bool]: ...

    def count_statement(self, term: str) -> Select[Any]:
        return select(func.count(self.model.id)).where(self.predicate(term))

    @abstractmethod
    def page_statement(self, term: str, offset: int, limit: int) -> Select[Any]: ...

    @abstractmethod
    def to_hit(self, row: Row[Any]) -> ApiModel: ...


class SuggestingSearcher(EntitySearcher):
    """Searcher that also feeds the autocomplete box."""

    @abstractmethod
    def suggestion_statement(self, term: str, limit: int) -> Select[Any]: ...

    @abstractmethod
    def to_suggestion(self, row: Row[Any]) -> Suggestion: ...


class ClientSearcher(SuggestingSearcher):
    """Active CLIENT users; matches name, email and profile identifiers."""

    key = "clients"
    search_type = SearchType.CLIENTS
    model = User

    def _scope(self) -> ColumnElement[bool]:
        # Inactive clients are invisible regardless of the text match
        return and_(User.role == UserRole.CLIENT.value, User.is_active.is_(True))

    def predicate(self, term: str) -> ColumnElement[bool]:
        return and_(
            self._scope(),
            or_(
                User.name.icontains(term, autoescape=True),
                User.email.icontains(term, autoescape=True),
                User.client_profile.has(
                    or_(
                        ClientProfile.cpf.icontains(term, autoescape=True),
                        ClientProfile.cnpj.icontains(term, autoescape=True),
                        ClientProfile.phone.icontains(term, autoescape=True),
                        ClientProfile.company.icontains(term, autoescape=True),
                    )
                ),
            ),
        )

    def page_statement(self, term: str, offset: int, limit: int) -> Select[Any]:
        cases_count = (
            select(func.count(Case.id))
            .where(Case.client_id == User.id)
            .correlate(User)
            .scalar_subquery()
            .label("cases_count")
        )
        return (
            select(User, cases_count)
            .where(self.predicate(term))
            .options(selectinload(User.client_profile))
            .order_by(User.name.asc(), User.id.asc())
            .offset(offset)
            .limit(limit)
        )

    def to_hit(self, row: Row[Any]) -> ClientHit:
        user, cases_count = row
        hit = ClientHit.model_validate(user)
        hit.cases_count = cases_count or 0
        return hit

    def suggestion_statement(self, term: str, limit: int) -> Select[Any]:
        return (
            select(User.id, User.name, User.email)
            .where(self._scope(), User.name.icontains(term, autoescape=True))
            .order_by(User.name.asc())
            .limit(limit)
        )

    def to_suggestion(self, row: Row[Any]) -> Suggestion:
        user_id, name, email = row
        return Suggestion(id=user_id, text=name, type="client", subtitle=email, url=_link("clients", user_id))


class CaseSearcher(SuggestingSearcher):
    key = "cases"
    search_type = SearchType.CASES
    model = Case

    def predicate(self, term: str) -> ColumnElement[bool]:
        return or_(
            Case.title.icontains(term, autoescape=True),
            Case.description.icontains(term, autoescape=True),
            Case.number.icontains(term, autoescape=True),
        )

    def page_statement(self, term: str, offset: int, limit: int) -> Select[Any]:
        documents_count = (
            select(func.count(Document.id))
            .where(Document.case_id == Case.id)
            .correlate(Case)
            .scalar_subquery()
            .label("documents_count")
        )
        appointments_count = (
            select(func.count(Appointment.id))
            .where(Appointment.case_id == Case.id)
            .correlate(Case)
            .scalar_subquery()
            .label("appointments_count")
        )
        return (
            select(Case, documents_count, appointments_count)
            .where(self.predicate(term))
            .options(selectinload(Case.client), selectinload(Case.lawyer))
            .order_by(Case.created_at.desc(), Case.id.asc())
            .offset(offset)
            .limit(limit)
        )

    def to_hit(self, row: Row[Any]) -> CaseHit:
        case, documents_count, appointments_count = row
        hit = CaseHit.model_validate(case)
        hit.documents_count = documents_count or 0
        hit.appointments_count = appointments_count or 0
        return hit

    def suggestion_statement(self, term: str, limit: int) -> Select[Any]:
        return (
            select(Case.id, Case.title, Case.number)
            .where(
                or_(
                    Case.title.icontains(term, autoescape=True),
                    Case.number.icontains(term, autoescape=True),
                )
            )
            .order_by(Case.created_at.desc())
            .limit(limit)
        )

    def to_suggestion(self, row: Row[Any]) -> Suggestion:
        case_id, title, number = row
        return Suggestion(id=case_id, text=title, type="case", subtitle=number or "", url=_link("cases", case_id))


class DocumentSearcher(SuggestingSearcher):
    key = "documents"
    search_type = SearchType.DOCUMENTS
    model = Document

    def predicate(self, term: str) -> ColumnElement[bool]:
        return or_(
            Document.name.icontains(term, autoescape=True),
            Document.filename.icontains(term, autoescape=True),
        )

    def page_statement(self, term: str, offset: int, limit: int) -> Select[Any]:
        return (
            select(Document)
            .where(self.predicate(term))
            .options(selectinload(Document.case), selectinload(Document.uploaded_by))
            .order_by(Document.created_at.desc(), Document.id.asc())
            .offset(offset)
            .limit(limit)
        )

    def to_hit(self, row: Row[Any]) -> DocumentHit:
        return DocumentHit.model_validate(row[0])

    def suggestion_statement(self, term: str, limit: int) -> Select[Any]:
        return (
            select(Document.id, Document.name, Document.filename)
            .where(Document.name.icontains(term, autoescape=True))
            .order_by(Document.created_at.desc())
            .limit(limit)
        )

    def to_suggestion(self, row: Row[Any]) -> Suggestion:
        doc_id, name, filename = row
        return Suggestion(id=doc_id, text=name, type="document", subtitle=filename, url=_link("documents", doc_id))


class AppointmentSearcher(EntitySearcher):
    key = "appointments"
    search_type = SearchType.APPOINTMENTS
    model = Appointment

    def predicate(self, term: str) -> ColumnElement[bool]:
        return or_(
            Appointment.title.icontains(term, autoescape=True),
            Appointment.description.icontains(term, autoescape=True),
            Appointment.location.icontains(term, autoescape=True),
        )

    def page_statement(self, term: str, offset: int, limit: int) -> Select[Any]:
        return (
            select(Appointment)
            .where(self.predicate(term))
            .options(selectinload(Appointment.case), selectinload(Appointment.lawyer))
            .order_by(Appointment.start_date.desc(), Appointment.id.asc())
            .offset(offset)
            .limit(limit)
        )

    def to_hit(self, row: Row[Any]) -> AppointmentHit:
        return AppointmentHit.model_validate(row[0])


DEFAULT_SEARCHERS: tuple[EntitySearcher, ...] = (
    ClientSearcher(),
    CaseSearcher(),
    DocumentSearcher(),
    AppointmentSearcher(),
)


# ── Service ──────────────────────────────────────────────────────────


class SearchService:
    """Fan-out/fan-in search over every searchable entity."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        searchers: tuple[EntitySearcher, ...] = DEFAULT_SEARCHERS,
    ) -> None:
        self._session_factory = session_factory
        self._searchers = searchers

    async def _count(self, statement: Select[Any]) -> int:
        async with self._session_factory() as db:
            result = await db.execute(statement)
            return result.scalar() or 0

    async def _rows(self, statement: Select[Any]) -> list[Row[Any]]:
        async with self._session_factory() as db:
            result = await db.execute(statement)
            return list(result.all())

    @staticmethod
    async def _run_all(coros: list[Coroutine[Any, Any, Any]]) -> list[Any]:
        """Run coroutines concurrently and return their results in order.

        The first failure cancels the queries still running and is re-raised
        unwrapped from its exception group.
        """
        try:
            async with asyncio.TaskGroup() as group:
                tasks = [group.create_task(coro) for coro in coros]
        except BaseExceptionGroup as failure:
            raise failure.exceptions[0] from None
        return [task.result() for task in tasks]

    async def search(
        self,
        query: str,
        search_type: SearchType = SearchType.ALL,
        page: int = 1,
        limit: int = 10,
    ) -> SearchResponse:
        """Run the unified search. All-or-nothing: any DB error fails the whole request."""
        started = time.monotonic()
        term = normalize_query(query)
        offset = (page - 1) * limit

        enabled = [
            s for s in self._searchers
            if search_type is SearchType.ALL or s.search_type is search_type
        ]

        # Two independent queries per entity, all issued at once
        coros: list[Coroutine[Any, Any, Any]] = []
        for searcher in enabled:
            coros.append(self._count(searcher.count_statement(term)))
            coros.append(self._rows(searcher.page_statement(term, offset, limit)))

        try:
            outcomes = await self._run_all(coros)
        except SQLAlchemyError as exc:
            logger.exception("Search failed (query=%r type=%s)", term, search_type.value)
            raise SearchError("Internal server error while searching") from exc

        counts: dict[str, int] = {}
        results: dict[str, list[ApiModel]] = {}
        for i, searcher in enumerate(enabled):
            counts[searcher.key] = outcomes[2 * i]
            results[searcher.key] = [searcher.to_hit(row) for row in outcomes[2 * i + 1]]

        total = sum(counts.values())
        on_page = sum(len(hits) for hits in results.values())
        execution_ms = int((time.monotonic() - started) * 1000)

        logger.debug(
            "Search %r type=%s page=%d → total=%d in %dms",
            term, search_type.value, page, total, execution_ms,
        )

        return SearchResponse(
            results=SearchResults(**results),
            meta=SearchMeta(
                total=total,
                query=term,
                type=search_type,
                execution_time=execution_ms,
                page=page,
                limit=limit,
                total_pages=total_pages(total, limit),
            ),
            counts=SearchCounts(**counts, current_page=on_page),
        )

    async def suggestions(self, query: str, limit: int = 5) -> SuggestionsResponse:
        """Autocomplete: up to ceil(limit/4) hits per suggesting entity, truncated to limit."""
        term = normalize_query(query)
        per_entity = math.ceil(limit / 4)

        suggesting = [s for s in self._searchers if isinstance(s, SuggestingSearcher)]
        try:
            row_sets = await self._run_all(
                [self._rows(s.suggestion_statement(term, per_entity)) for s in suggesting]
            )
        except SQLAlchemyError as exc:
            logger.exception("Suggestions failed (query=%r)", term)
            raise SearchError("Error while fetching suggestions") from exc

        suggestions: list[Suggestion] = []
        for searcher, rows in zip(suggesting, row_sets, strict=True):
            suggestions.extend(searcher.to_suggestion(row) for row in rows)

        return SuggestionsResponse(suggestions=suggestions[:limit])
