"""Tests for the unified search service.

Covers:
- Query normalization and bounds
- Fan-out: one count and one page query per enabled entity, each on its own session
- Merge: totals, per-entity counts, currentPage, totalPages
- Type filter, persistence failure → SearchError with the other queries cancelled
- Suggestions: ceil(limit/4) per entity, truncated to limit
- SQL shape of the real per-entity statements
"""

from __future__ import annotations

import asyncio
import uuid
from datetime import UTC, datetime
from typing import Any
from unittest.mock import MagicMock

import pytest
from sqlalchemy.dialects import postgresql
from sqlalchemy.exc import SQLAlchemyError

from src.api.errors import InvalidRequestError, SearchError
from src.models.case import Case
from src.models.enums import SearchType, UserRole
from src.models.user import User
from src.schemas.search import CaseHit, ClientHit, Suggestion
from src.search.service import (
    AppointmentSearcher,
    CaseSearcher,
    ClientSearcher,
    DocumentSearcher,
    EntitySearcher,
    SearchService,
    SuggestingSearcher,
    normalize_query,
)

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=UTC)

# ── Helpers ──────────────────────────────────────────────────────────


def _make_client_hit(name: str = "Maria Silva") -> ClientHit:
    return ClientHit(
        id=uuid.uuid4(), name=name, email="maria@example.com", is_active=True, created_at=NOW
    )


def _make_case_hit(title: str = "Horas extras") -> CaseHit:
    return CaseHit(
        id=uuid.uuid4(),
        title=title,
        type="HORAS_EXTRAS",
        status="ACTIVE",
        created_at=NOW,
        client={"id": uuid.uuid4(), "name": "Maria Silva", "email": "maria@example.com"},
    )


def _make_suggestion(kind: str, n: int) -> Suggestion:
    return Suggestion(id=uuid.uuid4(), text=f"{kind}-{n}", type=kind, subtitle="", url="/app/x")


class _FakeSearcher(EntitySearcher):
    """Statements are plain tuples; rows are prebuilt hits."""

    def __init__(self, key: str, search_type: SearchType) -> None:
        self.key = key
        self.search_type = search_type

    def predicate(self, term: str) -> Any:
        return ("match", self.key, term)

    def count_statement(self, term: str) -> Any:
        return ("count", self.key, term)

    def page_statement(self, term: str, offset: int, limit: int) -> Any:
        return ("page", self.key, term, offset, limit)

    def to_hit(self, row: Any) -> Any:
        return row


class _FakeSuggestingSearcher(_FakeSearcher, SuggestingSearcher):
    def suggestion_statement(self, term: str, limit: int) -> Any:
        return ("suggest", self.key, term, limit)

    def to_suggestion(self, row: Any) -> Any:
        return row


class _FakeSession:
    def __init__(self, factory: _FakeFactory) -> None:
        self._factory = factory

    async def __aenter__(self) -> _FakeSession:
        return self

    async def __aexit__(self, *exc: object) -> bool:
        return False

    async def execute(self, statement: tuple) -> MagicMock:
        self._factory.statements.append(statement)
        if self._factory.error is not None:
            raise self._factory.error
        kind, key = statement[0], statement[1]
        result = MagicMock()
        if kind == "count":
            result.scalar.return_value = self._factory.counts.get(key, 0)
        elif kind == "page":
            result.all.return_value = self._factory.rows.get(key, [])
        else:
            result.all.return_value = self._factory.suggestions.get(key, [])[: statement[3]]
        return result


class _FakeFactory:
    """Stands in for async_sessionmaker; records sessions and statements."""

    def __init__(
        self,
        counts: dict[str, int] | None = None,
        rows: dict[str, list] | None = None,
        suggestions: dict[str, list] | None = None,
        error: Exception | None = None,
    ) -> None:
        self.counts = counts or {}
        self.rows = rows or {}
        self.suggestions = suggestions or {}
        self.error = error
        self.sessions_opened = 0
        self.statements: list[tuple] = []

    def __call__(self) -> _FakeSession:
        self.sessions_opened += 1
        return _FakeSession(self)


class _StallingSession:
    """Every query hangs except the failing one, which raises."""

    def __init__(self, factory: _StallingFactory) -> None:
        self._factory = factory

    async def __aenter__(self) -> _StallingSession:
        return self

    async def __aexit__(self, *exc: object) -> bool:
        return False

    async def execute(self, statement: tuple) -> MagicMock:
        if statement[:2] == self._factory.failing:
            raise SQLAlchemyError("connection reset")
        try:
            await asyncio.Event().wait()
        except asyncio.CancelledError:
            self._factory.cancelled += 1
            raise
        return MagicMock()


class _StallingFactory:
    def __init__(self, failing: tuple[str, str]) -> None:
        self.failing = failing
        self.cancelled = 0

    def __call__(self) -> _StallingSession:
        return _StallingSession(self)


def _make_searchers() -> tuple[EntitySearcher, ...]:
    return (
        _FakeSuggestingSearcher("clients", SearchType.CLIENTS),
        _FakeSuggestingSearcher("cases", SearchType.CASES),
        _FakeSuggestingSearcher("documents", SearchType.DOCUMENTS),
        _FakeSearcher("appointments", SearchType.APPOINTMENTS),
    )


# ── Normalization ────────────────────────────────────────────────────


class TestNormalizeQuery:
    def test_trims_and_lowercases(self):
        assert normalize_query("  Maria SILVA ") == "maria silva"

    def test_too_short_after_trim(self):
        with pytest.raises(InvalidRequestError):
            normalize_query("  a  ")

    def test_too_long(self):
        with pytest.raises(InvalidRequestError):
            normalize_query("x" * 101)

    def test_bounds_inclusive(self):
        assert normalize_query("ab") == "ab"
        assert normalize_query("y" * 100) == "y" * 100


# ── Search ───────────────────────────────────────────────────────────


class TestSearch:
    @pytest.mark.asyncio()
    async def test_merge_counts_and_current_page(self):
        factory = _FakeFactory(
            counts={"clients": 3, "cases": 1},
            rows={
                "clients": [_make_client_hit("Maria"), _make_client_hit("Mariana"), _make_client_hit("Mário")],
                "cases": [_make_case_hit()],
            },
        )
        service = SearchService(factory, searchers=_make_searchers())

        response = await service.search("  MARIA ", SearchType.ALL, page=1, limit=10)

        assert response.counts.clients == 3
        assert response.counts.cases == 1
        assert response.counts.documents == 0
        assert response.counts.appointments == 0
        assert response.counts.current_page == 4
        assert response.meta.total == 4
        assert response.meta.total_pages == 1
        assert response.meta.query == "maria"
        assert response.meta.type is SearchType.ALL
        assert response.meta.execution_time >= 0
        assert len(response.results.clients) == 3
        assert len(response.results.cases) == 1

    @pytest.mark.asyncio()
    async def test_one_session_per_query(self):
        factory = _FakeFactory()
        service = SearchService(factory, searchers=_make_searchers())

        await service.search("ana", SearchType.ALL)

        # count + page for each of the 4 entities
        assert factory.sessions_opened == 8
        assert len(factory.statements) == 8

    @pytest.mark.asyncio()
    async def test_type_filter_limits_entities(self):
        factory = _FakeFactory(counts={"cases": 2, "clients": 9}, rows={"cases": [_make_case_hit()]})
        service = SearchService(factory, searchers=_make_searchers())

        response = await service.search("horas", SearchType.CASES)

        assert {s[1] for s in factory.statements} == {"cases"}
        assert response.counts.clients == 0
        assert response.meta.total == 2
        assert response.results.clients == []

    @pytest.mark.asyncio()
    async def test_each_entity_paginated_independently(self):
        factory = _FakeFactory(counts={"clients": 45, "cases": 12})
        service = SearchService(factory, searchers=_make_searchers())

        response = await service.search("silva", SearchType.ALL, page=3, limit=20)

        pages = [s for s in factory.statements if s[0] == "page"]
        assert all(s[3] == 40 and s[4] == 20 for s in pages)
        assert response.meta.total == 57
        assert response.meta.total_pages == 3
        assert response.meta.page == 3

    @pytest.mark.asyncio()
    async def test_database_error_fails_whole_request(self):
        factory = _FakeFactory(error=SQLAlchemyError("connection lost"))
        service = SearchService(factory, searchers=_make_searchers())

        with pytest.raises(SearchError):
            await service.search("maria", SearchType.ALL)

    @pytest.mark.asyncio()
    async def test_failure_cancels_pending_queries(self):
        factory = _StallingFactory(failing=("page", "appointments"))
        service = SearchService(factory, searchers=_make_searchers())

        with pytest.raises(SearchError):
            await service.search("maria", SearchType.ALL)

        # Seven queries were still waiting when the eighth failed
        assert factory.cancelled == 7

    @pytest.mark.asyncio()
    async def test_invalid_query_runs_nothing(self):
        factory = _FakeFactory()
        service = SearchService(factory, searchers=_make_searchers())

        with pytest.raises(InvalidRequestError):
            await service.search(" m ", SearchType.ALL)
        assert factory.sessions_opened == 0


class TestSuggestions:
    @pytest.mark.asyncio()
    async def test_per_entity_limit_and_truncation(self):
        factory = _FakeFactory(
            suggestions={
                "clients": [_make_suggestion("client", i) for i in range(5)],
                "cases": [_make_suggestion("case", i) for i in range(5)],
                "documents": [_make_suggestion("document", i) for i in range(5)],
            }
        )
        service = SearchService(factory, searchers=_make_searchers())

        response = await service.suggestions("mar", limit=5)

        # ceil(5 / 4) == 2 per entity, appointments never asked
        assert all(s[3] == 2 for s in factory.statements)
        assert {s[1] for s in factory.statements} == {"clients", "cases", "documents"}
        assert [s.text for s in response.suggestions] == [
            "client-0", "client-1", "case-0", "case-1", "document-0",
        ]

    @pytest.mark.asyncio()
    async def test_fewer_matches_than_limit(self):
        factory = _FakeFactory(suggestions={"cases": [_make_suggestion("case", 0)]})
        service = SearchService(factory, searchers=_make_searchers())

        response = await service.suggestions("hor", limit=8)

        assert len(response.suggestions) == 1

    @pytest.mark.asyncio()
    async def test_database_error(self):
        factory = _FakeFactory(error=SQLAlchemyError("boom"))
        service = SearchService(factory, searchers=_make_searchers())

        with pytest.raises(SearchError):
            await service.suggestions("mar")


# ── Real statements ──────────────────────────────────────────────────


def _sql(statement: Any) -> str:
    return str(statement.compile(dialect=postgresql.dialect()))


class TestEntityStatements:
    def test_clients_scoped_to_active_client_role(self):
        sql = _sql(ClientSearcher().count_statement("maria"))
        assert "users.role" in sql
        assert "users.is_active" in sql
        assert "client_profiles" in sql
        assert "LIKE" in sql.upper()

    def test_client_page_counts_cases(self):
        sql = _sql(ClientSearcher().page_statement("maria", 20, 10))
        assert "cases_count" in sql
        assert "LIMIT" in sql.upper()
        assert "OFFSET" in sql.upper()

    def test_case_page_counts_documents_and_appointments(self):
        sql = _sql(CaseSearcher().page_statement("horas", 0, 10))
        assert "documents_count" in sql
        assert "appointments_count" in sql

    def test_document_matches_name_and_filename(self):
        sql = _sql(DocumentSearcher().count_statement("procur"))
        assert "documents.name" in sql
        assert "documents.filename" in sql


class TestHitConversion:
    def test_client_hit_carries_case_count(self):
        user = User(
            id=uuid.uuid4(),
            email="maria@example.com",
            name="Maria Silva",
            role=UserRole.CLIENT.value,
            is_active=True,
            created_at=NOW,
        )
        hit = ClientSearcher().to_hit((user, 3))
        assert hit.name == "Maria Silva"
        assert hit.cases_count == 3
        assert hit.client_profile is None

    def test_case_hit_carries_counts(self):
        client = User(id=uuid.uuid4(), email="joao@example.com", name="João", role="CLIENT", is_active=True)
        case = Case(
            id=uuid.uuid4(),
            number="0001",
            title="Rescisão indireta",
            type="RESCISAO_INDIRETA",
            status="ACTIVE",
            client_id=client.id,
            created_at=NOW,
        )
        case.client = client
        hit = CaseSearcher().to_hit((case, 2, None))
        assert hit.client.name == "João"
        assert hit.lawyer is None
        assert hit.documents_count == 2
        assert hit.appointments_count == 0

    def test_client_suggestion_links_to_frontend(self):
        user_id = uuid.uuid4()
        suggestion = ClientSearcher().to_suggestion((user_id, "Maria Silva", "maria@example.com"))
        assert suggestion.type == "client"
        assert suggestion.subtitle == "maria@example.com"
        assert suggestion.url.endswith(f"/clients/{user_id}")


class TestSearcherContracts:
    def test_incomplete_searcher_rejected_at_construction(self):
        class _NoHits(EntitySearcher):
            key = "cases"
            search_type = SearchType.CASES
            model = Case

            def predicate(self, term: str) -> Any:
                return Case.title.icontains(term)

            def page_statement(self, term: str, offset: int, limit: int) -> Any:
                return None

        with pytest.raises(TypeError):
            _NoHits()

    def test_only_clients_cases_and_documents_suggest(self):
        assert isinstance(ClientSearcher(), SuggestingSearcher)
        assert isinstance(CaseSearcher(), SuggestingSearcher)
        assert isinstance(DocumentSearcher(), SuggestingSearcher)
        assert not isinstance(AppointmentSearcher(), SuggestingSearcher)
