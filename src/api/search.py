"""Unified search and autocomplete endpoints."""
# ruff: noqa: B008

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.db.engine import get_session_factory
from src.models.enums import SearchType
from src.schemas.common import Actor
from src.schemas.search import SearchResponse, SuggestionsResponse
from src.search.service import (
    MAX_LIMIT,
    MAX_SUGGESTIONS,
    QUERY_MAX_LENGTH,
    QUERY_MIN_LENGTH,
    SearchService,
)
from src.security.auth import get_current_actor

router = APIRouter(prefix="/search", tags=["search"])


def get_search_service(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> SearchService:
    return SearchService(session_factory)


@router.get("", response_model=SearchResponse)
async def unified_search(
    query: str = Query(..., min_length=QUERY_MIN_LENGTH, max_length=QUERY_MAX_LENGTH),
    search_type: SearchType = Query(SearchType.ALL, alias="type"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=MAX_LIMIT),
    actor: Actor = Depends(get_current_actor),
    service: SearchService = Depends(get_search_service),
) -> SearchResponse:
    """Search clients, cases, documents and appointments at once."""
    return await service.search(query, search_type, page=page, limit=limit)


@router.get("/suggestions", response_model=SuggestionsResponse)
async def search_suggestions(
    query: str = Query(..., min_length=QUERY_MIN_LENGTH, max_length=QUERY_MAX_LENGTH),
    limit: int = Query(5, ge=1, le=MAX_SUGGESTIONS),
    actor: Actor = Depends(get_current_actor),
    service: SearchService = Depends(get_search_service),
) -> SuggestionsResponse:
    """Autocomplete for the global search box."""
    return await service.suggestions(query, limit=limit)
