"""API router for search-provider diagnostics."""
from __future__ import annotations

from fastapi import APIRouter, Depends

from app.agents.search_agent import SearchProvider
from app.dependencies import get_search

router = APIRouter()


@router.get("/test-search")
async def test_search(search: SearchProvider = Depends(get_search)):
    return await search.check_configuration()
