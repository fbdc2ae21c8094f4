"""API router for scraping and summarising a single agenda page."""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from app.agents.fetch_agent import ContentFetcher
from app.agents.interpret_agent import ResultInterpreter
from app.dependencies import get_fetcher, get_interpreter
from app.utils.urls import is_http_url

logger = logging.getLogger(__name__)

router = APIRouter()


class ScrapeAgendaRequest(BaseModel):
    url: Optional[str] = None


@router.post("/scrape-agenda")
async def scrape_agenda(
    payload: ScrapeAgendaRequest,
    fetcher: ContentFetcher = Depends(get_fetcher),
    interpreter: ResultInterpreter = Depends(get_interpreter),
):
    url = (payload.url or "").strip()
    if not url:
        raise HTTPException(status_code=400, detail="URL is required")
    if not is_http_url(url):
        raise HTTPException(status_code=400, detail="URL must be a valid http/https URL")

    page = await fetcher.fetch(url)
    if not page.success:
        logger.warning("[API] Agenda scrape failed for %s: %s", url, page.error)
        raise HTTPException(status_code=500, detail=f"Failed to scrape {url}: {page.error}")

    agenda = await interpreter.parse_agenda(page.content)
    return {
        "success": True,
        "url": url,
        "agenda": agenda.to_payload(),
        "contentLength": len(page.content),
    }
