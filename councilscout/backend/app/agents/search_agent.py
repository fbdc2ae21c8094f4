"""Google Custom Search queries for council-meeting pages."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import httpx

from app.config import Settings, get_settings
from app.exceptions import SearchUnavailable
from app.models import Location, SearchHit
from app.utils.http_client import request_with_retries

logger = logging.getLogger(__name__)

GOOGLE_CSE_URL = "https://www.googleapis.com/customsearch/v1"
COUNCIL_QUERIES = (
    "{city} {state} city council meetings",
    "{city} {state} town hall meetings agenda",
    "{city} {state} municipal council meetings",
)


@dataclass
class SearchOutcome:
    hits: List[SearchHit] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    queries: int = 0

    @property
    def failed(self) -> bool:
        """True when every query raised."""
        return self.queries > 0 and len(self.errors) == self.queries


class SearchProvider:
    def __init__(self, client: httpx.AsyncClient, settings: Optional[Settings] = None):
        self.client = client
        self.settings = settings or get_settings()

    async def search(self, query: str, num_results: Optional[int] = None) -> List[SearchHit]:
        if not self.settings.search_configured:
            raise SearchUnavailable("Missing Google Search API credentials")
        response = await request_with_retries(
            self.client,
            "GET",
            GOOGLE_CSE_URL,
            params={
                "key": self.settings.google_search_api_key,
                "cx": self.settings.google_cx_id,
                "q": query,
                "num": num_results or self.settings.search_results_per_query,
            },
            timeout=self.settings.search_timeout_seconds,
        )
        if response.status_code >= 400:
            raise SearchUnavailable(f"Google Search API error ({response.status_code}): {response.text[:200]}")
        return [
            SearchHit(title=item.get("title") or "", url=item["link"], snippet=item.get("snippet") or "")
            for item in response.json().get("items") or []
            if item.get("link")
        ]

    async def search_council_meetings(self, location: Location) -> SearchOutcome:
        queries = [template.format(city=location.city, state=location.state) for template in COUNCIL_QUERIES]
        results = await asyncio.gather(*(self.search(query) for query in queries), return_exceptions=True)

        outcome = SearchOutcome(queries=len(queries))
        for query, result in zip(queries, results):
            if isinstance(result, BaseException):
                logger.warning("[SEARCH] '%s' failed: %s", query, result)
                outcome.errors.append(f"{query}: {result}")
                continue
            logger.info("[SEARCH] '%s': %s hits", query, len(result))
            outcome.hits.extend(result)
        return outcome

    async def check_configuration(self) -> Dict[str, Any]:
        """Report credential presence and run a one-result probe query."""
        s = self.settings
        report: Dict[str, Any] = {
            "hasApiKey": bool(s.google_search_api_key),
            "hasCxId": bool(s.google_cx_id),
            "apiKeyPreview": f"{s.google_search_api_key[:4]}..." if s.google_search_api_key else None,
        }
        if not s.search_configured:
            return {"success": False, "error": "Missing environment variables", **report}
        try:
            hits = await self.search("test", num_results=1)
        except Exception as exc:
            logger.warning("[SEARCH] Probe query failed: %s", exc)
            return {"success": False, "error": str(exc), **report}
        return {"success": True, "status": 200, "resultCount": len(hits), **report}
