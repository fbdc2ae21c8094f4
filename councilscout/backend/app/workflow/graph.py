"""
LangGraph Graph: council-meeting resolution with conditional routing.

Flow:
  search → select → fetch → documents → synthesize → END

Conditional edges:
  - After search: no hits (every query failed, or the stage raised) → fallback → END
  - After select: candidate has no URL → no_site → END (nothing is fetched)
  - After fetch:  target page unreachable → END with the degraded record

Every node returns an enriched copy of the running ``info`` record, so a
late failure never discards what earlier stages found.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from langgraph.graph import END, StateGraph

from app.agents.document_agent import DocumentDiscoverer, analyze_site_structure
from app.agents.fetch_agent import ContentFetcher
from app.agents.interpret_agent import ResultInterpreter
from app.agents.search_agent import SearchProvider
from app.config import Settings, get_settings
from app.exceptions import CouncilScoutError, ResolutionError
from app.models import Location, MeetingInfo, SearchHit, SiteCandidate
from app.utils.urls import is_probable_pdf_url
from app.workflow.state import ResolutionState

logger = logging.getLogger(__name__)

NO_SITE_SUMMARY = "No suitable council or city websites were found in the search results."
NO_SITE_DESCRIPTION = "No suitable websites found in search results"
FETCH_FAILED_SUMMARY = "Found website but couldn't access meeting details"
FETCH_FAILED_ERROR = "Website scraping failed"


@dataclass
class ResolutionResult:
    info: MeetingInfo
    hits: List[SearchHit] = field(default_factory=list)
    search_failed: bool = False

    @property
    def fallback(self) -> bool:
        return self.info.fallback


def route_after_search(state: ResolutionState) -> str:
    if state.get("hits"):
        return "select"
    logger.info("[PIPELINE] No search hits, using fallback")
    return "fallback"


def route_after_select(state: ResolutionState) -> str:
    candidate = state.get("candidate")
    if candidate is None or candidate.is_empty:
        logger.info("[PIPELINE] Candidate has no URL, skipping fetch")
        return "no_site"
    return "fetch"


def route_after_fetch(state: ResolutionState) -> str:
    return "end" if state.get("fetch_failed") else "documents"


class ResolutionPipeline:
    """Location in, MeetingInfo out. Collaborators are injected so tests can fake them."""

    def __init__(
        self,
        search: SearchProvider,
        fetcher: ContentFetcher,
        interpreter: ResultInterpreter,
        discoverer: DocumentDiscoverer,
        settings: Optional[Settings] = None,
    ):
        self.search = search
        self.fetcher = fetcher
        self.interpreter = interpreter
        self.discoverer = discoverer
        self.settings = settings or get_settings()
        self.graph = self._build_graph()

    def _build_graph(self):
        g = StateGraph(ResolutionState)

        # ── Register nodes ──────────────────────────────────────────────────
        g.add_node("search",     self._search)
        g.add_node("select",     self._select)
        g.add_node("no_site",    self._no_site)
        g.add_node("fetch",      self._fetch)
        g.add_node("documents",  self._documents)
        g.add_node("synthesize", self._synthesize)
        g.add_node("fallback",   self._fallback)

        # ── Entry point ─────────────────────────────────────────────────────
        g.set_entry_point("search")

        # ── Edges ───────────────────────────────────────────────────────────
        g.add_conditional_edges(
            "search",
            route_after_search,
            {"select": "select", "fallback": "fallback"},
        )
        g.add_conditional_edges(
            "select",
            route_after_select,
            {"fetch": "fetch", "no_site": "no_site"},
        )
        g.add_conditional_edges(
            "fetch",
            route_after_fetch,
            {"documents": "documents", "end": END},
        )
        g.add_edge("documents",  "synthesize")
        g.add_edge("synthesize", END)
        g.add_edge("no_site",    END)
        g.add_edge("fallback",   END)

        return g.compile()

    async def run(self, location: Location) -> ResolutionResult:
        logger.info("[PIPELINE] Resolving %s", location.label())
        try:
            final = await self.graph.ainvoke({"location": location, "info": MeetingInfo()})
        except CouncilScoutError:
            raise
        except Exception as exc:
            logger.exception("[PIPELINE] Resolution failed for %s", location.label())
            raise ResolutionError(f"Failed to resolve council information for {location.label()}") from exc

        info = final["info"]
        logger.info(
            "[PIPELINE] Done for %s (fallback=%s, pages=%s)",
            location.label(),
            info.fallback,
            info.total_pages_analyzed,
        )
        return ResolutionResult(
            info=info,
            hits=final.get("hits", []),
            search_failed=bool(final.get("search_failed")),
        )

    # ── Nodes ───────────────────────────────────────────────────────────────

    async def _search(self, state: ResolutionState) -> dict:
        try:
            outcome = await self.search.search_council_meetings(state["location"])
        except Exception as exc:
            logger.warning("[PIPELINE] Search stage failed for %s: %s", state["location"].label(), exc)
            return {"hits": [], "search_failed": True, "search_errors": [str(exc) or type(exc).__name__]}
        if outcome.failed:
            logger.warning("[PIPELINE] Every search query failed for %s", state["location"].label())
        return {
            "hits": outcome.hits,
            "search_failed": outcome.failed,
            "search_errors": outcome.errors,
        }

    async def _select(self, state: ResolutionState) -> dict:
        candidate = await self.interpreter.select_candidate(state["hits"], state["location"])
        return {"candidate": candidate, "info": MeetingInfo.from_candidate(candidate)}

    async def _no_site(self, state: ResolutionState) -> dict:
        candidate = state.get("candidate") or SiteCandidate()
        info = MeetingInfo.from_candidate(candidate).model_copy(
            update={
                "description": candidate.description or NO_SITE_DESCRIPTION,
                "summary": NO_SITE_SUMMARY,
            }
        )
        return {"info": info, "pages": []}

    async def _fetch(self, state: ResolutionState) -> dict:
        candidate = state["candidate"]
        page = await self.fetcher.fetch(candidate.target_url)
        if not page.success:
            logger.warning("[PIPELINE] Could not fetch %s: %s", page.url, page.error)
            info = MeetingInfo.from_candidate(candidate, summary=FETCH_FAILED_SUMMARY, error=FETCH_FAILED_ERROR)
            return {"info": info, "pages": [page], "fetch_failed": True}

        extracted = await self.interpreter.extract_meeting_info(page.content, state["location"])
        info = state["info"].enriched(extracted).model_copy(
            update={"scraped_urls": [page.url], "total_pages_analyzed": 1}
        )
        return {"info": info, "pages": [page], "fetch_failed": False}

    async def _documents(self, state: ResolutionState) -> dict:
        pages = list(state["pages"])
        landing = pages[0]
        site_analysis = analyze_site_structure(landing)
        inventory = await self.discoverer.discover(pages, landing.base_url)

        fetched = {url for page in pages for url in (page.url, page.base_url)}
        follow = [
            link
            for link in inventory.agenda_links
            if link not in fetched and not is_probable_pdf_url(link)
        ][: self.settings.follow_agenda_links]
        if follow:
            logger.info("[PIPELINE] Following %s agenda link(s)", len(follow))
            extra = await self.fetcher.fetch_many(follow)
            pages.extend(page for page in extra if page.success)

        pdf_analysis = None
        if inventory.pdf_links:
            pdf_analysis = await self.discoverer.assess_pdfs(inventory.pdf_links)

        return {
            "pages": pages,
            "inventory": inventory,
            "pdf_analysis": pdf_analysis,
            "site_analysis": site_analysis,
        }

    async def _synthesize(self, state: ResolutionState) -> dict:
        info = await self.interpreter.synthesize(
            state["pages"],
            state["candidate"],
            state.get("inventory"),
            state.get("pdf_analysis"),
            state["location"],
            base=state["info"],
        )
        return {"info": info.model_copy(update={"site_analysis": state.get("site_analysis")})}

    async def _fallback(self, state: ResolutionState) -> dict:
        return {"info": await self.interpreter.fallback(state["location"])}
