"""
Resolution State: shared TypedDict passed through every LangGraph node.
"""
from typing import List, Optional, TypedDict

from app.models import DocumentInventory, Location, MeetingInfo, PageContent, PDFAnalysis, SearchHit, SiteAnalysis, SiteCandidate


class ResolutionState(TypedDict, total=False):
    # ── Input ──────────────────────────────────────────────────────────────
    location: Location

    # ── Search output ──────────────────────────────────────────────────────
    hits: List[SearchHit]
    search_failed: bool             # every query raised, or the search call itself did
    search_errors: List[str]

    # ── Candidate selection ────────────────────────────────────────────────
    candidate: Optional[SiteCandidate]

    # ── Fetch output ───────────────────────────────────────────────────────
    pages: List[PageContent]        # primary page first, then followed agenda pages
    fetch_failed: bool

    # ── Document mining ────────────────────────────────────────────────────
    inventory: Optional[DocumentInventory]
    pdf_analysis: Optional[PDFAnalysis]
    site_analysis: Optional[SiteAnalysis]  # landing page only

    # ── Running record, enriched by each stage ─────────────────────────────
    info: MeetingInfo
