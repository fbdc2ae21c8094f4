"""
Result Interpreter
==================
Turns free-text language-model replies into the typed records of the
resolution pipeline:

  select_candidate      search hits           -> SiteCandidate
  extract_meeting_info  one page of text      -> partial MeetingInfo
  synthesize            all scraped evidence  -> MeetingInfo
  fallback              location only         -> caveated MeetingInfo
  parse_agenda          agenda page text      -> AgendaSummary

Every call goes through ``complete_or_degrade`` so a failed request or an
unparseable reply yields a schema-valid placeholder instead of an exception.
"""
from __future__ import annotations

import json
import logging
from typing import List, Optional

from app.models import (
    AgendaSummary,
    DocumentInventory,
    Location,
    MeetingInfo,
    PageContent,
    PDFAnalysis,
    SearchHit,
    SiteCandidate,
)
from app.services.inference import InferenceClient
from app.utils.llm_json import complete_or_degrade

logger = logging.getLogger(__name__)

EXTRACT_CHAR_LIMIT = 10_000
SYNTHESIS_CHAR_LIMIT = 12_000
AGENDA_CHAR_LIMIT = 10_000
FALLBACK_CAVEAT = (
    "This answer comes from general knowledge, not a live search, and may be "
    "out of date. Please confirm with the city's official website or city hall."
)

# ── LLM Prompts ───────────────────────────────────────────────────────────────

CANDIDATE_SYSTEM_PROMPT = """You are helping to find city council meeting information.
Based on the web search results provided, pick the single best website for council meetings.

RULES:
- Prefer official municipal or government domains (.gov, .us, city/town sites) over news or aggregators.
- If no specific meetings page is found, use the main city website.
- Only include information clearly present in the search results. Use null when unknown.

Return ONLY a JSON object with EXACTLY these keys:
{
  "website": "most relevant official city/town website URL or null",
  "meetingsPage": "specific meetings/agendas page URL or null",
  "description": "brief description of what was found",
  "nextMeeting": "next meeting date if mentioned in snippets or null",
  "contactInfo": "contact information if found in snippets or null"
}"""

CANDIDATE_USER_TEMPLATE = """Search results for {location} council meetings:

{results}"""

EXTRACT_SYSTEM_PROMPT = """You are an expert at extracting city council meeting information from websites.

Return ONLY a JSON object with EXACTLY these keys. Every key must be present;
use null (or [] for lists) when the information is not clearly in the content:
{
  "meetingSchedule": "when meetings typically occur, e.g. 'First Monday of each month at 7:00 PM'",
  "nextMeeting": "next scheduled meeting date/time",
  "location": "where meetings are held",
  "contactInfo": "contact information (phone, email, address)",
  "publicParticipation": "how the public can participate or attend",
  "documents": ["important document links or agenda URLs"],
  "meetingTypes": ["types of meetings - council, planning, etc."],
  "liveStreaming": "live streaming or recording information",
  "summary": "summary of the meeting information found"
}"""

EXTRACT_USER_TEMPLATE = """Extract meeting information for {location} from this website content:

{content}"""

SYNTHESIS_SYSTEM_PROMPT = """You are an expert at extracting city council meeting information.
Based on pages scraped from a city website, a document inventory and PDF findings,
provide comprehensive meeting information.

Be thorough but accurate. Only include information clearly present in the material.
Return ONLY a JSON object with EXACTLY these keys (null or [] when unknown):
{
  "meetingSchedule": "when meetings typically occur",
  "nextMeeting": "next scheduled meeting if found",
  "location": "where meetings are held",
  "contactInfo": "contact information for meetings/clerk",
  "publicParticipation": "public comment/participation information",
  "meetingTypes": ["types of meetings held"],
  "documents": ["direct links to agendas and important documents"],
  "liveStreaming": "live streaming information",
  "summary": "comprehensive summary of meeting information found"
}"""

SYNTHESIS_USER_TEMPLATE = """Extract comprehensive council meeting information for {location}.

KNOWN SITE DETAILS:
{candidate}

DOCUMENT INVENTORY:
{inventory}

PDF FINDINGS:
{pdfs}

WEBSITE PAGES:
{pages}"""

FALLBACK_SYSTEM_PROMPT = """Based on your general knowledge, provide information about a city's council meetings.
You do NOT have live search results, so be honest about limitations and say so in the description.

Return ONLY a JSON object with EXACTLY these keys:
{
  "website": "likely official city website URL if known, else null",
  "meetingsPage": "likely meetings page URL if known, else null",
  "description": "general information about how to find council meetings for this city",
  "nextMeeting": null,
  "contactInfo": "general guidance on finding contact info",
  "meetingSchedule": "typical schedule if commonly known, else null",
  "summary": "short summary that states this is not verified current information"
}"""

AGENDA_SYSTEM_PROMPT = """You are an expert at reading city council meeting agendas.
Summarise the agenda page content for a resident.

Return ONLY a JSON object with EXACTLY these keys (null or [] when unknown):
{
  "meetingTitle": "name of the meeting",
  "meetingDate": "meeting date",
  "meetingTime": "meeting start time",
  "location": "meeting location",
  "items": ["agenda items in order, one short line each"],
  "publicComment": "how and when the public may comment",
  "summary": "two or three sentence plain-language summary"
}"""


class ResultInterpreter:
    def __init__(self, inference: InferenceClient):
        self.inference = inference

    async def select_candidate(self, hits: List[SearchHit], location: Location) -> SiteCandidate:
        listing = "\n".join(
            f"{index}. Title: {hit.title}\nURL: {hit.url}\nSnippet: {hit.snippet}\n"
            for index, hit in enumerate(hits, start=1)
        )
        user_prompt = CANDIDATE_USER_TEMPLATE.format(location=location.label(), results=listing)

        def degraded() -> SiteCandidate:
            return SiteCandidate(
                website=hits[0].url if hits else None,
                description=f"Found {len(hits)} results but failed to parse them automatically.",
            )

        parsed = await complete_or_degrade(
            lambda: self.inference.complete(CANDIDATE_SYSTEM_PROMPT, user_prompt),
            SiteCandidate,
            degraded,
            stage="INTERPRET",
        )
        logger.info("[INTERPRET] Candidate for %s: %s", location.label(), parsed.value.target_url)
        return parsed.value

    async def extract_meeting_info(self, page_text: str, location: Location) -> MeetingInfo:
        user_prompt = EXTRACT_USER_TEMPLATE.format(
            location=location.label(),
            content=(page_text or "")[:EXTRACT_CHAR_LIMIT],
        )
        parsed = await complete_or_degrade(
            lambda: self.inference.complete(EXTRACT_SYSTEM_PROMPT, user_prompt),
            MeetingInfo,
            lambda: MeetingInfo(summary="Could not extract meeting details from website content"),
            stage="INTERPRET",
        )
        return parsed.value

    async def synthesize(
        self,
        pages: List[PageContent],
        candidate: SiteCandidate,
        inventory: Optional[DocumentInventory],
        pdf_analysis: Optional[PDFAnalysis],
        location: Location,
        base: Optional[MeetingInfo] = None,
    ) -> MeetingInfo:
        """Merge all evidence into the final record.

        ``base`` is the record built by earlier stages; model output enriches
        it, so a failed synthesis still returns what was already known.
        """
        successful = [page for page in pages if page.success]
        combined = "\n\n---\n\n".join(f"URL: {page.url}\nContent: {page.content}" for page in successful)
        user_prompt = SYNTHESIS_USER_TEMPLATE.format(
            location=location.label(),
            candidate=json.dumps(candidate.to_payload(), ensure_ascii=False),
            inventory=json.dumps(inventory.to_payload(), ensure_ascii=False) if inventory else "none",
            pdfs=pdf_analysis.summary if pdf_analysis and pdf_analysis.summary else "none",
            pages=combined[:SYNTHESIS_CHAR_LIMIT],
        )
        start = base or MeetingInfo.from_candidate(candidate)

        parsed = await complete_or_degrade(
            lambda: self.inference.complete(SYNTHESIS_SYSTEM_PROMPT, user_prompt, max_tokens=2000),
            MeetingInfo,
            lambda: MeetingInfo(
                summary="Pages were scraped but could not be automatically analyzed",
                error="Failed to synthesize information",
            ),
            stage="INTERPRET",
        )
        info = start.enriched(parsed.value)
        return info.model_copy(
            update={
                "website": info.website or candidate.website,
                "meetings_page": info.meetings_page or candidate.meetings_page,
                "description": info.description or candidate.description,
                "contact_info": info.contact_info or candidate.contact_info,
                "next_meeting": info.next_meeting or candidate.next_meeting,
                "scraped_urls": [page.url for page in successful],
                "total_pages_analyzed": len(successful),
                "document_info": inventory,
                "pdf_analysis": pdf_analysis,
                "fallback": False,
            }
        )

    async def fallback(self, location: Location) -> MeetingInfo:
        def degraded() -> MeetingInfo:
            return MeetingInfo(
                description=(
                    f"Unable to find current information for {location.label()}. Please visit your "
                    "city's official website or contact city hall directly."
                ),
                summary=FALLBACK_CAVEAT,
            )

        parsed = await complete_or_degrade(
            lambda: self.inference.complete(FALLBACK_SYSTEM_PROMPT, location.label(), temperature=0.2),
            MeetingInfo,
            degraded,
            stage="INTERPRET",
        )
        info = parsed.value
        description = info.description or degraded().description
        if FALLBACK_CAVEAT not in description:
            description = f"{description} {FALLBACK_CAVEAT}"
        summary = info.summary or FALLBACK_CAVEAT
        if FALLBACK_CAVEAT not in summary:
            summary = f"{summary} {FALLBACK_CAVEAT}"
        return info.model_copy(
            update={
                "next_meeting": None,
                "description": description,
                "summary": summary,
                "scraped_urls": [],
                "total_pages_analyzed": 0,
                "fallback": True,
            }
        )

    async def parse_agenda(self, page_text: str) -> AgendaSummary:
        user_prompt = f"Summarise this agenda page:\n\n{(page_text or '')[:AGENDA_CHAR_LIMIT]}"
        parsed = await complete_or_degrade(
            lambda: self.inference.complete(AGENDA_SYSTEM_PROMPT, user_prompt),
            AgendaSummary,
            lambda: AgendaSummary(summary="Could not parse agenda content automatically"),
            stage="INTERPRET",
        )
        return parsed.value
