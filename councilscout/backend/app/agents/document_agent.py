"""
Document Discoverer
===================
Mines scraped council pages for meeting documents and access channels:

  pdfLinks, agendaLinks, calendarLinks, streamingLinks,
  upcomingMeetings, documentTypes, accessibilityInfo, summary

The model reads the page text plus the anchor links harvested from the HTML.
Links found directly in anchors (``.pdf`` targets, agenda-looking URLs) are
merged into the model's answer, so a failed model call still reports them.

PDFs are never downloaded or parsed: up to five are classified from their
URL and filename alone (date, meeting type, document type, priority).

``analyze_site_structure`` reads the landing page only and is attached to the
final record as ``siteAnalysis``.
"""
from __future__ import annotations

import asyncio
import json
import logging
from typing import List
from urllib.parse import urlparse

from app.config import Settings, get_settings
from app.models import DocumentInventory, PageContent, PDFAnalysis, PDFAssessment, SiteAnalysis
from app.services.inference import InferenceClient
from app.utils.llm_json import complete_or_degrade, parse_json_object
from app.utils.urls import (
    AGENDA_KEYWORDS,
    dedupe,
    extract_filename,
    is_likely_agenda_url,
    is_probable_pdf_url,
    make_absolute_url,
)

logger = logging.getLogger(__name__)

DISCOVERY_CHAR_LIMIT = 8_000
MAX_PROMPT_LINKS = 60
MAX_MEETING_PATHS = 10

# ── LLM Prompts ───────────────────────────────────────────────────────────────

DISCOVERY_SYSTEM_PROMPT = """You are an expert at finding city council meeting documents and agendas.

Analyze the webpage content and links and identify any references to:
- PDF agendas and meeting packets
- Meeting minutes and document archives
- Calendar events and upcoming meetings
- Live streaming links and meeting recordings
- Phone numbers for dial-in access

Look for links ending in .pdf, text mentioning "agenda", "minutes" or "meeting",
calendar or event information, and streaming or video links.

Return ONLY a JSON object with EXACTLY these keys:
{
  "pdfLinks": ["PDF URLs found"],
  "agendaLinks": ["agenda page URLs"],
  "calendarLinks": ["calendar URLs"],
  "streamingLinks": ["streaming/video URLs"],
  "upcomingMeetings": ["upcoming meeting dates/times found"],
  "documentTypes": ["types of documents available"],
  "accessibilityInfo": "information about public access to meetings or null",
  "summary": "summary of document availability and access methods"
}"""

DISCOVERY_USER_TEMPLATE = """Find meeting documents and access information on {url}.

LINKS ON THE PAGE:
{links}

PAGE CONTENT:
{content}"""

PDF_SYSTEM_PROMPT = """You are an expert at analyzing city council meeting document URLs and filenames.
You only see the URL and filename, not the document itself.

Look for dates in any format (2023-12-15, 12-15-23, December-15-2023), meeting types
(council, planning, special, emergency), document types (agenda, minutes, packet, summary)
and keywords indicating recency or importance.

Return ONLY a JSON object with EXACTLY these keys:
{
  "meetingDate": "likely meeting date if found in filename/path, else null",
  "meetingType": "council|planning|special|work session|other",
  "documentType": "agenda|minutes|packet|summary|other",
  "isUpcoming": true or false,
  "priority": "high|medium|low based on how recent/relevant this document appears",
  "extractedInfo": "any other information that can be determined from the URL/filename"
}"""

PDF_SUMMARY_SYSTEM_PROMPT = """Based on the analysis of PDF documents from a city council website,
write a short plain-text summary for residents looking for council meeting information.

Focus on the most recent or upcoming meetings, the types of meetings and documents
available, and how accessible the meeting information is. Do not return JSON."""


class DocumentDiscoverer:
    def __init__(self, inference: InferenceClient, settings: Settings | None = None):
        self.inference = inference
        self.settings = settings or get_settings()

    async def discover(self, pages: List[PageContent], base_url: str) -> DocumentInventory:
        successful = [page for page in pages if page.success]
        content = "\n\n".join(page.content for page in successful)[:DISCOVERY_CHAR_LIMIT]
        links = dedupe(link for page in successful for link in page.links)
        user_prompt = DISCOVERY_USER_TEMPLATE.format(
            url=base_url,
            links="\n".join(links[:MAX_PROMPT_LINKS]) or "none",
            content=content,
        )

        parsed = await complete_or_degrade(
            lambda: self.inference.complete(DISCOVERY_SYSTEM_PROMPT, user_prompt),
            DocumentInventory,
            lambda: DocumentInventory(summary="Could not automatically detect meeting documents"),
            stage="DOCS",
        )
        inventory = parsed.value
        anchor_pdfs = [link for link in links if is_probable_pdf_url(link)]
        anchor_agendas = [link for link in links if not is_probable_pdf_url(link) and is_likely_agenda_url(link)]

        inventory = inventory.model_copy(
            update={
                "pdf_links": dedupe(
                    [make_absolute_url(link, base_url) for link in inventory.pdf_links] + anchor_pdfs
                ),
                "agenda_links": dedupe(
                    [make_absolute_url(link, base_url) for link in inventory.agenda_links] + anchor_agendas
                ),
                "calendar_links": dedupe(make_absolute_url(link, base_url) for link in inventory.calendar_links),
                "streaming_links": dedupe(make_absolute_url(link, base_url) for link in inventory.streaming_links),
            }
        )
        logger.info(
            "[DOCS] %s: %s PDFs, %s agenda links",
            base_url,
            len(inventory.pdf_links),
            len(inventory.agenda_links),
        )
        return inventory

    async def assess_pdfs(self, pdf_urls: List[str]) -> PDFAnalysis:
        if not pdf_urls:
            return PDFAnalysis(analyzed_pdfs=[], total_pdfs=0, summary="No PDF documents found to analyze")

        selected = pdf_urls[: self.settings.max_pdf_assessments]
        assessments = await asyncio.gather(*(self.assess_pdf(url) for url in selected))
        summary = await self._summarize(list(assessments))
        return PDFAnalysis(analyzed_pdfs=list(assessments), total_pdfs=len(pdf_urls), summary=summary)

    async def assess_pdf(self, pdf_url: str) -> PDFAssessment:
        filename = extract_filename(pdf_url)
        user_prompt = f"Analyze this PDF document URL and filename:\nURL: {pdf_url}\nFilename: {filename}"

        def degraded() -> PDFAssessment:
            return PDFAssessment(url=pdf_url, filename=filename, extracted_info="Could not analyze document")

        async def call() -> str:
            raw = await self.inference.complete(PDF_SYSTEM_PROMPT, user_prompt)
            # url and filename are ours, never the model's
            return json.dumps({**parse_json_object(raw), "url": pdf_url, "filename": filename})

        parsed = await complete_or_degrade(call, PDFAssessment, degraded, stage="DOCS")
        return parsed.value

    async def _summarize(self, assessments: List[PDFAssessment]) -> str:
        fallback_text = f"Found {len(assessments)} PDF documents, but could not provide detailed analysis."
        analysis_text = "\n\n".join(
            f"PDF: {item.filename}\nAnalysis: {json.dumps(item.to_payload(), indent=2)}" for item in assessments
        )
        try:
            reply = await self.inference.complete(
                PDF_SUMMARY_SYSTEM_PROMPT,
                f"Summarize these PDF document analyses:\n\n{analysis_text}",
                temperature=0.2,
                max_tokens=600,
                json_mode=False,
            )
        except Exception as exc:
            logger.warning("[DOCS] PDF summary failed: %s", exc)
            return fallback_text
        return reply.strip() or fallback_text


def analyze_site_structure(page: PageContent) -> SiteAnalysis:
    """Summarise where meeting material lives on the landing page.

    Built from the page's own anchors and text, without a model call.
    ``likely_meeting_paths`` only holds same-site, non-PDF paths.
    """
    if not page.success:
        return SiteAnalysis()

    host = urlparse(page.base_url).netloc.lower()
    paths = []
    for link in page.links:
        parsed = urlparse(link)
        if parsed.netloc.lower() != host or is_probable_pdf_url(link):
            continue
        if parsed.path.strip("/") and is_likely_agenda_url(parsed.path):
            paths.append(parsed.path)

    text = page.content.lower()
    lowered_links = [link.lower() for link in page.links]
    return SiteAnalysis(
        likely_meeting_paths=dedupe(paths)[:MAX_MEETING_PATHS],
        meeting_keywords=[keyword for keyword in AGENDA_KEYWORDS if keyword in text],
        has_calendar="calendar" in text or any("calendar" in link for link in lowered_links),
        has_pdfs=any(is_probable_pdf_url(link) for link in page.links),
        has_agenda_links=any("agenda" in link for link in lowered_links),
    )
