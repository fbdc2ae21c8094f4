"""Typed records exchanged between pipeline stages and returned to the UI.

All records serialise with camelCase keys (``meetingsPage``, ``scrapedUrls``)
because that is the shape the browser UI and the language model both use.
Field validators are lenient: model replies often carry numbers where text is
expected, objects where strings are expected, or empty strings for unknowns.
"""
from __future__ import annotations

import json
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

PRIORITIES = ("high", "medium", "low")


def _text_or_none(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        return value or None
    if isinstance(value, (list, dict)):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


def _string_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, (str, dict)):
        value = [value]
    items: List[str] = []
    for entry in value:
        if isinstance(entry, dict):
            entry = entry.get("url") or entry.get("href") or entry.get("name") or json.dumps(entry, ensure_ascii=False)
        text = _text_or_none(entry)
        if text:
            items.append(text)
    return items


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True)


class Location(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    city: str
    state: str

    @field_validator("city", "state", mode="before")
    @classmethod
    def _strip(cls, value: Any) -> str:
        return str(value or "").strip()

    def label(self) -> str:
        return f"{self.city}, {self.state}"


class SearchHit(CamelModel):
    title: str = ""
    url: str
    snippet: str = ""


class SiteCandidate(CamelModel):
    website: Optional[str] = None
    meetings_page: Optional[str] = None
    description: Optional[str] = None
    next_meeting: Optional[str] = None
    contact_info: Optional[str] = None

    @field_validator("*", mode="before")
    @classmethod
    def _texts(cls, value: Any) -> Optional[str]:
        return _text_or_none(value)

    @property
    def is_empty(self) -> bool:
        return not self.website and not self.meetings_page

    @property
    def target_url(self) -> Optional[str]:
        return self.meetings_page or self.website


class PageContent(CamelModel):
    url: str
    content: str = ""
    success: bool
    error: Optional[str] = None
    method: Optional[Literal["static", "rendered"]] = None
    links: List[str] = []
    final_url: Optional[str] = None  # after redirects

    @property
    def base_url(self) -> str:
        return self.final_url or self.url


class SiteAnalysis(CamelModel):
    likely_meeting_paths: List[str] = []
    meeting_keywords: List[str] = []
    has_calendar: bool = False
    has_pdfs: bool = False
    has_agenda_links: bool = False


class DocumentInventory(CamelModel):
    pdf_links: List[str] = []
    agenda_links: List[str] = []
    calendar_links: List[str] = []
    streaming_links: List[str] = []
    upcoming_meetings: List[str] = []
    document_types: List[str] = []
    accessibility_info: Optional[str] = None
    summary: Optional[str] = None

    @field_validator(
        "pdf_links",
        "agenda_links",
        "calendar_links",
        "streaming_links",
        "upcoming_meetings",
        "document_types",
        mode="before",
    )
    @classmethod
    def _lists(cls, value: Any) -> List[str]:
        return _string_list(value)

    @field_validator("accessibility_info", "summary", mode="before")
    @classmethod
    def _texts(cls, value: Any) -> Optional[str]:
        return _text_or_none(value)


class PDFAssessment(CamelModel):
    url: str
    filename: str
    meeting_date: Optional[str] = None
    meeting_type: str = "unknown"
    document_type: str = "pdf"
    is_upcoming: bool = False
    priority: Literal["high", "medium", "low"] = "low"
    extracted_info: Optional[str] = None

    @field_validator("meeting_date", "extracted_info", mode="before")
    @classmethod
    def _texts(cls, value: Any) -> Optional[str]:
        return _text_or_none(value)

    @field_validator("meeting_type", "document_type", mode="before")
    @classmethod
    def _labels(cls, value: Any) -> Any:
        return _text_or_none(value) or "unknown"

    @field_validator("is_upcoming", mode="before")
    @classmethod
    def _flag(cls, value: Any) -> Any:
        return False if value is None else value

    @field_validator("priority", mode="before")
    @classmethod
    def _priority(cls, value: Any) -> str:
        normalized = str(value or "").strip().lower()
        return normalized if normalized in PRIORITIES else "low"


class PDFAnalysis(CamelModel):
    analyzed_pdfs: List[PDFAssessment] = Field(default_factory=list, alias="analyzedPDFs")
    total_pdfs: int = Field(default=0, alias="totalPDFs")
    summary: str = ""


class MeetingInfo(CamelModel):
    website: Optional[str] = None
    meetings_page: Optional[str] = None
    description: Optional[str] = None
    next_meeting: Optional[str] = None
    contact_info: Optional[str] = None
    meeting_schedule: Optional[str] = None
    location: Optional[str] = None
    public_participation: Optional[str] = None
    meeting_types: List[str] = []
    documents: List[str] = []
    live_streaming: Optional[str] = None
    summary: Optional[str] = None
    scraped_urls: List[str] = []
    total_pages_analyzed: int = 0
    pdf_analysis: Optional[PDFAnalysis] = None
    document_info: Optional[DocumentInventory] = None
    site_analysis: Optional[SiteAnalysis] = None
    fallback: bool = False
    error: Optional[str] = None

    @field_validator(
        "website",
        "meetings_page",
        "description",
        "next_meeting",
        "contact_info",
        "meeting_schedule",
        "location",
        "public_participation",
        "live_streaming",
        "summary",
        "error",
        mode="before",
    )
    @classmethod
    def _texts(cls, value: Any) -> Optional[str]:
        return _text_or_none(value)

    @field_validator("meeting_types", "documents", "scraped_urls", mode="before")
    @classmethod
    def _lists(cls, value: Any) -> List[str]:
        return _string_list(value)

    @classmethod
    def from_candidate(cls, candidate: SiteCandidate, **fields: Any) -> "MeetingInfo":
        return cls(**candidate.model_dump(), **fields)

    def enriched(self, update: "MeetingInfo") -> "MeetingInfo":
        """Return a copy where every non-empty field of ``update`` wins."""
        changes = {}
        for name in update.model_fields_set:
            value = getattr(update, name)
            if value is None or value == [] or value == "":
                continue
            changes[name] = value
        return self.model_copy(update=changes)


class AgendaSummary(CamelModel):
    meeting_title: Optional[str] = None
    meeting_date: Optional[str] = None
    meeting_time: Optional[str] = None
    location: Optional[str] = None
    items: List[str] = []
    public_comment: Optional[str] = None
    summary: Optional[str] = None

    @field_validator("meeting_title", "meeting_date", "meeting_time", "location", "public_comment", "summary", mode="before")
    @classmethod
    def _texts(cls, value: Any) -> Optional[str]:
        return _text_or_none(value)

    @field_validator("items", mode="before")
    @classmethod
    def _items(cls, value: Any) -> List[str]:
        return _string_list(value)
