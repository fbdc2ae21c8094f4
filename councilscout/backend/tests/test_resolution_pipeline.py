import unittest

from app.agents.document_agent import DISCOVERY_SYSTEM_PROMPT, PDF_SUMMARY_SYSTEM_PROMPT, PDF_SYSTEM_PROMPT, DocumentDiscoverer
from app.agents.interpret_agent import (
    CANDIDATE_SYSTEM_PROMPT,
    EXTRACT_SYSTEM_PROMPT,
    FALLBACK_SYSTEM_PROMPT,
    SYNTHESIS_SYSTEM_PROMPT,
    ResultInterpreter,
)
from app.config import Settings
from app.exceptions import ResolutionError
from app.models import Location, PageContent, SearchHit
from app.workflow.graph import FETCH_FAILED_ERROR, FETCH_FAILED_SUMMARY, NO_SITE_SUMMARY, ResolutionPipeline
from fakes import FakeFetcher, FakeInference, FakeSearch, page

SPRINGFIELD = Location(city="Springfield", state="IL")
COUNCIL_URL = "https://www.springfield.il.us/council"
AGENDA_CENTER = "https://www.springfield.il.us/council/agenda-center"
AGENDA_PDF = "https://www.springfield.il.us/docs/council-agenda-2024-10-01.pdf"

HITS = [
    SearchHit(title="City Council - Springfield, IL", url=COUNCIL_URL, snippet="Meets the first Tuesday"),
    SearchHit(title="Springfield, Illinois - Wikipedia", url="https://en.wikipedia.org/wiki/Springfield", snippet=""),
]


def _pipeline(search, fetcher, inference, **settings):
    config = Settings(**{"follow_agenda_links": 2, "max_pdf_assessments": 5, **settings})
    return ResolutionPipeline(
        search=search,
        fetcher=fetcher,
        interpreter=ResultInterpreter(inference),
        discoverer=DocumentDiscoverer(inference, config),
        settings=config,
    )


def _springfield_inference(**overrides):
    replies = {
        CANDIDATE_SYSTEM_PROMPT: {
            "website": "https://www.springfield.il.us",
            "meetingsPage": COUNCIL_URL,
            "description": "Official City of Springfield council page",
            "nextMeeting": None,
            "contactInfo": None,
        },
        EXTRACT_SYSTEM_PROMPT: {
            "meetingSchedule": "First Tuesday of each month at 5:30 PM",
            "location": "Council Chambers, Municipal Center East",
            "contactInfo": "Office of the City Clerk, 217-789-2216",
        },
        DISCOVERY_SYSTEM_PROMPT: {
            "agendaLinks": ["/council/agenda-center"],
            "upcomingMeetings": ["October 1, 2024 5:30 PM"],
            "summary": "Agendas and packets are posted in the agenda center.",
        },
        PDF_SYSTEM_PROMPT: {"meetingDate": "2024-10-01", "meetingType": "council", "documentType": "agenda", "priority": "high"},
        PDF_SUMMARY_SYSTEM_PROMPT: "The October 1 council agenda is available.",
        SYNTHESIS_SYSTEM_PROMPT: {
            "meetingSchedule": "First Tuesday of each month at 5:30 PM",
            "nextMeeting": "October 1, 2024 at 5:30 PM",
            "publicParticipation": "Public comment is taken at the start of each meeting.",
            "summary": "Springfield City Council meets the first Tuesday of each month.",
        },
    }
    replies.update(overrides)
    return FakeInference(replies)


class SpringfieldEndToEndTests(unittest.IsolatedAsyncioTestCase):
    async def test_full_resolution(self):
        fetcher = FakeFetcher({
            COUNCIL_URL: page(
                COUNCIL_URL,
                "City Council meets on the first Tuesday of each month at 5:30 PM.",
                links=[AGENDA_PDF, "https://www.springfield.il.us/parks"],
            ),
            AGENDA_CENTER: page(AGENDA_CENTER, "Agenda Center: October 1, 2024 Regular Meeting"),
        })
        inference = _springfield_inference()

        result = await _pipeline(FakeSearch(HITS), fetcher, inference).run(SPRINGFIELD)
        info = result.info

        self.assertFalse(info.fallback)
        self.assertIn("springfield.il.us", info.website)
        self.assertEqual(info.meetings_page, COUNCIL_URL)
        self.assertIn("first tuesday", info.meeting_schedule.lower())
        self.assertEqual(info.next_meeting, "October 1, 2024 at 5:30 PM")
        self.assertEqual(info.contact_info, "Office of the City Clerk, 217-789-2216")
        self.assertEqual(info.location, "Council Chambers, Municipal Center East")
        self.assertEqual(info.scraped_urls, [COUNCIL_URL, AGENDA_CENTER])
        self.assertEqual(info.total_pages_analyzed, 2)

        self.assertEqual(info.document_info.pdf_links, [AGENDA_PDF])
        self.assertEqual(info.document_info.agenda_links, [AGENDA_CENTER])
        self.assertEqual(info.pdf_analysis.total_pdfs, 1)
        self.assertEqual(info.pdf_analysis.analyzed_pdfs[0].priority, "high")
        self.assertTrue(info.site_analysis.has_pdfs)
        self.assertIn("council", info.site_analysis.meeting_keywords)

        self.assertEqual(fetcher.fetched, [COUNCIL_URL, AGENDA_CENTER])
        self.assertEqual(len(result.hits), 2)
        self.assertFalse(result.search_failed)

    async def test_relative_document_links_use_redirected_landing_url(self):
        landing = PageContent(
            url=COUNCIL_URL,
            final_url=COUNCIL_URL + "/",
            content="City Council meets on the first Tuesday of each month.",
            success=True,
            method="static",
        )
        fetcher = FakeFetcher({COUNCIL_URL: landing})
        inference = _springfield_inference(**{
            DISCOVERY_SYSTEM_PROMPT: {"pdfLinks": ["agenda.pdf"], "calendarLinks": ["calendar"]},
        })

        info = (await _pipeline(FakeSearch(HITS), fetcher, inference).run(SPRINGFIELD)).info

        self.assertEqual(info.document_info.pdf_links, ["https://www.springfield.il.us/council/agenda.pdf"])
        self.assertEqual(info.document_info.calendar_links, ["https://www.springfield.il.us/council/calendar"])
        self.assertEqual(fetcher.fetched, [COUNCIL_URL])

    async def test_synthesis_failure_keeps_earlier_findings(self):
        fetcher = FakeFetcher({COUNCIL_URL: page(COUNCIL_URL, "Council meets the first Tuesday.")})
        inference = _springfield_inference(**{SYNTHESIS_SYSTEM_PROMPT: RuntimeError("model overloaded")})

        info = (await _pipeline(FakeSearch(HITS), fetcher, inference).run(SPRINGFIELD)).info

        self.assertEqual(info.meeting_schedule, "First Tuesday of each month at 5:30 PM")
        self.assertEqual(info.error, "Failed to synthesize information")
        self.assertEqual(info.scraped_urls, [COUNCIL_URL])


class DegradedPathTests(unittest.IsolatedAsyncioTestCase):
    async def test_all_queries_failing_uses_fallback(self):
        search = FakeSearch(hits=[], errors=["q1: 403", "q2: 403", "q3: 403"])
        fetcher = FakeFetcher()
        inference = FakeInference({
            FALLBACK_SYSTEM_PROMPT: {
                "website": "https://www.springfield.il.us",
                "description": "Springfield's council usually meets at the Municipal Center.",
                "nextMeeting": "Tuesday",
            }
        })

        result = await _pipeline(search, fetcher, inference).run(SPRINGFIELD)

        self.assertTrue(result.fallback)
        self.assertTrue(result.search_failed)
        self.assertIsNone(result.info.next_meeting)
        self.assertEqual(fetcher.fetched, [])
        self.assertEqual(inference.calls_for(CANDIDATE_SYSTEM_PROMPT), [])

    async def test_zero_hits_uses_fallback(self):
        result = await _pipeline(FakeSearch(hits=[]), FakeFetcher(), FakeInference()).run(SPRINGFIELD)
        self.assertTrue(result.info.fallback)
        self.assertIsNone(result.info.next_meeting)
        self.assertFalse(result.search_failed)

    async def test_empty_candidate_skips_fetch(self):
        fetcher = FakeFetcher()
        inference = FakeInference({CANDIDATE_SYSTEM_PROMPT: {"website": None, "meetingsPage": None}})

        info = (await _pipeline(FakeSearch(HITS), fetcher, inference).run(SPRINGFIELD)).info

        self.assertEqual(fetcher.fetched, [])
        self.assertEqual(info.summary, NO_SITE_SUMMARY)
        self.assertFalse(info.fallback)

    async def test_unreachable_site_returns_candidate_record(self):
        fetcher = FakeFetcher()
        inference = _springfield_inference()

        info = (await _pipeline(FakeSearch(HITS), fetcher, inference).run(SPRINGFIELD)).info

        self.assertEqual(fetcher.fetched, [COUNCIL_URL])
        self.assertEqual(info.website, "https://www.springfield.il.us")
        self.assertEqual(info.summary, FETCH_FAILED_SUMMARY)
        self.assertEqual(info.error, FETCH_FAILED_ERROR)
        self.assertEqual(inference.calls_for(DISCOVERY_SYSTEM_PROMPT), [])

    async def test_search_stage_error_uses_fallback(self):
        class BrokenSearch(FakeSearch):
            async def search_council_meetings(self, location):
                raise KeyError("items")

        fetcher = FakeFetcher()
        inference = FakeInference({
            FALLBACK_SYSTEM_PROMPT: {
                "website": "https://www.springfield.il.us",
                "description": "Springfield's council usually meets at the Municipal Center.",
            }
        })

        result = await _pipeline(BrokenSearch(), fetcher, inference).run(SPRINGFIELD)

        self.assertTrue(result.fallback)
        self.assertTrue(result.search_failed)
        self.assertEqual(result.hits, [])
        self.assertIsNone(result.info.next_meeting)
        self.assertEqual(fetcher.fetched, [])

    async def test_unexpected_error_becomes_resolution_error(self):
        class BrokenFetcher(FakeFetcher):
            async def fetch(self, url):
                raise KeyError("html")

        with self.assertRaises(ResolutionError):
            await _pipeline(FakeSearch(HITS), BrokenFetcher(), _springfield_inference()).run(SPRINGFIELD)


if __name__ == "__main__":
    unittest.main()
