import unittest

from app.agents.interpret_agent import (
    AGENDA_SYSTEM_PROMPT,
    CANDIDATE_SYSTEM_PROMPT,
    EXTRACT_SYSTEM_PROMPT,
    FALLBACK_CAVEAT,
    FALLBACK_SYSTEM_PROMPT,
    SYNTHESIS_SYSTEM_PROMPT,
    ResultInterpreter,
)
from app.models import Location, MeetingInfo, SearchHit, SiteCandidate
from fakes import FakeInference, page

SPRINGFIELD = Location(city="Springfield", state="IL")
HITS = [
    SearchHit(title="City Council | Springfield", url="https://www.springfield.il.us/council", snippet="Agendas"),
    SearchHit(title="Springfield news", url="https://news.example.com/council", snippet="Council votes"),
]


class SelectCandidateTests(unittest.IsolatedAsyncioTestCase):
    async def test_hits_are_listed_in_prompt(self):
        inference = FakeInference({CANDIDATE_SYSTEM_PROMPT: {"website": "https://www.springfield.il.us"}})
        candidate = await ResultInterpreter(inference).select_candidate(HITS, SPRINGFIELD)

        self.assertEqual(candidate.website, "https://www.springfield.il.us")
        prompt = inference.calls[0]["user"]
        self.assertIn("1. Title: City Council | Springfield", prompt)
        self.assertIn("URL: https://news.example.com/council", prompt)
        self.assertIn("Springfield, IL", prompt)

    async def test_unparseable_reply_uses_first_hit(self):
        inference = FakeInference({CANDIDATE_SYSTEM_PROMPT: "I think the first result looks best."})
        candidate = await ResultInterpreter(inference).select_candidate(HITS, SPRINGFIELD)

        self.assertEqual(candidate.website, "https://www.springfield.il.us/council")
        self.assertEqual(candidate.description, "Found 2 results but failed to parse them automatically.")


class ExtractAndAgendaTests(unittest.IsolatedAsyncioTestCase):
    async def test_extract_truncates_page_text(self):
        inference = FakeInference({EXTRACT_SYSTEM_PROMPT: {"meetingSchedule": "First Tuesday at 5:30 PM"}})
        info = await ResultInterpreter(inference).extract_meeting_info("x" * 50_000, SPRINGFIELD)

        self.assertEqual(info.meeting_schedule, "First Tuesday at 5:30 PM")
        self.assertLess(len(inference.calls[0]["user"]), 10_200)

    async def test_extract_failure_is_degraded_record(self):
        info = await ResultInterpreter(FakeInference()).extract_meeting_info("text", SPRINGFIELD)
        self.assertEqual(info.summary, "Could not extract meeting details from website content")

    async def test_parse_agenda(self):
        inference = FakeInference({
            AGENDA_SYSTEM_PROMPT: {
                "meetingTitle": "Regular Council Meeting",
                "items": ["Call to order", {"name": "Budget hearing"}],
            }
        })
        agenda = await ResultInterpreter(inference).parse_agenda("agenda text")
        self.assertEqual(agenda.meeting_title, "Regular Council Meeting")
        self.assertEqual(agenda.items, ["Call to order", "Budget hearing"])


class SynthesizeTests(unittest.IsolatedAsyncioTestCase):
    async def test_synthesis_keeps_earlier_fields_and_records_pages(self):
        inference = FakeInference({SYNTHESIS_SYSTEM_PROMPT: {"location": "Council Chambers", "summary": "Meets monthly"}})
        candidate = SiteCandidate(website="https://www.springfield.il.us", contact_info="217-555-0100")
        base = MeetingInfo.from_candidate(candidate, meeting_schedule="First Tuesday")
        pages = [
            page("https://www.springfield.il.us/council", "Council page"),
            page("https://www.springfield.il.us/broken", "").model_copy(update={"success": False}),
        ]

        info = await ResultInterpreter(inference).synthesize(pages, candidate, None, None, SPRINGFIELD, base=base)

        self.assertEqual(info.meeting_schedule, "First Tuesday")
        self.assertEqual(info.location, "Council Chambers")
        self.assertEqual(info.contact_info, "217-555-0100")
        self.assertEqual(info.scraped_urls, ["https://www.springfield.il.us/council"])
        self.assertEqual(info.total_pages_analyzed, 1)
        self.assertFalse(info.fallback)
        self.assertIn("URL: https://www.springfield.il.us/council\nContent: Council page", inference.calls[0]["user"])

    async def test_synthesis_failure_degrades_but_keeps_candidate(self):
        candidate = SiteCandidate(website="https://www.springfield.il.us")
        info = await ResultInterpreter(FakeInference()).synthesize(
            [page("https://www.springfield.il.us", "text")], candidate, None, None, SPRINGFIELD
        )
        self.assertEqual(info.website, "https://www.springfield.il.us")
        self.assertEqual(info.summary, "Pages were scraped but could not be automatically analyzed")
        self.assertEqual(info.error, "Failed to synthesize information")
        self.assertEqual(info.total_pages_analyzed, 1)


class FallbackTests(unittest.IsolatedAsyncioTestCase):
    async def test_fallback_discards_next_meeting_and_adds_caveat(self):
        inference = FakeInference({
            FALLBACK_SYSTEM_PROMPT: {
                "website": "https://www.springfield.il.us",
                "description": "Springfield's council meets at the Municipal Center.",
                "nextMeeting": "2024-10-01",
            }
        })
        info = await ResultInterpreter(inference).fallback(SPRINGFIELD)

        self.assertTrue(info.fallback)
        self.assertIsNone(info.next_meeting)
        self.assertIn(FALLBACK_CAVEAT, info.description)
        self.assertIn(FALLBACK_CAVEAT, info.summary)
        self.assertEqual(info.scraped_urls, [])

    async def test_fallback_without_inference_still_answers(self):
        info = await ResultInterpreter(FakeInference()).fallback(SPRINGFIELD)
        self.assertTrue(info.fallback)
        self.assertIsNone(info.next_meeting)
        self.assertIn("Unable to find current information for Springfield, IL", info.description)


if __name__ == "__main__":
    unittest.main()
