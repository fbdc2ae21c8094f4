import unittest

import httpx

from app.agents.search_agent import SearchProvider
from app.config import Settings
from app.exceptions import LocationNotFound, SearchUnavailable
from app.models import Location
from app.services.geocoding import Geocoder, is_valid_zip

SPRINGFIELD = Location(city="Springfield", state="IL")
CONFIGURED = {"google_search_api_key": "key-123456", "google_cx_id": "cx-1"}


def _cse_item(n):
    return {"title": f"Result {n}", "link": f"https://site{n}.example/council", "snippet": f"snippet {n}"}


class SearchProviderTests(unittest.IsolatedAsyncioTestCase):
    async def test_hits_are_concatenated_in_query_order(self):
        def handler(request):
            query = request.url.params["q"]
            if "town hall" in query:
                return httpx.Response(200, json={"items": [_cse_item(3)]})
            if "municipal" in query:
                return httpx.Response(200, json={"items": [_cse_item(4), {"title": "no link"}]})
            return httpx.Response(200, json={"items": [_cse_item(1), _cse_item(2)]})

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            outcome = await SearchProvider(client, Settings(**CONFIGURED)).search_council_meetings(SPRINGFIELD)

        self.assertEqual([hit.title for hit in outcome.hits], ["Result 1", "Result 2", "Result 3", "Result 4"])
        self.assertFalse(outcome.failed)

    async def test_failed_query_contributes_nothing(self):
        def handler(request):
            if "town hall" in request.url.params["q"]:
                return httpx.Response(403, json={"error": {"message": "quota"}})
            return httpx.Response(200, json={"items": [_cse_item(1)]})

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            outcome = await SearchProvider(client, Settings(**CONFIGURED)).search_council_meetings(SPRINGFIELD)

        self.assertEqual(len(outcome.hits), 2)
        self.assertEqual(len(outcome.errors), 1)
        self.assertFalse(outcome.failed)

    async def test_every_query_failing_is_flagged(self):
        async with httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(500))) as client:
            provider = SearchProvider(client, Settings(**CONFIGURED))
            outcome = await provider.search_council_meetings(SPRINGFIELD)

        self.assertEqual(outcome.hits, [])
        self.assertTrue(outcome.failed)

    async def test_missing_credentials(self):
        async with httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200))) as client:
            provider = SearchProvider(client, Settings(google_search_api_key="", google_cx_id=""))
            with self.assertRaises(SearchUnavailable):
                await provider.search("anything")
            outcome = await provider.search_council_meetings(SPRINGFIELD)
            report = await provider.check_configuration()

        self.assertTrue(outcome.failed)
        self.assertFalse(report["success"])
        self.assertFalse(report["hasApiKey"])

    async def test_configuration_probe_masks_key(self):
        async with httpx.AsyncClient(
            transport=httpx.MockTransport(lambda r: httpx.Response(200, json={"items": [_cse_item(1)]}))
        ) as client:
            report = await SearchProvider(client, Settings(**CONFIGURED)).check_configuration()

        self.assertTrue(report["success"])
        self.assertEqual(report["resultCount"], 1)
        self.assertNotIn("key-123456", str(report))


class GeocoderTests(unittest.IsolatedAsyncioTestCase):
    def test_zip_validation(self):
        self.assertTrue(is_valid_zip("62701"))
        self.assertFalse(is_valid_zip("6270"))
        self.assertFalse(is_valid_zip("62701-1234"))
        self.assertFalse(is_valid_zip("abcde"))

    async def test_zip_lookup(self):
        body = {"places": [{"place name": "Springfield", "state": "Illinois", "state abbreviation": "IL"}]}
        async with httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200, json=body))) as client:
            location = await Geocoder(client, Settings()).lookup_zip("62701")
        self.assertEqual(location, Location(city="Springfield", state="Illinois"))

    async def test_unknown_zip(self):
        async with httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(404, json={}))) as client:
            with self.assertRaises(LocationNotFound):
                await Geocoder(client, Settings()).lookup_zip("00000")

    async def test_place_fact_is_best_effort(self):
        async with httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(404))) as client:
            self.assertIsNone(await Geocoder(client, Settings()).place_fact(SPRINGFIELD))

        body = {"extract": "Springfield is the capital of Illinois."}
        async with httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200, json=body))) as client:
            fact = await Geocoder(client, Settings()).place_fact(SPRINGFIELD)
        self.assertEqual(fact, "Springfield is the capital of Illinois.")


if __name__ == "__main__":
    unittest.main()
