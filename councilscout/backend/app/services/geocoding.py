"""ZIP code geocoding and a short place summary for the lookup response."""
from __future__ import annotations

import logging
import re
from typing import Optional
from urllib.parse import quote

import httpx

from app.config import Settings, get_settings
from app.exceptions import LocationNotFound
from app.models import Location
from app.utils.http_client import request_with_retries

logger = logging.getLogger(__name__)

ZIP_RE = re.compile(r"^\d{5}$")


def is_valid_zip(zip_code: str) -> bool:
    return bool(ZIP_RE.match((zip_code or "").strip()))


class Geocoder:
    def __init__(self, client: httpx.AsyncClient, settings: Optional[Settings] = None):
        self.client = client
        self.settings = settings or get_settings()

    async def lookup_zip(self, zip_code: str) -> Location:
        url = f"{self.settings.geocoder_base_url.rstrip('/')}/{zip_code.strip()}"
        response = await request_with_retries(self.client, "GET", url, timeout=10)
        if response.status_code == 404:
            raise LocationNotFound(zip_code)
        response.raise_for_status()
        places = response.json().get("places") or []
        if not places:
            raise LocationNotFound(zip_code)
        place = places[0]
        return Location(city=place.get("place name", ""), state=place.get("state", ""))

    async def place_fact(self, location: Location) -> Optional[str]:
        """First paragraph of the city's Wikipedia summary, or None."""
        title = quote(f"{location.city},_{location.state}".replace(" ", "_"))
        url = f"{self.settings.wiki_summary_base_url.rstrip('/')}/{title}"
        try:
            response = await request_with_retries(self.client, "GET", url, retries=1, timeout=5)
            if response.status_code >= 400:
                return None
            return response.json().get("extract") or None
        except Exception as exc:
            logger.warning("[GEO] Place summary unavailable for %s: %s", location.label(), exc)
            return None
