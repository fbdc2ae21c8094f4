"""Lookup helpers shared by the API: resolve the location, run the pipeline, shape the response."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import HTTPException

from app.exceptions import LocationNotFound
from app.models import Location
from app.services.geocoding import Geocoder, is_valid_zip
from app.workflow.graph import ResolutionPipeline, ResolutionResult

logger = logging.getLogger(__name__)


async def resolve_location(
    geocoder: Geocoder,
    *,
    city: Optional[str] = None,
    state: Optional[str] = None,
    zip_code: Optional[str] = None,
) -> Location:
    """ZIP wins when given; otherwise both city and state are required."""
    if zip_code is not None and zip_code.strip():
        if not is_valid_zip(zip_code):
            raise HTTPException(status_code=400, detail="Invalid ZIP code")
        try:
            return await geocoder.lookup_zip(zip_code)
        except LocationNotFound:
            raise HTTPException(status_code=404, detail="ZIP code not found")
        except Exception as exc:
            logger.warning("[API] ZIP lookup failed for %s: %s", zip_code, exc)
            raise HTTPException(status_code=500, detail="Failed to look up ZIP code")

    if not (city or "").strip() or not (state or "").strip():
        raise HTTPException(status_code=400, detail="City and state are required")
    return Location(city=city, state=state)


def build_lookup_payload(
    location: Location,
    result: ResolutionResult,
    fact: Optional[str] = None,
) -> Dict[str, Any]:
    info = result.info
    payload: Dict[str, Any] = {
        "city": location.city,
        "state": location.state,
        "councilInfo": info.to_payload(),
        "searchResults": [hit.to_payload() for hit in result.hits],
        "searchResultsCount": len(result.hits),
        "fallback": info.fallback,
    }
    if info.document_info is not None or info.pdf_analysis is not None or info.site_analysis is not None:
        payload["comprehensiveInfo"] = {
            "documentInfo": info.document_info.to_payload() if info.document_info else None,
            "pdfAnalysis": info.pdf_analysis.to_payload() if info.pdf_analysis else None,
            "siteAnalysis": info.site_analysis.to_payload() if info.site_analysis else None,
        }
    if fact:
        payload["fact"] = fact
    return payload


async def run_lookup(
    pipeline: ResolutionPipeline,
    geocoder: Geocoder,
    location: Location,
) -> Dict[str, Any]:
    result = await pipeline.run(location)
    fact = await geocoder.place_fact(location)
    return build_lookup_payload(location, result, fact)
