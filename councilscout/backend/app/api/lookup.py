"""API router for council-meeting lookups."""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.dependencies import get_geocoder, get_pipeline
from app.services.geocoding import Geocoder
from app.services.pipeline_service import resolve_location, run_lookup
from app.workflow.graph import ResolutionPipeline

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/lookup")
async def lookup(
    city: Optional[str] = None,
    state: Optional[str] = None,
    zip_code: Optional[str] = Query(default=None, alias="zip"),
    geocoder: Geocoder = Depends(get_geocoder),
    pipeline: ResolutionPipeline = Depends(get_pipeline),
):
    location = await resolve_location(geocoder, city=city, state=state, zip_code=zip_code)
    logger.info("[API] Lookup for %s", location.label())
    return await run_lookup(pipeline, geocoder, location)
