"""FastAPI dependencies: long-lived collaborators from app.state, per-request agents built on them."""
from __future__ import annotations

from fastapi import Depends, Request

from app.agents.document_agent import DocumentDiscoverer
from app.agents.fetch_agent import ContentFetcher
from app.agents.interpret_agent import ResultInterpreter
from app.agents.search_agent import SearchProvider
from app.config import get_settings
from app.services.geocoding import Geocoder
from app.services.inference import InferenceClient
from app.workflow.graph import ResolutionPipeline


def get_fetcher(request: Request) -> ContentFetcher:
    return request.app.state.fetcher


def get_inference(request: Request) -> InferenceClient:
    return request.app.state.inference


def get_search(request: Request) -> SearchProvider:
    return request.app.state.search


def get_geocoder(request: Request) -> Geocoder:
    return request.app.state.geocoder


def get_interpreter(inference: InferenceClient = Depends(get_inference)) -> ResultInterpreter:
    return ResultInterpreter(inference)


def get_pipeline(
    search: SearchProvider = Depends(get_search),
    fetcher: ContentFetcher = Depends(get_fetcher),
    inference: InferenceClient = Depends(get_inference),
    interpreter: ResultInterpreter = Depends(get_interpreter),
) -> ResolutionPipeline:
    return ResolutionPipeline(
        search=search,
        fetcher=fetcher,
        interpreter=interpreter,
        discoverer=DocumentDiscoverer(inference, get_settings()),
        settings=get_settings(),
    )
