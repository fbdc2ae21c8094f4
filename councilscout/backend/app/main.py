"""FastAPI main application."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.agents.fetch_agent import ContentFetcher
from app.agents.search_agent import SearchProvider
from app.api import agenda, diagnostics, lookup
from app.config import get_settings
from app.exceptions import CouncilScoutError
from app.services.geocoding import Geocoder
from app.services.inference import InferenceClient

settings = get_settings()
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger(__name__)

VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    client = httpx.AsyncClient()
    app.state.http_client = client
    app.state.fetcher = ContentFetcher(client, settings)
    app.state.inference = InferenceClient(settings)
    app.state.search = SearchProvider(client, settings)
    app.state.geocoder = Geocoder(client, settings)
    logger.info(
        "[API] Started (search configured=%s, inference configured=%s, browser render=%s)",
        settings.search_configured,
        settings.inference_configured,
        settings.enable_browser_render,
    )
    try:
        yield
    finally:
        await app.state.fetcher.aclose()
        await app.state.inference.aclose()
        await client.aclose()
        logger.info("[API] Shut down")


app = FastAPI(
    title="CouncilScout API",
    description="City council meeting information finder",
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin.strip() for origin in settings.cors_origins.split(",") if origin.strip()],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(lookup.router, prefix="/api", tags=["Lookup"])
app.include_router(agenda.router, prefix="/api", tags=["Agenda"])
app.include_router(diagnostics.router, prefix="/api", tags=["Diagnostics"])


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"success": False, "error": exc.detail})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    return JSONResponse(status_code=400, content={"success": False, "error": message})


@app.exception_handler(CouncilScoutError)
async def council_error_handler(request: Request, exc: CouncilScoutError):
    logger.error("[API] %s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content={"success": False, "error": str(exc)})


@app.get("/health")
def health():
    return {"status": "ok", "service": "CouncilScout API", "version": VERSION}


@app.get("/ready")
def ready():
    return {
        "status": "ready",
        "search": "configured" if settings.search_configured else "missing credentials",
        "inference": "configured" if settings.inference_configured else "missing credentials",
        "browserRender": settings.enable_browser_render,
    }


@app.get("/api/health")
def api_health():
    return health()
