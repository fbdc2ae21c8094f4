"""Page fetching: fast static GET first, pooled headless-browser rendering as fallback."""
from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, Awaitable, Callable, List, Optional

import httpx

from app.config import Settings, get_settings
from app.exceptions import FetchError
from app.models import PageContent
from app.utils.http_client import USER_AGENT, is_blocked_response, request_with_retries
from app.utils.text import extract_page

logger = logging.getLogger(__name__)

CrawlerFactory = Callable[[], Awaitable[Any]]


async def _start_crawler() -> Any:
    from crawl4ai import AsyncWebCrawler, BrowserConfig

    crawler = AsyncWebCrawler(config=BrowserConfig(headless=True, verbose=False, user_agent=USER_AGENT))
    await crawler.start()
    return crawler


def _render_config(timeout: float) -> Any:
    from crawl4ai import CacheMode, CrawlerRunConfig

    return CrawlerRunConfig(
        cache_mode=CacheMode.BYPASS,
        page_timeout=int(timeout * 1000),
        wait_until="networkidle",
    )


class RenderPool:
    """Bounded pool of started browser crawlers.

    At most ``size`` crawlers exist at once. A session leaves ``session()``
    either back in the idle list (clean exit) or closed (exception or pool
    shut down).
    """

    def __init__(self, size: int, factory: Optional[CrawlerFactory] = None):
        self.size = max(1, size)
        self._factory = factory or _start_crawler
        self._slots = asyncio.Semaphore(self.size)
        self._idle: List[Any] = []
        self._closed = False

    @property
    def idle_count(self) -> int:
        return len(self._idle)

    @asynccontextmanager
    async def session(self):
        crawler = await self._acquire()
        try:
            yield crawler
        except BaseException:
            await self._discard(crawler)
            raise
        else:
            if self._closed:
                await self._discard(crawler)
            else:
                self._idle.append(crawler)
                self._slots.release()

    async def _acquire(self) -> Any:
        if self._closed:
            raise RuntimeError("render pool is closed")
        await self._slots.acquire()
        if self._idle:
            return self._idle.pop()
        try:
            return await self._factory()
        except BaseException:
            self._slots.release()
            raise

    async def _discard(self, crawler: Any) -> None:
        self._slots.release()
        await _close_quietly(crawler)

    async def close(self) -> None:
        self._closed = True
        idle, self._idle = self._idle, []
        for crawler in idle:
            await _close_quietly(crawler)


async def _close_quietly(crawler: Any) -> None:
    try:
        await crawler.close()
    except Exception as exc:
        logger.warning("[FETCH] Browser session close failed: %s", exc)


class ContentFetcher:
    """Long-lived page fetcher; owns the render pool for the whole process."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        settings: Optional[Settings] = None,
        render_pool: Optional[RenderPool] = None,
    ):
        self.client = client
        self.settings = settings or get_settings()
        self.render_pool = render_pool or RenderPool(self.settings.render_pool_size)

    async def fetch(self, url: str) -> PageContent:
        """Fetch one page. Never raises; failures come back as ``success=False``."""
        try:
            page = await self._fetch_static(url)
            logger.info("[FETCH] static %s (%s chars)", url, len(page.content))
            return page
        except Exception as exc:
            static_error = str(exc) or type(exc).__name__
            logger.info("[FETCH] static fetch of %s unusable: %s", url, static_error)

        if not self.settings.enable_browser_render:
            return PageContent(url=url, success=False, error=static_error)

        try:
            page = await self._fetch_rendered(url)
            logger.info("[FETCH] rendered %s (%s chars)", url, len(page.content))
            return page
        except Exception as exc:
            render_error = str(exc) or type(exc).__name__
            logger.warning("[FETCH] %s failed: static=%s rendered=%s", url, static_error, render_error)
            return PageContent(url=url, success=False, error=f"static: {static_error}; rendered: {render_error}")

    async def fetch_many(self, urls: List[str], max_concurrent: Optional[int] = None) -> List[PageContent]:
        """Fetch in windows of ``max_concurrent``; each window completes before the next starts."""
        window = max(1, max_concurrent or self.settings.max_concurrent_fetches)
        results: List[PageContent] = []
        for start in range(0, len(urls), window):
            batch = urls[start:start + window]
            outcomes = await asyncio.gather(*(self.fetch(url) for url in batch), return_exceptions=True)
            for url, outcome in zip(batch, outcomes):
                if isinstance(outcome, BaseException):
                    outcome = PageContent(url=url, success=False, error=str(outcome) or type(outcome).__name__)
                results.append(outcome)
        return results

    async def _fetch_static(self, url: str) -> PageContent:
        response = await request_with_retries(
            self.client,
            "GET",
            url,
            retries=1,
            timeout=self.settings.fetch_timeout_seconds,
            headers={"User-Agent": USER_AGENT},
        )
        if response.status_code >= 400:
            raise FetchError(url, f"HTTP {response.status_code}")
        if is_blocked_response(response):
            raise FetchError(url, "blocked by bot protection")
        content_type = response.headers.get("content-type", "").lower()
        if content_type and "html" not in content_type and "text" not in content_type:
            raise FetchError(url, f"unsupported content type {content_type}")

        final_url = str(response.url)
        text, links = extract_page(response.text, final_url)
        if len(text) < self.settings.min_static_text_chars:
            raise FetchError(url, f"only {len(text)} chars of static text")
        return PageContent(url=url, content=text, success=True, method="static", links=links, final_url=final_url)

    async def _fetch_rendered(self, url: str) -> PageContent:
        timeout = self.settings.render_timeout_seconds
        config = _render_config(timeout)
        async with self.render_pool.session() as crawler:
            result = await asyncio.wait_for(crawler.arun(url=url, config=config), timeout=timeout + 5)
        if not getattr(result, "success", False):
            raise FetchError(url, getattr(result, "error_message", None) or "render failed")
        html = getattr(result, "html", "") or getattr(result, "cleaned_html", "") or ""
        final_url = getattr(result, "redirected_url", None) or url
        text, links = extract_page(html, final_url)
        if not text:
            raise FetchError(url, "rendered page has no text")
        return PageContent(url=url, content=text, success=True, method="rendered", links=links, final_url=final_url)

    async def aclose(self) -> None:
        await self.render_pool.close()
