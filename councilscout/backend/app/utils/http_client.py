"""HTTP reliability helpers for search, geocoding and page fetching."""
from __future__ import annotations

import asyncio
from typing import Any, Optional

import httpx

RETRYABLE_STATUSES = {408, 429, 500, 502, 503, 504}
BLOCK_STATUS_CODES = {401, 403, 429, 503}
# Challenge interstitials, matched anywhere in the scanned prefix
BLOCK_PATTERNS = (
    "cf-challenge",
    "just a moment...",
    "attention required!",
    "checking your browser",
    "verify you are human",
    "g-recaptcha",
    "h-captcha",
)
BLOCK_SCAN_CHARS = 3000
# Only checked on short bodies
SHORT_BODY_PATTERNS = ("captcha", "access denied", "bot detection")
SHORT_BODY_CHARS = 2000
USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0 Safari/537.36 CouncilScout/1.0"
)


async def request_with_retries(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    retries: int = 2,
    timeout: float = 15.0,
    backoff_seconds: float = 0.5,
    max_backoff_seconds: float = 4.0,
    headers: Optional[dict[str, str]] = None,
    params: Optional[dict[str, Any]] = None,
    follow_redirects: bool = True,
    json: Optional[dict[str, Any]] = None,
) -> httpx.Response:
    last_error: Exception | None = None
    for attempt in range(retries):
        try:
            response = await client.request(
                method,
                url,
                timeout=timeout,
                headers=headers,
                params=params,
                follow_redirects=follow_redirects,
                json=json,
            )
            if response.status_code in RETRYABLE_STATUSES and attempt < retries - 1:
                await _sleep_with_backoff(attempt, backoff_seconds, max_backoff_seconds)
                continue
            return response
        except (httpx.TimeoutException, httpx.NetworkError) as exc:
            last_error = exc
            if attempt >= retries - 1:
                raise
            await _sleep_with_backoff(attempt, backoff_seconds, max_backoff_seconds)

    if last_error:
        raise last_error
    raise RuntimeError("request_with_retries exhausted without response")


def is_blocked_response(response: httpx.Response) -> bool:
    if response.status_code in BLOCK_STATUS_CODES:
        return True
    body = response.text or ""
    text = body[:BLOCK_SCAN_CHARS].lower()
    if any(pattern in text for pattern in BLOCK_PATTERNS):
        return True
    return len(body) < SHORT_BODY_CHARS and any(pattern in text for pattern in SHORT_BODY_PATTERNS)


async def _sleep_with_backoff(attempt: int, base: float, cap: float):
    delay = min(cap, base * (2**attempt))
    if delay > 0:
        await asyncio.sleep(delay)
