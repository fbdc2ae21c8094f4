"""URL helpers shared by the fetcher and the document discoverer."""
from __future__ import annotations

from typing import Iterable, List
from urllib.parse import parse_qsl, unquote, urlencode, urljoin, urlparse, urlunparse

AGENDA_KEYWORDS = (
    "agenda",
    "meeting",
    "council",
    "minutes",
    "schedule",
    "calendar",
    "session",
    "hearing",
    "municipal",
)


def make_absolute_url(url: str, base_url: str) -> str:
    """Resolve ``url`` against ``base_url``; anything unparseable is returned as-is."""
    if not isinstance(url, str):
        return url
    value = url.strip()
    if value.lower().startswith(("http://", "https://")):
        return value
    try:
        base = urlparse(base_url)
        if base.scheme not in {"http", "https"} or not base.netloc:
            return url
        resolved = urljoin(base_url, value)
        parsed = urlparse(resolved)
        if parsed.scheme not in {"http", "https"} or not parsed.netloc:
            return url
        return resolved
    except ValueError:
        return url


def extract_filename(url: str) -> str:
    try:
        path = urlparse(url).path
    except ValueError:
        path = url or ""
    return unquote(path.rstrip("/").split("/")[-1]) if path.strip("/") else "unknown.pdf"


def normalize_url(url: str) -> str:
    if not isinstance(url, str):
        return ""
    value = url.strip()
    if not value.lower().startswith(("http://", "https://")):
        return ""
    try:
        parsed = urlparse(value)
    except ValueError:
        return ""
    filtered_query = []
    for key, val in parse_qsl(parsed.query, keep_blank_values=True):
        lk = key.lower()
        if lk.startswith("utm_") or lk in {"session", "sid", "phpsessid"}:
            continue
        filtered_query.append((key, val))
    query = urlencode(filtered_query, doseq=True)
    return urlunparse(parsed._replace(query=query, fragment=""))


def is_http_url(url: str) -> bool:
    try:
        parsed = urlparse((url or "").strip())
    except ValueError:
        return False
    return parsed.scheme in {"http", "https"} and bool(parsed.netloc)


def is_probable_pdf_url(url: str) -> bool:
    try:
        path = urlparse(url or "").path.lower()
    except ValueError:
        return False
    return path.endswith(".pdf") or ".pdf" in (url or "").lower()


def is_likely_agenda_url(url: str) -> bool:
    lower = (url or "").lower()
    return any(keyword in lower for keyword in AGENDA_KEYWORDS)


def dedupe(urls: Iterable[str]) -> List[str]:
    return list(dict.fromkeys(u for u in urls if u))
