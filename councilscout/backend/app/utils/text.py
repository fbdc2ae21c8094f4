"""HTML cleaning: visible main-content text and absolute anchor links."""
from __future__ import annotations

import re
from typing import List, Tuple

from bs4 import BeautifulSoup

from app.utils.urls import make_absolute_url, normalize_url

UNWANTED_SELECTORS = "script, style, noscript, nav, header, footer, aside, .navigation, .menu, .sidebar"
CONTENT_SELECTORS = (
    "main",
    '[role="main"]',
    ".content",
    ".main-content",
    "#content",
    "#main",
    "article",
    ".agenda",
    ".meeting",
    ".council-meeting",
    ".meeting-agenda",
)
MIN_SECTION_CHARS = 100

_SPACES = re.compile(r"[ \t\r\f\v]+")
_BLANK_LINES = re.compile(r"\n\s*\n+")


def clean_text(text: str) -> str:
    text = _SPACES.sub(" ", text or "")
    text = _BLANK_LINES.sub("\n", text)
    return text.strip()


def extract_page(html: str, page_url: str) -> Tuple[str, List[str]]:
    """Return ``(visible_text, links)`` for an HTML document.

    Links are harvested before navigation chrome is removed, since council
    sites often keep their agenda portal link in the header menu.
    """
    soup = BeautifulSoup(html or "", "html.parser")
    links = _harvest_links(soup, page_url)

    for element in soup.select(UNWANTED_SELECTORS):
        element.decompose()

    content = ""
    for selector in CONTENT_SELECTORS:
        element = soup.select_one(selector)
        if element is None:
            continue
        section = element.get_text(separator="\n", strip=True)
        if len(section) > MIN_SECTION_CHARS:
            content = section
            break

    if not content:
        body = soup.body or soup
        content = body.get_text(separator="\n", strip=True)

    return clean_text(content), links


def _harvest_links(soup: BeautifulSoup, page_url: str) -> List[str]:
    found: List[str] = []
    for anchor in soup.find_all("a", href=True):
        href = (anchor.get("href") or "").strip()
        if not href or href.startswith(("#", "javascript:", "mailto:", "tel:")):
            continue
        normalized = normalize_url(make_absolute_url(href, page_url))
        if normalized:
            found.append(normalized)
    for embed in soup.find_all(["iframe", "embed", "object"]):
        for attr in ("src", "data"):
            value = (embed.get(attr) or "").strip()
            if value:
                normalized = normalize_url(make_absolute_url(value, page_url))
                if normalized:
                    found.append(normalized)
    return list(dict.fromkeys(found))
