"""
CouncilScout shared API client for the Streamlit frontend.
Retries connection failures and caches lookups briefly, since a single
lookup can take a minute of searching, scraping and model calls.
"""
import os
import time
from typing import Any, Optional

import requests
import streamlit as st

API_BASE = os.getenv("COUNCILSCOUT_API_BASE", "http://localhost:8000/api")
REQUEST_RETRIES = 2
DEFAULT_CACHE_TTL_SEC = 600
LOOKUP_TIMEOUT_SEC = 240


def _cache_get(key: str, ttl: int = DEFAULT_CACHE_TTL_SEC):
    store = st.session_state.setdefault("_api_cache", {})
    item = store.get(key)
    if not item:
        return None
    if time.time() - item["ts"] > ttl:
        store.pop(key, None)
        return None
    return item["value"]


def _cache_set(key: str, value: Any):
    store = st.session_state.setdefault("_api_cache", {})
    store[key] = {"value": value, "ts": time.time()}


def _error_message(response: requests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return response.text[:200]


def api(method: str, path: str, json: Optional[dict] = None, params: Optional[dict] = None,
        timeout: int = LOOKUP_TIMEOUT_SEC) -> Any:
    """Universal API call: returns the JSON body, or None after showing the error."""
    method = method.upper()
    url = f"{API_BASE}{path}"

    try:
        cache_key = f"{method}|{url}|{params}"
        if method == "GET":
            cached = _cache_get(cache_key)
            if cached is not None:
                return cached

        response = None
        for attempt in range(REQUEST_RETRIES + 1):
            try:
                if method == "GET":
                    response = requests.get(url, params=params, timeout=timeout)
                elif method == "POST":
                    response = requests.post(url, json=json, timeout=timeout)
                else:
                    raise ValueError(f"Unsupported method: {method}")
                break
            except requests.exceptions.ConnectionError:
                if attempt >= REQUEST_RETRIES:
                    raise
                time.sleep(0.25 * (attempt + 1))

        if response is None or not response.ok:
            status = response.status_code if response is not None else "N/A"
            msg = _error_message(response) if response is not None else "No response"
            st.error(f"{msg} ({status})")
            return None

        data = response.json()
        if method == "GET":
            _cache_set(cache_key, data)
        return data

    except requests.exceptions.ConnectionError:
        st.error(f"Cannot connect to the CouncilScout backend at {API_BASE}.")
        return None
    except requests.exceptions.Timeout:
        st.error("The request timed out. Council websites can be slow; please try again.")
        return None
    except Exception as e:
        st.error(f"API error: {e}")
        return None


def lookup(city: str = "", state: str = "", zip_code: str = "") -> Any:
    params = {"zip": zip_code} if zip_code else {"city": city, "state": state}
    return api("GET", "/lookup", params=params)


def scrape_agenda(url: str) -> Any:
    return api("POST", "/scrape-agenda", json={"url": url}, timeout=120)


def test_search() -> Any:
    return api("GET", "/test-search", timeout=30)
