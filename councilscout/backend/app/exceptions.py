"""Exception types raised by collaborators and the resolution pipeline."""
from __future__ import annotations


class CouncilScoutError(Exception):
    """Base class for application errors."""


class LocationNotFound(CouncilScoutError):
    """A ZIP code has no matching place."""


class SearchUnavailable(CouncilScoutError):
    """The search provider is unconfigured or every query failed."""


class InferenceUnavailable(CouncilScoutError):
    """No language-model credentials are configured."""


class FetchError(CouncilScoutError):
    """A page could not be retrieved by any method."""

    def __init__(self, url: str, message: str):
        super().__init__(f"Failed to scrape {url}: {message}")
        self.url = url


class ResolutionError(CouncilScoutError):
    """Every resolution path failed; surfaced to the caller as a 500."""
