"""Application settings loaded from environment or .env."""
from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Search
    google_search_api_key: str = ""
    google_cx_id: str = ""
    search_results_per_query: int = 3

    # LLM
    openai_api_key: str = ""
    openai_model: str = "gpt-4o"
    azure_openai_endpoint: str = ""
    azure_openai_key: str = ""
    azure_openai_deployment: str = "gpt-4.1"
    azure_openai_api_version: str = "2024-12-01-preview"

    # Timeouts (seconds)
    search_timeout_seconds: float = 10.0
    fetch_timeout_seconds: float = 15.0
    render_timeout_seconds: float = 30.0
    inference_timeout_seconds: float = 60.0

    # Scraping
    enable_browser_render: bool = True
    render_pool_size: int = 2
    max_concurrent_fetches: int = 3
    min_static_text_chars: int = 200
    max_pdf_assessments: int = 5
    follow_agenda_links: int = 2

    # Collaborator endpoints
    geocoder_base_url: str = "https://api.zippopotam.us/us"
    wiki_summary_base_url: str = "https://en.wikipedia.org/api/rest_v1/page/summary"

    # App
    log_level: str = "INFO"
    cors_origins: str = "*"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    @property
    def search_configured(self) -> bool:
        return bool(self.google_search_api_key and self.google_cx_id)

    @property
    def inference_configured(self) -> bool:
        return bool(self.openai_api_key or (self.azure_openai_endpoint and self.azure_openai_key))


@lru_cache
def get_settings() -> Settings:
    return Settings()
