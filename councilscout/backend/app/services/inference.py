"""Chat-completion client for OpenAI or Azure OpenAI."""
from __future__ import annotations

import logging
from typing import Optional

from app.config import Settings, get_settings
from app.exceptions import InferenceUnavailable

logger = logging.getLogger(__name__)


class InferenceClient:
    """Sends a system + user prompt and returns the model's text reply.

    Azure OpenAI is preferred when its endpoint and key are configured, the
    public OpenAI API otherwise. With neither configured every call raises
    ``InferenceUnavailable`` so callers fall back to their degraded records.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self._client = None
        self._model = self.settings.openai_model

    def _get_client(self):
        if self._client is not None:
            return self._client
        s = self.settings
        if s.azure_openai_endpoint and s.azure_openai_key:
            from openai import AsyncAzureOpenAI

            self._client = AsyncAzureOpenAI(
                azure_endpoint=s.azure_openai_endpoint,
                api_key=s.azure_openai_key,
                api_version=s.azure_openai_api_version,
                timeout=s.inference_timeout_seconds,
            )
            self._model = s.azure_openai_deployment
        elif s.openai_api_key:
            from openai import AsyncOpenAI

            self._client = AsyncOpenAI(api_key=s.openai_api_key, timeout=s.inference_timeout_seconds)
            self._model = s.openai_model
        else:
            raise InferenceUnavailable("No OpenAI or Azure OpenAI credentials configured")
        return self._client

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        temperature: float = 0.1,
        max_tokens: int = 1500,
        json_mode: bool = True,
    ) -> str:
        client = self._get_client()
        kwargs = {}
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}
        response = await client.chat.completions.create(
            model=self._model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            temperature=temperature,
            max_tokens=max_tokens,
            **kwargs,
        )
        return response.choices[0].message.content or ""

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None
