# backend/llm/gemini.py
from __future__ import annotations

import logging
from typing import Optional

from google import genai

import config as cfg
from backend.errors import ServiceUnavailableError, UpstreamServiceError

log = logging.getLogger("gemchat.llm")


class GeminiTextGenerator:
    """GenerateText backed by the Gemini API. One prompt in, one text out; no history."""

    def __init__(self, client: "genai.Client", model: str) -> None:
        self._client = client
        self.model = model

    @classmethod
    def from_settings(cls, settings: Optional[cfg.Settings] = None) -> "GeminiTextGenerator":
        s = settings or cfg.settings
        if not s.gemini_api_key:
            raise ServiceUnavailableError("GEMINI_API_KEY is not defined")
        try:
            client = genai.Client(api_key=s.gemini_api_key)
        except Exception as e:
            raise ServiceUnavailableError("Gemini client init failed", details=str(e)) from e
        return cls(client, s.gemini_model)

    def generate(self, prompt: str) -> str:
        try:
            response = self._client.models.generate_content(model=self.model, contents=prompt)
        except Exception as e:
            log.exception("Gemini request failed: %s", e)
            raise UpstreamServiceError("Failed to generate response", details=str(e)) from e

        text = (getattr(response, "text", None) or "").strip()
        if not text:
            raise UpstreamServiceError("Failed to generate response", details="Empty response from Gemini API")
        log.debug("Gemini replied with %d chars", len(text))
        return text
