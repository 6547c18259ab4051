# backend/asr/deepgram.py
from __future__ import annotations

import logging
from typing import Any, Optional

import requests

import config as cfg
from backend.errors import ServiceUnavailableError, UpstreamServiceError

log = logging.getLogger("gemchat.asr")


def extract_transcript(payload: Any) -> str:
    """results.channels[0].alternatives[0].transcript, or "" when any level is missing."""
    try:
        return str(payload["results"]["channels"][0]["alternatives"][0]["transcript"] or "")
    except (KeyError, IndexError, TypeError):
        return ""


class DeepgramTranscriber:
    """Pre-recorded transcription through Deepgram's REST endpoint."""

    def __init__(
        self,
        api_key: str,
        *,
        url: str,
        model: str,
        language: str,
        timeout: float = 60.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._api_key = api_key
        self.url = url
        self.model = model
        self.language = language
        self.timeout = timeout
        self._http = session or requests.Session()

    @classmethod
    def from_settings(cls, settings: Optional[cfg.Settings] = None) -> "DeepgramTranscriber":
        s = settings or cfg.settings
        if not s.deepgram_api_key:
            raise ServiceUnavailableError("DEEPGRAM_API_KEY is not defined")
        return cls(
            s.deepgram_api_key,
            url=s.deepgram_url,
            model=s.deepgram_model,
            language=s.deepgram_language,
            timeout=s.http_timeout_sec,
        )

    def transcribe(self, audio: bytes, mime_type: str) -> str:
        params = {
            "model": self.model,
            "language": self.language,
            "smart_format": "true",
            "punctuate": "true",
        }
        headers = {
            "Authorization": f"Token {self._api_key}",
            "Content-Type": mime_type or "application/octet-stream",
        }
        try:
            r = self._http.post(self.url, params=params, headers=headers, data=audio, timeout=self.timeout)
            r.raise_for_status()
            payload = r.json()
        except requests.RequestException as e:
            log.error("Deepgram request failed: %s", e)
            raise UpstreamServiceError("Transcription failed", details=str(e)) from e
        except ValueError as e:
            raise UpstreamServiceError("Transcription failed", details="invalid JSON from Deepgram") from e

        transcript = extract_transcript(payload).strip()
        if not transcript:
            raise UpstreamServiceError("Transcription failed", details="No transcription result")
        return transcript
