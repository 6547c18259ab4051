# ui/api.py
from __future__ import annotations

import asyncio
import logging
from typing import Optional

import requests

import config as cfg
from backend.errors import UpstreamServiceError

# Logger for UI-side HTTP calls (printed server-side)
log = logging.getLogger("gemchat.ui.api")


def server_url() -> str:
    """Base URL of the FastAPI app the Gradio front-end talks to."""
    return cfg.settings.api_base_url


def _timeout(timeout: Optional[float]) -> float:
    return cfg.settings.http_timeout_sec if timeout is None else timeout


def _error_from(r: requests.Response) -> str:
    try:
        data = r.json()
    except ValueError:
        return f"HTTP error! status: {r.status_code}"
    if isinstance(data, dict) and data.get("error"):
        return str(data["error"])
    return f"HTTP error! status: {r.status_code}"


# ---------------- HTTP helpers ----------------
def post_generate(prompt: str, timeout: Optional[float] = None) -> str:
    """
    POST /api/generate with a single user message; returns the reply text.
    Raises UpstreamServiceError on network errors, non-2xx or an empty body.
    """
    payload = {"messages": [{"role": "user", "content": prompt}]}
    try:
        r = requests.post(f"{server_url()}/api/generate", json=payload, timeout=_timeout(timeout))
    except requests.RequestException as e:
        raise UpstreamServiceError("Failed to get response", details=str(e)) from e
    if not r.ok:
        raise UpstreamServiceError("Failed to get response", details=_error_from(r))
    try:
        data = r.json()
    except ValueError as e:
        raise UpstreamServiceError("Failed to get response", details="invalid JSON") from e
    text = str(data.get("response") or "") if isinstance(data, dict) else ""
    if not text.strip():
        raise UpstreamServiceError("Failed to get response", details="empty response body")
    return text


def post_transcribe(audio: bytes, mime_type: str, timeout: Optional[float] = None) -> str:
    """POST /api/transcribe as multipart (`audio` field); returns the transcript."""
    ext = "webm" if "webm" in mime_type else "wav"
    files = {"audio": (f"recording.{ext}", audio, mime_type)}
    try:
        r = requests.post(f"{server_url()}/api/transcribe", files=files, timeout=_timeout(timeout))
        data = r.json()
    except requests.RequestException as e:
        raise UpstreamServiceError("Transcription failed", details=str(e)) from e
    except ValueError as e:
        raise UpstreamServiceError("Transcription failed", details=f"HTTP error! status: {r.status_code}") from e
    if not isinstance(data, dict):
        data = {}

    if not r.ok:
        raise UpstreamServiceError(str(data.get("error") or f"HTTP error! status: {r.status_code}"))
    if data.get("success") and data.get("result"):
        return str(data["result"])
    raise UpstreamServiceError(str(data.get("error") or "Transcription failed"))


# ---------------- async adapters for the voice/chat core ----------------
async def generate_text(prompt: str) -> str:
    return await asyncio.to_thread(post_generate, prompt)


async def transcribe(audio: bytes, mime_type: str) -> str:
    log.debug("Uploading %d bytes (%s) for transcription", len(audio), mime_type)
    return await asyncio.to_thread(post_transcribe, audio, mime_type)
