# backend/api/deps.py
from __future__ import annotations

from fastapi import Request

from backend.core.ports import SpeechTranscriber, TextGenerator
from backend.errors import ServiceUnavailableError


def get_text_generator(request: Request) -> TextGenerator:
    gen = getattr(request.app.state, "generator", None)
    if gen is None:
        err = getattr(request.app.state, "generator_error", None)
        raise ServiceUnavailableError("generation service unavailable", details=str(err) if err else None)
    return gen


def get_transcriber(request: Request) -> SpeechTranscriber:
    asr = getattr(request.app.state, "transcriber", None)
    if asr is None:
        err = getattr(request.app.state, "transcriber_error", None)
        raise ServiceUnavailableError("transcription service unavailable", details=str(err) if err else None)
    return asr
