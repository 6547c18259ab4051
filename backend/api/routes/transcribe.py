# backend/api/routes/transcribe.py
from __future__ import annotations

import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile

import config as cfg
from backend.api.deps import get_transcriber
from backend.api.schemas import ErrorResponse, TranscribeResponse
from backend.core.ports import SpeechTranscriber
from backend.errors import InputValidationError

log = logging.getLogger("gemchat.routes.transcribe")

router = APIRouter(prefix="/api", tags=["transcription"])


@router.post(
    "/transcribe",
    response_model=TranscribeResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
)
async def transcribe_endpoint(
    audio: Optional[UploadFile] = File(None),
    transcriber: SpeechTranscriber = Depends(get_transcriber),
) -> TranscribeResponse:
    if audio is None:
        raise InputValidationError("Audio file is required")

    ctype = (audio.content_type or "").lower()
    if not (ctype.startswith("audio/") or ctype in {"", "application/octet-stream", "video/webm"}):
        raise InputValidationError(f"unsupported content type: {audio.content_type}")

    max_bytes = cfg.settings.max_upload_mb * 1024 * 1024
    data = await audio.read()
    if len(data) == 0:
        raise InputValidationError("empty upload")
    if len(data) > max_bytes:
        raise InputValidationError(f"file too large (> {cfg.settings.max_upload_mb} MB)")

    log.info("📥 Received audio: %s (%s, %d bytes)", audio.filename, audio.content_type, len(data))

    mime = ctype if ctype and ctype != "application/octet-stream" else "audio/wav"
    text = await asyncio.to_thread(transcriber.transcribe, data, mime)
    log.info("✅ Transcribed. Text length: %d", len(text))
    return TranscribeResponse(result=text)
