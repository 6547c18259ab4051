# backend/api/schemas.py
from __future__ import annotations
from typing import List

from pydantic import BaseModel, ConfigDict

from memory.models import Message


class _StrictModel(BaseModel):
    model_config = ConfigDict(extra="forbid")


class GenerateRequest(BaseModel):
    # extra keys from older clients are tolerated
    model_config = ConfigDict(extra="ignore")

    messages: List[Message]


class GenerateResponse(_StrictModel):
    response: str
    success: bool = True


class TranscribeResponse(_StrictModel):
    result: str
    success: bool = True


class ErrorResponse(_StrictModel):
    error: str
    details: str | None = None
    success: bool = False


class HealthResponse(_StrictModel):
    status: str
    generation: bool
    transcription: bool
