# backend/api/routes/generate.py
from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, Depends

from backend.api.deps import get_text_generator
from backend.api.schemas import ErrorResponse, GenerateRequest, GenerateResponse
from backend.core.ports import TextGenerator
from backend.errors import InputValidationError

log = logging.getLogger("gemchat.routes.generate")
router = APIRouter(prefix="/api", tags=["generate"])


@router.post(
    "/generate",
    response_model=GenerateResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
)
async def generate_endpoint(
    payload: GenerateRequest,
    generator: TextGenerator = Depends(get_text_generator),
) -> GenerateResponse:
    """
    Stateless generation: only the content of the last message is forwarded.
    Earlier messages are accepted for compatibility and ignored.
    """
    if not payload.messages:
        raise InputValidationError("Invalid or empty messages array")

    prompt = payload.messages[-1].content.strip()
    if not prompt:
        raise InputValidationError("Last message is empty")

    text = await asyncio.to_thread(generator.generate, prompt)
    log.info("💬 Generated %d chars for a %d-char prompt", len(text), len(prompt))
    return GenerateResponse(response=text)
