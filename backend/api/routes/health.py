# backend/api/routes/health.py
from __future__ import annotations

import logging
from fastapi import APIRouter, Request

from backend.api.schemas import HealthResponse

router = APIRouter(tags=["health"])
log = logging.getLogger("gemchat.routes.health")


@router.get("/healthz", response_model=HealthResponse)
async def healthz(request: Request) -> HealthResponse:
    """
    Lightweight liveness/readiness probe.
    Reports whether each hosted service handle was initialized.
    """
    state = request.app.state
    return HealthResponse(
        status="ok",
        generation=getattr(state, "generator", None) is not None,
        transcription=getattr(state, "transcriber", None) is not None,
    )
