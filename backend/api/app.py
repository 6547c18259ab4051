# backend/api/app.py
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import config as cfg
from backend.api.routes.generate import router as generate_router
from backend.api.routes.health import router as health_router
from backend.api.routes.transcribe import router as transcribe_router
from backend.api.schemas import ErrorResponse
from backend.asr.deepgram import DeepgramTranscriber
from backend.core.ports import SpeechTranscriber, TextGenerator
from backend.errors import GemchatError, ServiceUnavailableError
from backend.llm.gemini import GeminiTextGenerator
from backend.middleware.graceful_cancel import GracefulCancelMiddleware

log = logging.getLogger("gemchat")


def _init_services(app: FastAPI) -> None:
    """Build the hosted-service handles; a missing key disables that route, not the app."""
    app.state.generator_error = None
    app.state.transcriber_error = None
    try:
        app.state.generator = GeminiTextGenerator.from_settings()
        log.info("🤖 Generation service ready (model=%s).", app.state.generator.model)
    except ServiceUnavailableError as e:
        app.state.generator = None
        app.state.generator_error = e
        log.warning("🟡 Generation service disabled: %s", e)
    try:
        app.state.transcriber = DeepgramTranscriber.from_settings()
        log.info("🎧 Transcription service ready (model=%s).", app.state.transcriber.model)
    except ServiceUnavailableError as e:
        app.state.transcriber = None
        app.state.transcriber_error = e
        log.warning("🟡 Transcription service disabled: %s", e)


@asynccontextmanager
async def _lifespan(app: FastAPI):
    # Handles injected by create_app() (tests) win over settings-built ones.
    if not getattr(app.state, "services_injected", False):
        _init_services(app)
    yield
    log.info("🛑 API shutting down.")
    # Last registered runs first (UI before the services it calls)
    for hook in reversed(getattr(app.state, "shutdown_hooks", [])):
        try:
            hook()
        except Exception:
            log.exception("Shutdown hook failed")


def _error_json(exc: GemchatError) -> JSONResponse:
    body = ErrorResponse(error=str(exc), details=exc.details)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


async def _gemchat_error_handler(request: Request, exc: GemchatError) -> JSONResponse:
    if exc.status_code >= 500:
        log.error("%s %s failed: %s (%s)", request.method, request.url.path, exc, exc.details)
    return _error_json(exc)


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    body = ErrorResponse(error="Invalid request body", details=str(exc.errors()))
    return JSONResponse(status_code=400, content=body.model_dump())


def create_app(
    *,
    generator: Optional[TextGenerator] = None,
    transcriber: Optional[SpeechTranscriber] = None,
) -> FastAPI:
    s = cfg.settings
    app = FastAPI(title="gemchat", lifespan=_lifespan)
    app.state.shutdown_hooks = []

    if generator is not None or transcriber is not None:
        app.state.services_injected = True
        app.state.generator = generator
        app.state.transcriber = transcriber

    # Swallow benign cancellations while shutting down (prevents noisy stack traces)
    app.add_middleware(GracefulCancelMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=s.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(GemchatError, _gemchat_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)

    app.include_router(health_router)
    app.include_router(generate_router)
    app.include_router(transcribe_router)

    return app
