# backend/middleware/graceful_cancel.py
from __future__ import annotations

import asyncio
import logging
from starlette.types import ASGIApp, Scope, Receive, Send

log = logging.getLogger("gemchat.middleware")


class GracefulCancelMiddleware:
    """
    Drops asyncio.CancelledError raised while a request is torn down (server
    shutdown, browser tab closed mid-transcription). Everything else propagates.
    """
    def __init__(self, app: ASGIApp) -> None:
        self.app = app
        self.cancelled = 0

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        try:
            await self.app(scope, receive, send)
        except asyncio.CancelledError:
            self.cancelled += 1
            log.debug("Request cancelled: %s %s", scope.get("type"), scope.get("path", ""))
            return
