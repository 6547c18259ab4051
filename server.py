# server.py
from __future__ import annotations

import logging
import os
import sys
import threading
import webbrowser

import gradio as gr
import uvicorn
from fastapi import FastAPI
from fastapi.responses import RedirectResponse

import config as cfg
from backend.api.app import create_app as create_api
from backend.util.logging_setup import init_logging
from ui.app import create_app as create_ui
from ui.controller import build_controller

log = logging.getLogger("gemchat")


def _ui_path() -> str:
    return cfg.settings.gradio_mount_path.rstrip("/") or "/"


def _mount_ui(app: FastAPI, blocks: gr.Blocks, path: str) -> None:
    gr.mount_gradio_app(app=app, blocks=blocks, path=path)
    if path == "/":
        return

    @app.get("/", include_in_schema=False)
    def _to_ui():
        return RedirectResponse(url=path, status_code=307)


def build_app_with_ui() -> FastAPI:
    """API routes and the chat page in one ASGI app; one controller per process."""
    app = create_api()
    controller = build_controller()
    app.state.shutdown_hooks.append(controller.close)
    _mount_ui(app, create_ui(controller), _ui_path())
    return app


def _browser_url(host: str, port: int, path: str) -> str:
    # a wildcard bind is not something a browser can connect to
    if host in ("0.0.0.0", "::", ""):
        host = "127.0.0.1"
    if not path.startswith("/"):
        path = "/" + path
    return f"http://{host}:{port}{path}"


def _open_browser(url: str) -> None:
    try:
        webbrowser.open(url, new=2)
    except webbrowser.Error as e:
        log.debug("Browser not opened: %s", e)


def main() -> int:
    s = cfg.settings
    init_logging(s.log_level)
    # read by gradio when the Blocks are created
    os.environ["GRADIO_ANALYTICS_ENABLED"] = str(bool(s.gradio_analytics_enabled)).lower()

    app = build_app_with_ui()
    url = _browser_url(s.server_host, int(s.server_port), _ui_path())

    if s.gradio_auto_open:
        opener = threading.Timer(max(0.0, s.gradio_open_delay_sec), _open_browser, args=(url,))
        opener.daemon = True
        opener.start()

    server = uvicorn.Server(
        uvicorn.Config(
            app=app,
            host=s.server_host,
            port=int(s.server_port),
            log_level=s.log_level,
            access_log=s.uvicorn_access_log,
            timeout_graceful_shutdown=3,
        )
    )
    log.info("💬 Gemchat on %s", url)
    try:
        server.run()
    except KeyboardInterrupt:
        pass
    return 0


if __name__ == "__main__":
    sys.exit(main())
