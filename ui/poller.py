# ui/poller.py
from __future__ import annotations

import logging
from typing import Any

import gradio as gr

from ui.actions import (
    chat_title,
    conversation_menu,
    history_messages,
    input_enabled,
    mic_button_state,
    status_badge,
    transcript_hint,
)
from ui.controller import ChatController

log = logging.getLogger("gemchat.ui.poller")


class Poller:
    """
    Mirrors controller state into the page on a gr.Timer.

    Work done outside a click handler (auto-submit after transcription, spoken
    replies, a reply landing while the user does something else) only reaches
    the browser through here. Every output is edge-detected: unchanged values
    go out as gr.update() so the widgets don't flicker.
    """

    def __init__(self, controller: ChatController) -> None:
        self._c = controller
        self._last_version: int | None = None
        self._last_draft_version: int | None = None
        self._last_banner: str | None = None
        self._last_mic: tuple[str, bool] | None = None
        self._last_inputs: bool | None = None
        self._last_hint: str | None = None

    def _changed(self, attr: str, value: Any) -> bool:
        if getattr(self, attr) != value:
            setattr(self, attr, value)
            return True
        return False

    def tick(self):
        """
        Returns (matching outputs wired in app.py):
          status_banner, chat_history, chat_title, conv_list, draft,
          mic_btn, send_btn, transcript_hint, notice
        """
        c = self._c
        try:
            voice = c.voice_state
            loading = c.loading

            banner = status_badge(voice, loading)
            banner_out = banner if self._changed("_last_banner", banner) else gr.update()

            chat_out = title_out = conv_out = gr.update()
            if self._changed("_last_version", c.version):
                conv = c.active
                chat_out = history_messages(conv)
                title_out = chat_title(conv)
                choices, selected = conversation_menu(c.store)
                conv_out = gr.update(choices=choices, value=selected)

            draft_kw: dict[str, Any] = {}
            if self._changed("_last_draft_version", c.draft_version):
                draft_kw["value"] = c.draft

            enabled = input_enabled(c.active is not None, loading)
            send_out = gr.update()
            if self._changed("_last_inputs", enabled):
                send_out = gr.update(interactive=enabled)
                draft_kw["interactive"] = enabled
            draft_out = gr.update(**draft_kw)

            mic = mic_button_state(voice, loading)
            mic_out = gr.update(value=mic[0], interactive=mic[1]) if self._changed("_last_mic", mic) else gr.update()

            last = c.voice.last_transcript if c.voice is not None else ""
            hint = transcript_hint(last)
            hint_out = hint if self._changed("_last_hint", hint) else gr.update()

            notices = c.pop_notices()
            notice_out = "  \n".join(notices) if notices else gr.update()

            return (
                banner_out,   # status_banner
                chat_out,     # chat_history
                title_out,    # chat_title
                conv_out,     # conv_list
                draft_out,    # draft textbox
                mic_out,      # mic button
                send_out,     # send button
                hint_out,     # transcript hint
                notice_out,   # notice line
            )
        except Exception:
            # Never let the timer die; report "no changes" for all outputs.
            log.exception("UI poll failed")
            return tuple(gr.update() for _ in range(9))

    def invalidate(self) -> None:
        """Force a full re-render on the next tick (page load)."""
        self._last_version = None
        self._last_draft_version = None
        self._last_banner = None
        self._last_mic = None
        self._last_inputs = None
        self._last_hint = None
