# ui/app.py
from __future__ import annotations

from typing import Optional

import gradio as gr

import config as cfg
from ui.components import build_header, build_layout, init_state
from ui.controller import ChatController, build_controller
from ui.handlers import bind_chat_actions, bind_conversation_actions, refresh_outputs
from ui.poller import Poller
from ui.styles import CSS


def create_app(controller: Optional[ChatController] = None):
    controller = controller or build_controller()
    poller = Poller(controller)

    with gr.Blocks(css=CSS, title="Gemchat") as demo:
        components: dict[str, gr.Component] = {}
        init_state(components)

        build_header()
        build_layout(components)

        bind_chat_actions(components, controller, poller)
        bind_conversation_actions(components, controller, poller)

        outputs = refresh_outputs(components)

        # Page load: forget what the previous tab saw and render everything
        def _init_page():
            poller.invalidate()
            return poller.tick()

        demo.load(fn=_init_page, outputs=outputs, show_progress=False)

        # Single polling loop: picks up replies, transcripts and voice state changes
        timer = gr.Timer(value=cfg.settings.ui_poll_interval_sec, active=True)
        timer.tick(
            fn=poller.tick,
            outputs=outputs,
            show_progress=False,
            concurrency_limit=1,
        )

        # Closing or reloading the tab must not leave the mic or the speaker running
        demo.unload(controller.page_unloaded)

        demo.queue()

    return demo


if __name__ == "__main__":
    demo = create_app()
    demo.launch()
