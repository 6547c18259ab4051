# ui/handlers.py
from __future__ import annotations

from typing import List

import gradio as gr

from ui.controller import ChatController
from ui.poller import Poller


def refresh_outputs(components: dict) -> List[gr.components.Component]:
    """Output order of Poller.tick()."""
    return [
        components["status_banner"],
        components["chat_history"],
        components["chat_title"],
        components["conv_list"],
        components["draft"],
        components["mic_btn"],
        components["send_btn"],
        components["transcript_hint"],
        components["notice"],
    ]


# ---------- Chat input bindings ----------

def bind_chat_actions(components: dict, controller: ChatController, poller: Poller) -> None:
    outputs = refresh_outputs(components)

    async def _send(text: str | None):
        await controller.submit(text)

    async def _toggle_mic():
        await controller.toggle_mic()

    # Typed text goes straight into the flow so an auto-submit sees it too
    components["draft"].input(
        fn=controller.set_draft,
        inputs=[components["draft"]],
        queue=False,
        show_progress=False,
    )

    for trigger in (components["send_btn"].click, components["draft"].submit):
        trigger(
            fn=_send,
            inputs=[components["draft"]],
            show_progress=False,
            concurrency_limit=1,
        ).then(fn=poller.tick, outputs=outputs, show_progress=False)

    components["mic_btn"].click(
        fn=_toggle_mic,
        show_progress=False,
        concurrency_limit=1,
    ).then(fn=poller.tick, outputs=outputs, show_progress=False)


# ---------- Conversation list bindings ----------

def bind_conversation_actions(components: dict, controller: ChatController, poller: Poller) -> None:
    outputs = refresh_outputs(components)
    menu = [components["conv_menu_open_state"], components["conv_menu_group"]]

    def _on_select_conversation(value):
        controller.select(value)

    def _on_new_conversation():
        controller.new_chat()

    def _on_rename_conversation(title):
        controller.rename(controller.store.active_id, title)
        return ""

    def _on_delete_conversation():
        controller.delete(controller.store.active_id)

    # 3-dots menu visibility toggle
    def _toggle_conv_menu(open_state: bool | None):
        new_open = not bool(open_state)
        return new_open, gr.update(visible=new_open)

    def _close_conv_menu():
        return False, gr.update(visible=False)

    # .input fires on user clicks only, not when the poller rewrites the choices
    components["conv_list"].input(
        fn=_on_select_conversation,
        inputs=[components["conv_list"]],
        show_progress=False,
    ).then(fn=poller.tick, outputs=outputs, show_progress=False)

    components["new_conv_btn"].click(
        fn=_on_new_conversation,
        show_progress=False,
    ).then(fn=poller.tick, outputs=outputs, show_progress=False)

    components["conv_menu_btn"].click(
        fn=_toggle_conv_menu,
        inputs=[components["conv_menu_open_state"]],
        outputs=menu,
        show_progress=False,
    )
    components["conv_menu_close_btn"].click(fn=_close_conv_menu, outputs=menu, show_progress=False)

    # Rename current conversation, then close the menu
    components["rename_conv_btn"].click(
        fn=_on_rename_conversation,
        inputs=[components["rename_conv_title"]],
        outputs=[components["rename_conv_title"]],
    ).then(
        fn=_close_conv_menu, outputs=menu, show_progress=False,
    ).then(fn=poller.tick, outputs=outputs, show_progress=False)

    # Delete current conversation, then close the menu
    components["delete_conv_btn"].click(
        fn=_on_delete_conversation,
    ).then(
        fn=_close_conv_menu, outputs=menu, show_progress=False,
    ).then(fn=poller.tick, outputs=outputs, show_progress=False)
