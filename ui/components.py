# ui/components.py
from __future__ import annotations
import gradio as gr


def init_state(components: dict) -> None:
    # State to control visibility of the per-conversation options menu (⋯)
    components["conv_menu_open_state"] = gr.State(False)


def build_header() -> None:
    with gr.Row():
        gr.Markdown("<h1 style='margin:0'>Gemchat</h1>")


def build_sidebar(components: dict) -> None:
    with gr.Column(scale=1, elem_id="sidebar_col"):
        components["new_conv_btn"] = gr.Button("➕ New Chat", elem_id="new_chat_btn")

        with gr.Group(elem_id="conv_list_wrapper"):
            # value is the conversation id; the active one is styled via CSS
            components["conv_list"] = gr.Radio(
                label="Conversations",
                choices=[],
                value=None,
                interactive=True,
                show_label=False,
                elem_classes=["conversation-list"],
            )
            # Always operates on the currently active chat
            components["conv_menu_btn"] = gr.Button("⋯", scale=0, elem_id="conv_menu_button")

        with gr.Group(visible=False, elem_id="conv_menu_overlay") as conv_menu_group:
            with gr.Column(elem_classes="conv-menu-card"):
                gr.Markdown("### Conversation settings", elem_classes="conv-menu-title")
                components["rename_conv_title"] = gr.Textbox(
                    label="Rename conversation",
                    placeholder="New title",
                )
                with gr.Row():
                    components["rename_conv_btn"] = gr.Button("Rename")
                    components["delete_conv_btn"] = gr.Button("Delete", elem_classes="clear-btn")
                components["conv_menu_close_btn"] = gr.Button("Close")
        components["conv_menu_group"] = conv_menu_group


def build_chat_panel(components: dict) -> None:
    with gr.Column(scale=3, elem_id="chat_col"):
        with gr.Row(elem_classes="chat-header"):
            components["chat_title"] = gr.Markdown("### New Chat", elem_id="chat_title")
            components["status_banner"] = gr.HTML("&nbsp;", elem_id="status_banner")

        components["chat_history"] = gr.Chatbot(
            value=[],
            type="messages",
            label="",
            show_label=False,
            elem_id="history_box",
            elem_classes=["conversation-history"],
            placeholder="Start a conversation by typing or speaking.",
        )

        components["notice"] = gr.Markdown("&nbsp;", elem_classes="status-text", elem_id="notice_line")

        with gr.Row(elem_classes="input-row"):
            components["draft"] = gr.Textbox(
                value="",
                placeholder="Type your message...",
                show_label=False,
                lines=1,
                max_lines=6,
                scale=8,
                autofocus=True,
                elem_id="draft_box",
            )
            components["mic_btn"] = gr.Button("🎤", scale=0, min_width=72, elem_id="mic_btn")
            components["send_btn"] = gr.Button("Send", variant="primary", scale=0, min_width=88)

        # Recent transcript, shown under the input
        components["transcript_hint"] = gr.Markdown("&nbsp;", elem_classes="transcript-hint")


def build_layout(components: dict) -> None:
    with gr.Row(elem_classes="chat-grid"):
        build_sidebar(components)
        build_chat_panel(components)
