# ui/actions.py
from __future__ import annotations
from typing import Dict, List, Optional, Tuple

from memory.conversation import ConversationStore
from memory.models import DEFAULT_TITLE, Conversation
from ui.formatting import format_response, render_markdown
from ui.voice import VoiceState


# -------- Chat log --------

def history_messages(conv: Optional[Conversation]) -> List[Dict[str, str]]:
    """
    Conversation -> gr.Chatbot(type="messages") value.

    User text is shown verbatim; assistant replies go through the formatter.
    """
    if conv is None:
        return []
    out: List[Dict[str, str]] = []
    for msg in conv.messages:
        if msg.role == "assistant":
            content = render_markdown(format_response(msg.content)) or msg.content
        else:
            content = msg.content
        out.append({"role": msg.role, "content": content})
    return out


def chat_title(conv: Optional[Conversation]) -> str:
    return f"### {conv.title if conv else DEFAULT_TITLE}"


# -------- Conversation list --------

def conversation_choices(store: ConversationStore) -> List[Tuple[str, str]]:
    """(label, value) pairs for the sidebar radio; value is the conversation id."""
    return [(c.title, c.id) for c in store.conversations]


def conversation_menu(store: ConversationStore) -> Tuple[List[Tuple[str, str]], Optional[str]]:
    return conversation_choices(store), store.active_id


# -------- Status / buttons --------

def status_badge(voice: Optional[VoiceState], loading: bool) -> str:
    if loading:
        return '<span class="status-badge status-busy"><span class="spinner"></span>Generating response...</span>'
    if voice is VoiceState.RECORDING:
        return '<span class="status-badge status-recording">Recording</span>'
    if voice is VoiceState.AWAITING_TRANSCRIPTION:
        return '<span class="status-badge status-busy"><span class="spinner"></span>Transcribing…</span>'
    if voice is VoiceState.SPEAKING:
        return '<span class="status-badge status-speaking">🔊 Speaking</span>'
    return '<span class="status-badge status-idle">Ready</span>'


def mic_button_state(voice: Optional[VoiceState], loading: bool) -> Tuple[str, bool]:
    """(label, interactive) for the mic button."""
    if voice is None:
        return "🎤", False
    if voice is VoiceState.RECORDING:
        return "⏹ Stop", True
    interactive = not loading and voice is not VoiceState.AWAITING_TRANSCRIPTION
    return "🎤", interactive


def input_enabled(has_active: bool, loading: bool) -> bool:
    return has_active and not loading


def transcript_hint(text: str) -> str:
    return f"_{text[:30]}..._" if text else "&nbsp;"
