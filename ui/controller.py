# ui/controller.py
from __future__ import annotations

import logging
from typing import Callable, List, Optional

import config as cfg
from backend.core.ports import GenerateText, Microphone, SpeechEngine, Transcribe
from backend.errors import UpstreamServiceError
from memory.conversation import ConversationStore
from memory.models import Conversation, Message
from ui.submit import ChatSubmitFlow
from ui.voice import VoiceSession, VoiceState

log = logging.getLogger("gemchat.ui")


class ChatController:
    """
    Page-level state: the store, the submit flow, the voice session and the draft.

    Gradio handlers call into this; the poller reads `version` / `draft_version`
    to decide what to re-render.
    """

    def __init__(
        self,
        store: ConversationStore,
        *,
        generate: GenerateText,
        microphone: Optional[Microphone] = None,
        speech: Optional[SpeechEngine] = None,
        transcribe: Optional[Transcribe] = None,
        submit_delay: Optional[float] = None,
        cues: Optional[bool] = None,
        closers: Optional[List[Callable[[], None]]] = None,
    ) -> None:
        s = cfg.settings
        self.store = store
        self._closers = list(closers or [])
        self.version = 0
        self.draft_version = 0
        self.notices: List[str] = []

        self.flow = ChatSubmitFlow(store, generate, on_error=self._on_generation_error)
        store.subscribe(self._on_message)

        self.voice: Optional[VoiceSession] = None
        if microphone is not None and speech is not None and transcribe is not None:
            self.voice = VoiceSession(
                microphone=microphone,
                speech=speech,
                transcribe=transcribe,
                on_transcription=self._on_transcription,
                on_submit=self.submit,
                is_busy=lambda: self.flow.loading,
                submit_delay=s.submit_delay_sec if submit_delay is None else submit_delay,
                cues=s.voice_cues if cues is None else cues,
            )
            store.subscribe(self.voice.on_message)

    # ---------- observers / callbacks ----------

    def _on_message(self, conversation_id: str, message: Message) -> None:
        self.version += 1

    def _on_transcription(self, text: str) -> None:
        self.flow.draft = text
        self.draft_version += 1

    def _on_generation_error(self, err: UpstreamServiceError) -> None:
        self.notices.append(f"⚠️ {err}. Please try again.")

    def pop_notices(self) -> List[str]:
        out, self.notices = self.notices, []
        return out

    # ---------- queries ----------

    @property
    def draft(self) -> str:
        return self.flow.draft

    @property
    def loading(self) -> bool:
        return self.flow.loading

    @property
    def active(self) -> Optional[Conversation]:
        return self.store.active

    @property
    def voice_state(self) -> Optional[VoiceState]:
        return self.voice.state if self.voice is not None else None

    # ---------- actions ----------

    def set_draft(self, text: Optional[str]) -> None:
        """Typed input; does not bump draft_version (the textbox already shows it)."""
        self.flow.draft = text or ""

    async def submit(self, draft: Optional[str] = None) -> Optional[Conversation]:
        if draft is not None:
            self.flow.draft = draft
        conv = await self.flow.submit()
        self.draft_version += 1
        self.version += 1
        return conv

    def new_chat(self) -> Conversation:
        conv = self.store.create()
        self.version += 1
        return conv

    def select(self, conversation_id: Optional[str]) -> None:
        if conversation_id and self.store.get(conversation_id) is None:
            log.warning("Ignoring selection of unknown conversation %s", conversation_id)
            return
        self.store.select(conversation_id)
        self.version += 1

    def delete(self, conversation_id: Optional[str]) -> None:
        if not conversation_id:
            return
        self.store.delete(conversation_id)
        self.version += 1

    def rename(self, conversation_id: Optional[str], title: Optional[str]) -> None:
        title = (title or "").strip()
        if not conversation_id or not title or self.store.get(conversation_id) is None:
            return
        self.store.rename(conversation_id, title)
        self.version += 1

    async def toggle_mic(self) -> None:
        if self.voice is None:
            self.notices.append("🎤 Voice input is not available.")
            return
        await self.voice.toggle()

    def page_unloaded(self) -> None:
        """Tab closed or reloaded: stop recording/speaking, keep the session usable."""
        if self.voice is not None:
            self.voice.interrupt()

    def close(self) -> None:
        """Release devices and storage; called on page teardown / server shutdown."""
        if self.voice is not None:
            self.voice.close()
        closers, self._closers = self._closers, []
        for fn in closers:
            try:
                fn()
            except Exception:
                log.exception("Teardown step failed")


def build_controller() -> ChatController:
    """Wire the default app: SQLite snapshot, PyAudio mic, pyttsx3 voice, our HTTP API."""
    from audio.mic import PyAudioMicrophone
    from backend.tts.engine import Pyttsx3Speaker
    from memory.conversation import open_store
    from ui import api

    store = open_store()
    mic = PyAudioMicrophone()
    speaker = Pyttsx3Speaker()
    return ChatController(
        store,
        generate=api.generate_text,
        microphone=mic,
        speech=speaker,
        transcribe=api.transcribe,
        closers=[mic.release, speaker.shutdown, store.close],
    )
