# ui/voice.py
from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Awaitable, Callable, List, Optional

from backend.core.ports import Microphone, SpeechEngine, Transcribe
from backend.errors import DeviceAccessError, UpstreamServiceError
from memory.models import Message
from ui.formatting import speakable_text

log = logging.getLogger("gemchat.voice")

LISTENING_CUE = "I'm listening. Please speak your question."
PROCESSING_CUE = "Processing your question..."
MIC_ERROR = "I couldn't access the microphone. Please check your permissions."
TRANSCRIBE_ERROR = "Sorry, I couldn't understand that. Please try again."


class VoiceState(str, Enum):
    IDLE = "idle"
    RECORDING = "recording"
    AWAITING_TRANSCRIPTION = "awaiting_transcription"
    SPEAKING = "speaking"


class VoiceSession:
    """
    Mic-button state machine: record -> transcribe -> submit, plus speaking replies.

        Idle --press--> Recording --press--> AwaitingTranscription --> Idle (+ auto submit)
        Idle --assistant message--> Speaking --done/error/cancel--> Idle

    Recording and Speaking never overlap: a press while Speaking cancels the
    speech before the microphone is touched. Failures are spoken, never raised.
    """

    def __init__(
        self,
        *,
        microphone: Microphone,
        speech: SpeechEngine,
        transcribe: Transcribe,
        on_transcription: Callable[[str], None],
        on_submit: Callable[[], Awaitable[object]],
        is_busy: Callable[[], bool] = lambda: False,
        submit_delay: float = 1.0,
        cues: bool = True,
    ) -> None:
        self._mic = microphone
        self._speech = speech
        self._transcribe = transcribe
        self._on_transcription = on_transcription
        self._on_submit = on_submit
        self._is_busy = is_busy
        self._submit_delay = max(0.0, float(submit_delay))
        self._cues = cues

        self._state = VoiceState.IDLE
        self._chunks: List[bytes] = []
        self._utterance = 0
        # bumped by interrupt(); a start attempt that sees a new value gives up
        self._attempt = 0
        self._starting = False
        self._closed = False
        self._speech_task: Optional[asyncio.Task] = None
        self._submit_task: Optional[asyncio.Task] = None
        self.last_transcript = ""

    # ---------- state ----------

    @property
    def state(self) -> VoiceState:
        return self._state

    @property
    def pending_submit(self) -> Optional[asyncio.Task]:
        return self._submit_task

    @property
    def pending_speech(self) -> Optional[asyncio.Task]:
        return self._speech_task

    def _set_state(self, new: VoiceState) -> None:
        if new is not self._state:
            log.debug("Voice state %s -> %s", self._state.value, new.value)
            self._state = new

    # ---------- mic button ----------

    async def toggle(self) -> None:
        if self._state is VoiceState.RECORDING:
            await self.stop_recording()
        else:
            await self.start_recording()

    async def start_recording(self) -> None:
        if self._closed or self._starting or self._is_busy():
            return
        if self._state in (VoiceState.RECORDING, VoiceState.AWAITING_TRANSCRIPTION):
            return

        self._starting = True
        attempt = self._attempt
        try:
            if self._state is VoiceState.SPEAKING:
                self.cancel_speech()

            try:
                await self._mic.open()
            except DeviceAccessError as e:
                log.warning("Error accessing microphone: %s", e)
                await self._say(MIC_ERROR)
                return

            if self._cues and attempt == self._attempt:
                await self._say(LISTENING_CUE)
            if self._closed or attempt != self._attempt:
                log.debug("Recording start interrupted; microphone released.")
                self._mic.release()
                return

            # Speech never runs under Recording
            if self._state is VoiceState.SPEAKING:
                self.cancel_speech()
            self._chunks = []
            self._set_state(VoiceState.RECORDING)
            try:
                self._mic.start(self._on_chunk)
            except DeviceAccessError as e:
                log.warning("Microphone failed to start: %s", e)
                self._mic.release()
                self._set_state(VoiceState.IDLE)
                await self._say(MIC_ERROR)
                return
            log.info("🎙️ Recording…")
        finally:
            self._starting = False

    def _on_chunk(self, data: bytes) -> None:
        if data and self._state is VoiceState.RECORDING:
            self._chunks.append(data)

    async def stop_recording(self) -> None:
        if self._state is not VoiceState.RECORDING:
            return

        self._set_state(VoiceState.AWAITING_TRANSCRIPTION)
        chunks, self._chunks = self._chunks, []
        try:
            self._mic.stop()
        finally:
            self._mic.release()

        try:
            audio = self._mic.encode(chunks)
            text = await self._transcribe(audio, self._mic.mime_type)
            if not text or not text.strip():
                raise UpstreamServiceError("No transcription result")
        except UpstreamServiceError as e:
            log.warning("Transcription error: %s", e)
            self._set_state(VoiceState.IDLE)
            await self._say(TRANSCRIBE_ERROR)
            return
        finally:
            chunks.clear()

        self._set_state(VoiceState.IDLE)
        text = text.strip()
        self.last_transcript = text
        log.info("📝 Transcribed %d chars", len(text))
        self._on_transcription(text)

        if self._cues:
            await self._say(PROCESSING_CUE)
        self._schedule_submit()

    def _schedule_submit(self) -> None:
        if self._closed:
            return
        if self._submit_task is not None and not self._submit_task.done():
            self._submit_task.cancel()
        self._submit_task = asyncio.get_running_loop().create_task(self._submit_after_delay())

    async def _submit_after_delay(self) -> None:
        await asyncio.sleep(self._submit_delay)
        try:
            await self._on_submit()
        except Exception:
            log.exception("Auto-submit after transcription failed")

    # ---------- speech ----------

    def on_message(self, conversation_id: str, message: Message) -> None:
        """ConversationStore listener: speak each new assistant reply."""
        if message.role == "assistant":
            self.speak_later(message.content)

    def speak_later(self, raw: str) -> None:
        # the mic is being acquired: the press wins over the reply
        if self._closed or self._starting or self._state is not VoiceState.IDLE:
            return
        text = speakable_text(raw)
        if not text:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            log.debug("No running loop; reply not spoken.")
            return
        self._speech_task = loop.create_task(self._say(text))

    async def _say(self, text: str) -> None:
        text = (text or "").strip()
        if not text or self._state is not VoiceState.IDLE:
            return

        self._utterance += 1
        token = self._utterance
        self._set_state(VoiceState.SPEAKING)
        try:
            await self._speech.speak(text)
        except Exception as e:
            log.warning("Speech synthesis failed: %s", e)
        finally:
            if self._state is VoiceState.SPEAKING and self._utterance == token:
                self._set_state(VoiceState.IDLE)

    def cancel_speech(self) -> None:
        if self._state is not VoiceState.SPEAKING:
            return
        self._utterance += 1
        self._speech.cancel()
        self._set_state(VoiceState.IDLE)

    # ---------- teardown ----------

    def interrupt(self) -> None:
        """Drop whatever is in progress and release both devices (page unload)."""
        self._attempt += 1
        if self._submit_task is not None and not self._submit_task.done():
            self._submit_task.cancel()
        if self._state is VoiceState.SPEAKING:
            self.cancel_speech()
        if self._state is VoiceState.RECORDING:
            try:
                self._mic.stop()
            finally:
                self._mic.release()
                self._chunks = []
                self._set_state(VoiceState.IDLE)

    def close(self) -> None:
        """Interrupt for good; later presses and replies are ignored."""
        if self._closed:
            return
        self._closed = True
        self.interrupt()
        log.debug("Voice session closed.")
