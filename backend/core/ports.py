# backend/core/ports.py
from __future__ import annotations

from typing import Awaitable, Callable, Protocol


# ---- Server side: hosted services behind our API routes ----

class TextGenerator(Protocol):
    def generate(self, prompt: str) -> str: ...


class SpeechTranscriber(Protocol):
    def transcribe(self, audio: bytes, mime_type: str) -> str: ...


# ---- Client side: what the voice/chat core talks to ----

# GenerateText(prompt) -> text; raises UpstreamServiceError
GenerateText = Callable[[str], Awaitable[str]]

# Transcribe(audio, mime_type) -> text; raises UpstreamServiceError
Transcribe = Callable[[bytes, str], Awaitable[str]]


class Microphone(Protocol):
    mime_type: str

    async def open(self) -> None:
        """Acquire the device. Raises DeviceAccessError."""
        ...

    def start(self, on_chunk: Callable[[bytes], None]) -> None: ...

    def stop(self) -> None: ...

    def release(self) -> None: ...

    def encode(self, chunks: list[bytes]) -> bytes: ...


class SpeechEngine(Protocol):
    async def speak(self, text: str) -> None:
        """Return when the utterance finished, failed or was cancelled."""
        ...

    def cancel(self) -> None: ...
