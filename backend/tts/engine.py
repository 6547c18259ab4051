# backend/tts/engine.py
from __future__ import annotations

import asyncio
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, Optional

import pyttsx3

import config as cfg

log = logging.getLogger("gemchat.tts")


def pick_voice(voices: Iterable, preferences: Iterable[str]) -> Optional[str]:
    """First voice id whose name/id/languages mention a preferred token, in preference order."""
    voices = list(voices or [])
    for token in preferences:
        t = token.lower()
        for v in voices:
            langs = " ".join(str(x) for x in (getattr(v, "languages", None) or []))
            hay = f"{getattr(v, 'name', '')} {getattr(v, 'id', '')} {langs}".lower()
            if t in hay:
                return v.id
    return None


class Pyttsx3Speaker:
    """
    Speech output through pyttsx3.

    All engine calls run on one dedicated worker thread (drivers dislike being
    touched from several). speak() awaits the utterance; cancel() stops it.
    """

    def __init__(
        self,
        *,
        rate: Optional[int] = None,
        volume: Optional[float] = None,
        voice_preference: Optional[list[str]] = None,
    ) -> None:
        s = cfg.settings
        self._rate = s.tts_rate if rate is None else rate
        self._volume = s.tts_volume if volume is None else volume
        self._prefs = list(s.tts_voice_preference if voice_preference is None else voice_preference)
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="tts")
        self._engine = None  # type: pyttsx3.Engine | None
        self._engine_lock = threading.Lock()
        self._speaking = threading.Event()

    def _get_engine(self) -> "pyttsx3.Engine":
        with self._engine_lock:
            if self._engine is None:
                eng = pyttsx3.init()
                if self._rate:
                    eng.setProperty("rate", int(self._rate))
                eng.setProperty("volume", float(self._volume))
                voice_id = pick_voice(eng.getProperty("voices"), self._prefs)
                if voice_id:
                    eng.setProperty("voice", voice_id)
                    log.debug("TTS voice: %s", voice_id)
                self._engine = eng
            return self._engine

    def _speak_blocking(self, text: str) -> None:
        eng = self._get_engine()
        self._speaking.set()
        try:
            eng.say(text)
            eng.runAndWait()
        finally:
            self._speaking.clear()

    async def speak(self, text: str) -> None:
        if not text or not text.strip():
            return
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(self._executor, self._speak_blocking, text)

    def cancel(self) -> None:
        eng = self._engine
        if eng is not None and self._speaking.is_set():
            try:
                eng.stop()
            except RuntimeError as e:
                log.debug("TTS stop failed: %s", e)

    def shutdown(self) -> None:
        self.cancel()
        self._executor.shutdown(wait=False, cancel_futures=True)
