# audio/wav_io.py
from __future__ import annotations

import io
import wave
from typing import Iterable


def pcm16_to_wav_bytes(chunks: Iterable[bytes], sample_rate: int, channels: int = 1) -> bytes:
    """Wrap raw little-endian int16 PCM chunks in an in-memory WAV container."""
    buf = io.BytesIO()
    with wave.open(buf, "wb") as wf:
        wf.setnchannels(channels)
        wf.setsampwidth(2)
        wf.setframerate(sample_rate)
        wf.writeframes(b"".join(chunks))
    return buf.getvalue()


def wav_duration_sec(data: bytes) -> float:
    with wave.open(io.BytesIO(data), "rb") as wf:
        frames = wf.getnframes()
        rate = wf.getframerate() or 1
    return frames / float(rate)
