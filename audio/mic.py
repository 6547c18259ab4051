# audio/mic.py
from __future__ import annotations

import asyncio
import contextlib
import logging
import os
import sys
import threading
from typing import Callable, List, Optional, Tuple

import pyaudio

import config as cfg
from audio.wav_io import pcm16_to_wav_bytes
from backend.errors import DeviceAccessError

log = logging.getLogger("gemchat.mic")


@contextlib.contextmanager
def suppress_alsa_warnings_if_linux():
    """
    On Linux, temporarily point stderr at /dev/null while PortAudio probes
    devices; ALSA prints a wall of harmless warnings otherwise.
    """
    if not sys.platform.startswith("linux"):
        yield
        return
    try:
        stderr_fileno = sys.stderr.fileno()
    except (AttributeError, OSError, ValueError):
        yield
        return

    with open(os.devnull, "w") as devnull:
        old_stderr = os.dup(stderr_fileno)
        try:
            os.dup2(devnull.fileno(), stderr_fileno)
            yield
        finally:
            try:
                os.dup2(old_stderr, stderr_fileno)
            finally:
                os.close(old_stderr)


def list_input_devices() -> List[Tuple[int, str]]:
    """Return [(index, name)] for input-capable devices."""
    devices: List[Tuple[int, str]] = []
    with suppress_alsa_warnings_if_linux():
        p = pyaudio.PyAudio()
        try:
            for i in range(p.get_device_count()):
                info = p.get_device_info_by_index(i)
                if info.get("maxInputChannels", 0) > 0:
                    devices.append((i, str(info["name"])))
        finally:
            p.terminate()
    return devices


class PyAudioMicrophone:
    """
    Host microphone via PyAudio, in callback mode.

    open() acquires PortAudio + the input stream (in a worker thread),
    start() begins delivering chunks, stop() pauses the stream and
    release() closes everything. Chunks are produced on PortAudio's thread
    and handed to the event loop with call_soon_threadsafe.
    """

    mime_type = "audio/wav"

    def __init__(
        self,
        *,
        device_index: Optional[int] = None,
        sample_rate: Optional[int] = None,
        chunk: Optional[int] = None,
    ) -> None:
        s = cfg.settings
        self.device_index = s.input_device_index if device_index is None else device_index
        self.sample_rate = s.sample_rate if sample_rate is None else sample_rate
        self.chunk = s.chunk if chunk is None else chunk

        self._lock = threading.Lock()
        self._pa: Optional[pyaudio.PyAudio] = None
        self._stream = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._on_chunk: Optional[Callable[[bytes], None]] = None

    async def open(self) -> None:
        self._loop = asyncio.get_running_loop()
        await asyncio.to_thread(self._open_blocking)

    def _open_blocking(self) -> None:
        with self._lock:
            if self._stream is not None:
                return
            with suppress_alsa_warnings_if_linux():
                pa = pyaudio.PyAudio()
                try:
                    if pa.get_device_count() == 0:
                        raise DeviceAccessError("No input devices found. Check microphone permissions.")
                    stream = pa.open(
                        format=pyaudio.paInt16,
                        channels=1,
                        rate=self.sample_rate,
                        input=True,
                        frames_per_buffer=self.chunk,
                        input_device_index=self.device_index,
                        stream_callback=self._callback,
                        start=False,
                    )
                except DeviceAccessError:
                    pa.terminate()
                    raise
                except (OSError, ValueError) as e:
                    pa.terminate()
                    raise DeviceAccessError(f"Cannot open input device: {e}") from e
            self._pa = pa
            self._stream = stream
        log.info("🎤 Microphone acquired (device=%s, %d Hz)", self.device_index, self.sample_rate)

    def _callback(self, in_data, frame_count, time_info, status):
        loop, sink = self._loop, self._on_chunk
        if in_data and loop is not None and sink is not None:
            try:
                loop.call_soon_threadsafe(sink, bytes(in_data))
            except RuntimeError:
                # Loop closed underneath us (shutdown); stop asking for data.
                return (None, pyaudio.paComplete)
        return (None, pyaudio.paContinue)

    def start(self, on_chunk: Callable[[bytes], None]) -> None:
        with self._lock:
            if self._stream is None:
                raise DeviceAccessError("Microphone is not open.")
            self._on_chunk = on_chunk
            try:
                self._stream.start_stream()
            except OSError as e:
                raise DeviceAccessError(f"Cannot start capture: {e}") from e

    def stop(self) -> None:
        with self._lock:
            self._on_chunk = None
            if self._stream is not None:
                try:
                    if self._stream.is_active():
                        self._stream.stop_stream()
                except OSError as e:
                    log.debug("stop_stream failed: %s", e)

    def release(self) -> None:
        with self._lock:
            self._on_chunk = None
            stream, pa = self._stream, self._pa
            self._stream, self._pa = None, None
            if stream is not None:
                try:
                    stream.close()
                except OSError as e:
                    log.debug("stream.close failed: %s", e)
            if pa is not None:
                pa.terminate()
        if stream is not None:
            log.info("🎤 Microphone released")

    def encode(self, chunks: List[bytes]) -> bytes:
        return pcm16_to_wav_bytes(chunks, self.sample_rate)
