# tests/ui/test_voice_session.py
from __future__ import annotations

import asyncio

import pytest

from backend.errors import DeviceAccessError, UpstreamServiceError
from memory.models import Message
from ui.voice import (
    LISTENING_CUE,
    MIC_ERROR,
    PROCESSING_CUE,
    TRANSCRIBE_ERROR,
    VoiceSession,
    VoiceState,
)


class FakeMic:
    mime_type = "audio/wav"

    def __init__(self, open_error=None, start_error=None):
        self.open_error = open_error
        self.start_error = start_error
        self.calls = []
        self.sink = None

    async def open(self):
        self.calls.append("open")
        if self.open_error is not None:
            raise self.open_error

    def start(self, on_chunk):
        self.calls.append("start")
        if self.start_error is not None:
            raise self.start_error
        self.sink = on_chunk

    def stop(self):
        self.calls.append("stop")
        self.sink = None

    def release(self):
        self.calls.append("release")

    def encode(self, chunks):
        return b"WAV" + b"".join(chunks)


class FakeSpeech:
    def __init__(self, block=False):
        self.spoken = []
        self.cancelled = 0
        self._block = block
        self._gate = asyncio.Event()

    async def speak(self, text):
        self.spoken.append(text)
        if self._block:
            await self._gate.wait()

    def cancel(self):
        self.cancelled += 1
        self._gate.set()


class Recorder:
    def __init__(self, transcript="hello world", error=None):
        self.transcript = transcript
        self.error = error
        self.uploads = []
        self.transcriptions = []
        self.submits = 0

    async def transcribe(self, audio, mime_type):
        self.uploads.append((audio, mime_type))
        if self.error is not None:
            raise self.error
        return self.transcript

    def on_transcription(self, text):
        self.transcriptions.append(text)

    async def on_submit(self):
        self.submits += 1


def _session(mic=None, speech=None, rec=None, **kw):
    rec = rec or Recorder()
    kw.setdefault("submit_delay", 0)
    s = VoiceSession(
        microphone=mic or FakeMic(),
        speech=speech or FakeSpeech(),
        transcribe=rec.transcribe,
        on_transcription=rec.on_transcription,
        on_submit=rec.on_submit,
        **kw,
    )
    return s, rec


@pytest.mark.asyncio
async def test_record_transcribe_and_auto_submit():
    mic, speech = FakeMic(), FakeSpeech()
    session, rec = _session(mic, speech)

    await session.toggle()
    assert session.state is VoiceState.RECORDING
    mic.sink(b"ab")
    mic.sink(b"")
    mic.sink(b"cd")

    await session.toggle()
    assert session.state is VoiceState.IDLE
    assert rec.uploads == [(b"WAVabcd", "audio/wav")]
    assert rec.transcriptions == ["hello world"]
    assert speech.spoken == [LISTENING_CUE, PROCESSING_CUE]
    assert mic.calls == ["open", "start", "stop", "release"]

    await session.pending_submit
    assert rec.submits == 1


@pytest.mark.asyncio
async def test_cues_can_be_turned_off():
    speech = FakeSpeech()
    session, rec = _session(speech=speech, cues=False)
    await session.toggle()
    await session.toggle()
    await session.pending_submit
    assert speech.spoken == []
    assert rec.submits == 1


@pytest.mark.asyncio
async def test_chunks_after_stop_are_dropped():
    mic = FakeMic()
    session, rec = _session(mic)
    await session.start_recording()
    sink = mic.sink
    await session.stop_recording()
    sink(b"late")
    assert rec.uploads == [(b"WAV", "audio/wav")]


@pytest.mark.asyncio
async def test_microphone_denied_speaks_error_and_stays_idle():
    speech = FakeSpeech()
    mic = FakeMic(open_error=DeviceAccessError("denied"))
    session, rec = _session(mic, speech)

    await session.toggle()

    assert session.state is VoiceState.IDLE
    assert speech.spoken == [MIC_ERROR]
    assert mic.calls == ["open"]


@pytest.mark.asyncio
async def test_capture_start_failure_releases_device():
    speech = FakeSpeech()
    mic = FakeMic(start_error=DeviceAccessError("busy"))
    session, _ = _session(mic, speech)

    await session.start_recording()

    assert session.state is VoiceState.IDLE
    assert mic.calls == ["open", "start", "release"]
    assert speech.spoken[-1] == MIC_ERROR


@pytest.mark.asyncio
async def test_transcription_failure_speaks_error_without_submit():
    speech = FakeSpeech()
    rec = Recorder(error=UpstreamServiceError("Transcription failed"))
    session, _ = _session(speech=speech, rec=rec)

    await session.toggle()
    await session.toggle()

    assert session.state is VoiceState.IDLE
    assert speech.spoken[-1] == TRANSCRIBE_ERROR
    assert rec.transcriptions == []
    assert session.pending_submit is None
    assert rec.submits == 0


@pytest.mark.asyncio
async def test_empty_transcript_is_a_failure():
    speech = FakeSpeech()
    rec = Recorder(transcript="   ")
    session, _ = _session(speech=speech, rec=rec)

    await session.toggle()
    await session.toggle()

    assert speech.spoken[-1] == TRANSCRIBE_ERROR
    assert rec.transcriptions == []


@pytest.mark.asyncio
async def test_assistant_message_is_spoken_user_message_is_not():
    speech = FakeSpeech()
    session, _ = _session(speech=speech)

    session.on_message("c1", Message(role="user", content="question"))
    session.on_message("c1", Message(role="assistant", content="### Answer\n- **yes**"))
    await session.pending_speech

    assert speech.spoken == ["Answer yes"]
    assert session.state is VoiceState.IDLE


@pytest.mark.asyncio
async def test_press_while_speaking_cancels_once_before_recording():
    speech = FakeSpeech(block=True)
    mic = FakeMic()
    session, _ = _session(mic, speech, cues=False)

    session.speak_later("A long answer")
    await asyncio.sleep(0)
    assert session.state is VoiceState.SPEAKING

    await session.toggle()

    assert speech.cancelled == 1
    assert session.state is VoiceState.RECORDING
    assert mic.calls == ["open", "start"]
    await session.pending_speech
    # the finished utterance must not knock the session out of Recording
    assert session.state is VoiceState.RECORDING


@pytest.mark.asyncio
async def test_press_ignored_while_busy():
    mic = FakeMic()
    session, _ = _session(mic, is_busy=lambda: True)
    await session.toggle()
    assert session.state is VoiceState.IDLE
    assert mic.calls == []


@pytest.mark.asyncio
async def test_reply_not_spoken_while_recording():
    speech = FakeSpeech()
    session, _ = _session(speech=speech, cues=False)
    await session.start_recording()
    session.on_message("c1", Message(role="assistant", content="hi"))
    assert speech.spoken == []
    assert session.state is VoiceState.RECORDING


@pytest.mark.asyncio
async def test_speech_failure_returns_to_idle():
    class BrokenSpeech(FakeSpeech):
        async def speak(self, text):
            raise RuntimeError("driver crashed")

    session, _ = _session(speech=BrokenSpeech())
    session.speak_later("hello")
    await session.pending_speech
    assert session.state is VoiceState.IDLE


@pytest.mark.asyncio
async def test_close_releases_microphone_and_cancels_submit():
    mic = FakeMic()
    session, rec = _session(mic, cues=False, submit_delay=10)

    await session.start_recording()
    session.close()

    assert mic.calls == ["open", "start", "stop", "release"]
    assert session.state is VoiceState.IDLE

    # later presses are ignored
    await session.toggle()
    assert mic.calls.count("open") == 1


@pytest.mark.asyncio
async def test_interrupt_cancels_pending_submit_and_stays_usable():
    mic = FakeMic()
    session, rec = _session(mic, cues=False, submit_delay=10)

    await session.toggle()
    await session.toggle()
    pending = session.pending_submit
    session.interrupt()
    with pytest.raises(asyncio.CancelledError):
        await pending

    assert rec.submits == 0

    await session.toggle()
    assert session.state is VoiceState.RECORDING


@pytest.mark.asyncio
async def test_interrupt_during_listening_cue_releases_microphone():
    speech = FakeSpeech(block=True)
    mic = FakeMic()
    session, _ = _session(mic, speech)

    pressed = asyncio.ensure_future(session.toggle())
    while session.state is not VoiceState.SPEAKING:
        await asyncio.sleep(0)

    session.interrupt()
    await pressed

    assert session.state is VoiceState.IDLE
    assert mic.calls == ["open", "release"]
    assert mic.sink is None


@pytest.mark.asyncio
async def test_reply_during_microphone_open_is_not_spoken():
    class SlowMic(FakeMic):
        def __init__(self):
            super().__init__()
            self.gate = asyncio.Event()

        async def open(self):
            self.calls.append("open")
            await self.gate.wait()

    speech = FakeSpeech()
    mic = SlowMic()
    session, _ = _session(mic, speech, cues=False)

    pressed = asyncio.ensure_future(session.toggle())
    while "open" not in mic.calls:
        await asyncio.sleep(0)

    session.on_message("c1", Message(role="assistant", content="late reply"))
    mic.gate.set()
    await pressed

    assert session.state is VoiceState.RECORDING
    assert speech.spoken == []
    assert session.pending_speech is None
