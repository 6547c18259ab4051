# backend/core/__init__.py
from .ports import GenerateText, Microphone, SpeechEngine, SpeechTranscriber, TextGenerator, Transcribe

__all__ = ["GenerateText", "Microphone", "SpeechEngine", "SpeechTranscriber", "TextGenerator", "Transcribe"]
