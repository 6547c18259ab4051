# tests/backend/llm/test_gemini.py
from __future__ import annotations

import types
from unittest.mock import MagicMock, patch

import pytest

import config as cfg
from backend.errors import ServiceUnavailableError, UpstreamServiceError
from backend.llm.gemini import GeminiTextGenerator


def _client(text=None, error=None):
    client = MagicMock()
    if error is not None:
        client.models.generate_content.side_effect = error
    else:
        client.models.generate_content.return_value = types.SimpleNamespace(text=text)
    return client


def test_generate_sends_prompt_to_configured_model():
    client = _client(text="  Paris.  ")
    gen = GeminiTextGenerator(client, "gemini-2.5-flash")

    assert gen.generate("Capital of France?") == "Paris."
    client.models.generate_content.assert_called_once_with(
        model="gemini-2.5-flash", contents="Capital of France?"
    )


@pytest.mark.parametrize("text", [None, "", "   "])
def test_empty_reply_is_upstream_error(text):
    gen = GeminiTextGenerator(_client(text=text), "m")
    with pytest.raises(UpstreamServiceError) as ei:
        gen.generate("hi")
    assert str(ei.value) == "Failed to generate response"
    assert ei.value.details == "Empty response from Gemini API"


def test_client_failure_is_upstream_error_with_details():
    gen = GeminiTextGenerator(_client(error=RuntimeError("429 quota")), "m")
    with pytest.raises(UpstreamServiceError) as ei:
        gen.generate("hi")
    assert "429 quota" in ei.value.details


def test_from_settings_without_key_is_unavailable():
    with pytest.raises(ServiceUnavailableError):
        GeminiTextGenerator.from_settings(cfg.Settings(gemini_api_key=None))


def test_from_settings_builds_client():
    with patch("backend.llm.gemini.genai.Client") as client_cls:
        gen = GeminiTextGenerator.from_settings(cfg.Settings(gemini_api_key="g", gemini_model="gemini-x"))
    client_cls.assert_called_once_with(api_key="g")
    assert gen.model == "gemini-x"
