# tests/backend/api/test_generate_endpoint.py
from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from backend.api.app import create_app
from backend.errors import UpstreamServiceError


class FakeGenerator:
    def __init__(self, reply="Hello!", error=None):
        self.reply = reply
        self.error = error
        self.prompts = []

    def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.reply


def _client(generator=None):
    return TestClient(create_app(generator=generator or FakeGenerator(), transcriber=None))


def test_generate_returns_reply_for_last_message():
    gen = FakeGenerator(reply="Paris.")
    with _client(gen) as client:
        r = client.post(
            "/api/generate",
            json={
                "messages": [
                    {"role": "user", "content": "earlier"},
                    {"role": "assistant", "content": "ignored"},
                    {"role": "user", "content": "Capital of France?"},
                ]
            },
        )

    assert r.status_code == 200
    assert r.json() == {"response": "Paris.", "success": True}
    assert gen.prompts == ["Capital of France?"]


@pytest.mark.parametrize(
    "body",
    [
        {"messages": []},
        {"messages": [{"role": "user", "content": "   "}]},
        {"nope": 1},
        {"messages": "not a list"},
        {"messages": [{"role": "system", "content": "x"}]},
    ],
)
def test_generate_rejects_bad_bodies(body):
    gen = FakeGenerator()
    with _client(gen) as client:
        r = client.post("/api/generate", json=body)

    assert r.status_code == 400
    assert r.json()["success"] is False
    assert r.json()["error"]
    assert gen.prompts == []


def test_generate_upstream_failure_is_500():
    gen = FakeGenerator(error=UpstreamServiceError("Failed to generate response", details="quota exceeded"))
    with _client(gen) as client:
        r = client.post("/api/generate", json={"messages": [{"role": "user", "content": "hi"}]})

    assert r.status_code == 500
    assert r.json() == {"error": "Failed to generate response", "details": "quota exceeded", "success": False}


def test_generate_without_api_key_is_503():
    # no keys in the test environment -> lifespan leaves the handle empty
    with TestClient(create_app()) as client:
        r = client.post("/api/generate", json={"messages": [{"role": "user", "content": "hi"}]})

    assert r.status_code == 503
    assert r.json()["success"] is False
