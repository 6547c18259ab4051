# tests/ui/test_submit_flow.py
from __future__ import annotations

import asyncio

import pytest

from backend.errors import UpstreamServiceError
from memory.models import DEFAULT_TITLE
from ui.submit import ChatSubmitFlow, title_from


class FakeGenerate:
    def __init__(self, reply="Sure.", error=None):
        self.reply = reply
        self.error = error
        self.prompts = []

    async def __call__(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.reply


def test_title_from_truncates_to_30_chars():
    assert title_from("short") == "short..."
    assert title_from("x" * 40) == "x" * 30 + "..."


@pytest.mark.asyncio
async def test_first_submit_appends_turn_and_titles_chat(store):
    conv = store.create()
    gen = FakeGenerate(reply="Paris.")
    flow = ChatSubmitFlow(store, gen)
    flow.draft = "What is the capital of France?"

    await flow.submit()

    assert gen.prompts == ["What is the capital of France?"]
    assert [(m.role, m.content) for m in conv.messages] == [
        ("user", "What is the capital of France?"),
        ("assistant", "Paris."),
    ]
    assert conv.title == "What is the capital of France?"[:30] + "..."
    assert flow.draft == ""
    assert flow.loading is False


@pytest.mark.asyncio
async def test_only_latest_message_is_sent(store):
    conv = store.create()
    gen = FakeGenerate()
    flow = ChatSubmitFlow(store, gen)

    await flow.submit(draft="one")
    await flow.submit(draft="two")

    assert gen.prompts == ["one", "two"]
    assert len(conv.messages) == 4
    # title set from the first turn only
    assert conv.title == "one..."


@pytest.mark.asyncio
async def test_renamed_chat_keeps_its_title(store):
    conv = store.create()
    store.rename(conv.id, "Mine")
    await ChatSubmitFlow(store, FakeGenerate()).submit(draft="hello")
    assert conv.title == "Mine"


@pytest.mark.asyncio
@pytest.mark.parametrize("draft", ["", "   ", "\n\t"])
async def test_blank_draft_is_a_noop(store, draft):
    conv = store.create()
    gen = FakeGenerate()
    await ChatSubmitFlow(store, gen).submit(draft=draft)
    assert gen.prompts == []
    assert conv.messages == []


@pytest.mark.asyncio
async def test_no_active_conversation_is_a_noop(store):
    gen = FakeGenerate()
    result = await ChatSubmitFlow(store, gen).submit(draft="hello")
    assert result is None
    assert gen.prompts == []


@pytest.mark.asyncio
async def test_failure_clears_draft_and_appends_nothing(store):
    conv = store.create()
    errors = []
    flow = ChatSubmitFlow(store, FakeGenerate(error=UpstreamServiceError("Failed to get response")), on_error=errors.append)
    flow.draft = "hello"

    await flow.submit()

    assert conv.messages == []
    assert conv.title == DEFAULT_TITLE
    assert flow.draft == ""
    assert flow.loading is False
    assert str(flow.last_error) == "Failed to get response"
    assert len(errors) == 1


@pytest.mark.asyncio
async def test_empty_reply_counts_as_failure(store):
    conv = store.create()
    flow = ChatSubmitFlow(store, FakeGenerate(reply="  "))
    await flow.submit(draft="hello")
    assert conv.messages == []
    assert isinstance(flow.last_error, UpstreamServiceError)


@pytest.mark.asyncio
async def test_second_submit_while_loading_is_ignored(store):
    conv = store.create()
    release = asyncio.Event()
    prompts = []

    async def slow(prompt):
        prompts.append(prompt)
        await release.wait()
        return "done"

    flow = ChatSubmitFlow(store, slow)
    first = asyncio.create_task(flow.submit(draft="first"))
    await asyncio.sleep(0)
    assert flow.loading is True

    await flow.submit(draft="second")
    release.set()
    await first

    assert prompts == ["first"]
    assert [m.content for m in conv.messages] == ["first", "done"]


@pytest.mark.asyncio
async def test_reply_lands_in_original_conversation_after_switch(store):
    a = store.create()
    release = asyncio.Event()

    async def slow(prompt):
        await release.wait()
        return "answer"

    flow = ChatSubmitFlow(store, slow)
    task = asyncio.create_task(flow.submit(draft="question"))
    await asyncio.sleep(0)

    b = store.create()  # user switches away mid-request
    release.set()
    await task

    assert [m.content for m in a.messages] == ["question", "answer"]
    assert b.messages == []


@pytest.mark.asyncio
async def test_reply_dropped_when_conversation_deleted_mid_request(store):
    conv = store.create()
    release = asyncio.Event()

    async def slow(prompt):
        await release.wait()
        return "answer"

    flow = ChatSubmitFlow(store, slow)
    task = asyncio.create_task(flow.submit(draft="question"))
    await asyncio.sleep(0)

    store.delete(conv.id)
    release.set()
    result = await task

    assert result is None
    assert len(store) == 0
    assert flow.loading is False
