# ui/submit.py
from __future__ import annotations

import logging
from typing import Callable, Optional

from backend.core.ports import GenerateText
from backend.errors import UpstreamServiceError
from memory.conversation import ConversationStore
from memory.models import DEFAULT_TITLE, Conversation, Message

log = logging.getLogger("gemchat.submit")

TITLE_CHARS = 30


def title_from(content: str) -> str:
    return content[:TITLE_CHARS] + "..."


class ChatSubmitFlow:
    """
    Draft -> GenerateText -> append the turn to the conversation.

    Only the newest message is sent; the generation service sees no history.
    One submission at a time: `loading` stays True until the call resolves.
    """

    def __init__(
        self,
        store: ConversationStore,
        generate: GenerateText,
        *,
        on_error: Optional[Callable[[UpstreamServiceError], None]] = None,
    ) -> None:
        self._store = store
        self._generate = generate
        self._on_error = on_error
        self.loading = False
        self.draft = ""
        self.last_error: Optional[UpstreamServiceError] = None

    async def submit(
        self,
        conversation_id: Optional[str] = None,
        draft: Optional[str] = None,
    ) -> Optional[Conversation]:
        text = self.draft if draft is None else draft
        cid = conversation_id or self._store.active_id
        conv = self._store.get(cid) if cid else None

        if conv is None or self.loading or not (text or "").strip():
            return conv

        self.loading = True
        self.last_error = None
        user_msg = Message(role="user", content=text.strip())
        messages = [*conv.messages, user_msg]
        try:
            reply = await self._generate(messages[-1].content)
            if not reply or not reply.strip():
                raise UpstreamServiceError("Empty response from generation service")
        except UpstreamServiceError as e:
            self.last_error = e
            log.warning("Generation failed; message dropped: %s", e)
            if self._on_error is not None:
                self._on_error(e)
            return conv
        finally:
            self.loading = False
            self.draft = ""

        if self._store.get(conv.id) is None:
            log.info("Conversation %s deleted while waiting for a reply; reply dropped.", conv.id)
            return None

        first_turn = len(messages) == 1
        self._store.append_message(conv.id, user_msg)
        if conv.title == DEFAULT_TITLE and first_turn:
            self._store.rename(conv.id, title_from(user_msg.content))
        self._store.append_message(conv.id, Message(role="assistant", content=reply))
        return conv
