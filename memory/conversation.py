# memory/conversation.py
from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional

from pydantic import ValidationError

import config as cfg
from backend.errors import PersistenceError
from memory.models import DEFAULT_TITLE, Conversation, Message, Snapshot
from memory.storage import LocalStorage

log = logging.getLogger("gemchat.memory")

# listener(conversation_id, message), called after every appended message
MessageListener = Callable[[str, Message], None]


class ConversationStore:
    """
    In-memory conversation list mirrored to a single snapshot in LocalStorage.

    Every mutation rewrites the full snapshot. Persistence is best effort: a
    failed write is logged and the in-memory state stays authoritative.
    """

    def __init__(self, storage: LocalStorage, *, key: Optional[str] = None) -> None:
        self._storage = storage
        self._key = key or cfg.settings.storage_key
        self._items: List[Conversation] = []
        self._by_id: Dict[str, Conversation] = {}
        self._active_id: Optional[str] = None
        self._listeners: List[MessageListener] = []

    # ---------- snapshot ----------

    def load(self) -> None:
        """Read the snapshot once; anything unreadable starts an empty list."""
        try:
            items = self._read_snapshot()
        except PersistenceError as e:
            log.warning("Conversation snapshot ignored (%s): %s", e, e.details)
            items = []
        self._items = items
        self._by_id = {c.id: c for c in items}
        self._active_id = items[0].id if items else None
        log.info("Loaded %d conversation(s).", len(items))

    def _read_snapshot(self) -> List[Conversation]:
        raw = self._storage.get_item(self._key)
        if raw is None:
            return []
        try:
            items = Snapshot.validate_json(raw)
        except ValidationError as e:
            raise PersistenceError("corrupt snapshot", details=str(e)) from e
        # Duplicate ids would break the index; keep the first occurrence.
        seen: set[str] = set()
        unique: List[Conversation] = []
        for c in items:
            if c.id in seen:
                continue
            seen.add(c.id)
            unique.append(c)
        return unique

    def _persist(self) -> None:
        try:
            if not self._items:
                # no snapshot and an empty snapshot load the same way
                self._storage.remove_item(self._key)
                return
            self._storage.set_item(self._key, Snapshot.dump_json(self._items).decode("utf-8"))
        except Exception as e:
            log.error("Failed to persist conversations: %s", e)

    # ---------- observers ----------

    def subscribe(self, listener: MessageListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _emit(self, conversation_id: str, message: Message) -> None:
        for listener in list(self._listeners):
            try:
                listener(conversation_id, message)
            except Exception:
                log.exception("Message listener failed")

    # ---------- queries ----------

    @property
    def conversations(self) -> List[Conversation]:
        return list(self._items)

    @property
    def active_id(self) -> Optional[str]:
        return self._active_id

    @property
    def active(self) -> Optional[Conversation]:
        return self._by_id.get(self._active_id) if self._active_id else None

    def get(self, conversation_id: str) -> Optional[Conversation]:
        return self._by_id.get(conversation_id)

    def __len__(self) -> int:
        return len(self._items)

    # ---------- mutations ----------

    def create(self, title: str = DEFAULT_TITLE, *, activate: bool = True) -> Conversation:
        conv = Conversation(title=title)
        self._items.append(conv)
        self._by_id[conv.id] = conv
        if activate:
            self._active_id = conv.id
        self._persist()
        log.debug("Created conversation %s", conv.id)
        return conv

    def select(self, conversation_id: Optional[str]) -> Optional[Conversation]:
        if conversation_id is None:
            self._active_id = None
            return None
        conv = self._by_id.get(conversation_id)
        if conv is None:
            raise KeyError(f"Conversation {conversation_id} does not exist.")
        self._active_id = conv.id
        return conv

    def delete(self, conversation_id: str) -> None:
        conv = self._by_id.pop(conversation_id, None)
        if conv is None:
            return
        self._items = [c for c in self._items if c.id != conversation_id]
        if self._active_id == conversation_id:
            self._active_id = self._items[0].id if self._items else None
        self._persist()
        log.debug("Deleted conversation %s", conversation_id)

    def rename(self, conversation_id: str, title: str) -> None:
        conv = self._require(conversation_id)
        conv.title = title
        self._persist()

    def append_message(self, conversation_id: str, message: Message) -> Conversation:
        conv = self._require(conversation_id)
        conv.messages.append(message)
        self._persist()
        self._emit(conversation_id, message)
        return conv

    def close(self) -> None:
        self._listeners.clear()
        self._storage.close()

    def _require(self, conversation_id: str) -> Conversation:
        conv = self._by_id.get(conversation_id)
        if conv is None:
            raise KeyError(f"Conversation {conversation_id} does not exist.")
        return conv


def open_store(storage: Optional[LocalStorage] = None) -> ConversationStore:
    """Build a store on the configured database and load its snapshot."""
    store = ConversationStore(storage or LocalStorage())
    store.load()
    return store
