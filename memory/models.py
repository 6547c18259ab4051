# memory/models.py
from __future__ import annotations

import uuid
from typing import List, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

DEFAULT_TITLE = "New Chat"

Role = Literal["user", "assistant"]


class Message(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    role: Role
    content: str


class Conversation(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    title: str = DEFAULT_TITLE
    messages: List[Message] = Field(default_factory=list)


# Snapshot = the whole conversation list, as persisted
Snapshot = TypeAdapter(List[Conversation])
