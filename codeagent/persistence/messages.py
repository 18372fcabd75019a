"""Conversation messages and the store that holds them.

Messages are append-only. The agent reads recent history from the store and
writes exactly one result message per run.
"""

from __future__ import annotations

import itertools
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class MessageRole(str, Enum):
    USER = "USER"
    ASSISTANT = "ASSISTANT"


class MessageType(str, Enum):
    RESULT = "RESULT"
    ERROR = "ERROR"


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Fragment(_CamelModel):
    """Generated artifact attached to a successful result."""

    sandbox_url: str
    title: str
    files: dict[str, str] = Field(default_factory=dict)


class NewMessage(_CamelModel):
    """Payload for creating a message.

    A caller that may retry a create sets ``id``; a store keeps at most one
    message per id.
    """

    id: str | None = None
    project_id: str
    role: MessageRole
    type: MessageType
    content: str
    fragment: Fragment | None = None


class Message(NewMessage):
    """A stored message."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class MessageStore(ABC):
    """Persistence boundary for conversation messages."""

    @abstractmethod
    async def recent_messages(self, project_id: str, limit: int) -> list[Message]:
        """Return up to ``limit`` messages of a project, newest first."""
        ...

    @abstractmethod
    async def create_message(self, message: NewMessage) -> Message:
        """Append a message and return the stored record.

        When a message with the same ``id`` is already stored, that record is
        returned and nothing is appended.
        """
        ...


class InMemoryMessageStore(MessageStore):
    """Message store kept in process memory.

    Insertion order breaks ties between messages created in the same instant.
    """

    def __init__(self) -> None:
        self._messages: list[tuple[int, Message]] = []
        self._sequence = itertools.count()

    async def recent_messages(self, project_id: str, limit: int) -> list[Message]:
        matching = [entry for entry in self._messages if entry[1].project_id == project_id]
        matching.sort(key=lambda entry: (entry[1].created_at, entry[0]), reverse=True)
        return [message for _, message in matching[:limit]]

    async def create_message(self, message: NewMessage) -> Message:
        if message.id is not None:
            for _, existing in self._messages:
                if existing.id == message.id:
                    return existing
        stored = Message(**message.model_dump(exclude_none=True))
        self._messages.append((next(self._sequence), stored))
        return stored

    async def add(self, message: Message) -> None:
        """Insert a pre-built message (e.g. with an explicit timestamp)."""
        self._messages.append((next(self._sequence), message))

    @property
    def messages(self) -> list[Message]:
        """All messages in insertion order."""
        return [message for _, message in self._messages]
