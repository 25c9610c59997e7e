"""Data models for the chat module."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum


class ContentType(str, Enum):
    TEXT = "TEXT"
    IMAGE = "IMAGE"
    VOICE = "VOICE"
    VIDEO = "VIDEO"


class MessageStatus(str, Enum):
    SENDING = "SENDING"
    SENT = "SENT"
    DELIVERED = "DELIVERED"
    READ = "READ"
    FAILED = "FAILED"


class MessageType(str, Enum):
    REGULAR = "REGULAR"
    DATE_SEPARATOR = "DATE_SEPARATOR"
    SYSTEM = "SYSTEM"


# Forward-only delivery state machine.
_ALLOWED_TRANSITIONS: dict[MessageStatus, frozenset[MessageStatus]] = {
    MessageStatus.SENDING: frozenset({MessageStatus.SENT, MessageStatus.FAILED}),
    MessageStatus.SENT: frozenset({MessageStatus.DELIVERED, MessageStatus.READ}),
    MessageStatus.DELIVERED: frozenset({MessageStatus.READ}),
    MessageStatus.READ: frozenset(),
    MessageStatus.FAILED: frozenset(),
}


def can_transition(current: MessageStatus, new: MessageStatus) -> bool:
    """True if a message may move from ``current`` to ``new``."""
    return new in _ALLOWED_TRANSITIONS[current]


@dataclass(frozen=True)
class Message:
    """A single chat message, local or server-confirmed."""

    id: str
    conversation_id: str
    text: str
    timestamp: str  # ISO 8601, UTC
    is_sent: bool  # True when authored by the local user
    content_type: ContentType = ContentType.TEXT
    status: MessageStatus = MessageStatus.SENT
    image_url: str | None = None
    voice_url: str | None = None
    duration: str | None = None
    message_type: MessageType = MessageType.REGULAR

    def with_status(self, status: MessageStatus) -> Message:
        return replace(self, status=status)


@dataclass(frozen=True)
class Conversation:
    """A chat thread with one matched counterpart, as listed by the server."""

    id: str
    name: str
    age: int
    photo_url: str
    last_message: str
    timestamp: str
    unread_count: int = 0
    is_online: bool = False
    is_verified: bool = False
