"""Chat messages: local cache, synchronization and per-screen state.

The sync and controller layers pull in the API client; import them
explicitly or let the lazy attribute lookup below do it:
    from pranayam_client.chat.sync import ChatSync
    from pranayam_client.chat.controller import ChatController
"""

from pranayam_client.chat.models import (
    ContentType,
    Conversation,
    Message,
    MessageStatus,
    MessageType,
)
from pranayam_client.chat.store import MessageStore


def __getattr__(name):
    """Lazy imports for classes that depend on the API and socket layers."""
    if name == "ChatSync":
        from pranayam_client.chat.sync import ChatSync
        return ChatSync
    if name == "ChatController":
        from pranayam_client.chat.controller import ChatController
        return ChatController
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "ContentType",
    "Conversation",
    "Message",
    "MessageStatus",
    "MessageType",
    "MessageStore",
    "ChatSync",
    "ChatController",
]
