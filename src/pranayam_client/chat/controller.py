"""UI-independent state holder for one open conversation."""

from __future__ import annotations

import logging
from typing import Callable

from pranayam_client.chat.models import Message
from pranayam_client.chat.store import MessagesCallback
from pranayam_client.chat.sync import ChatSync
from pranayam_client.exceptions import RealtimeError
from pranayam_client.realtime.broadcast import Broadcaster
from pranayam_client.realtime.socket import ChatSocket

logger = logging.getLogger(__name__)


class ChatController:
    """Drafting, sending, presence and typing state for a single chat screen.

    The socket is connected by ``open()`` and dropped by ``close()``; the
    controller is also a context manager. In-flight sends are not cancelled
    on close.

    Args:
        conversation_id: The conversation being displayed.
        user_id: Signed-in user; sent as the socket ``userId`` and as the
            author of typing events.
        sync: Shared chat read/write path.
        socket: Real-time channel owned by this screen.
        counterpart_id: When given, presence events for other users are ignored.
    """

    def __init__(
        self,
        conversation_id: str,
        user_id: str,
        sync: ChatSync,
        socket: ChatSocket,
        counterpart_id: str | None = None,
    ):
        self.conversation_id = conversation_id
        self.user_id = user_id
        self.counterpart_id = counterpart_id
        self.sync = sync
        self.socket = socket

        self.draft = ""
        self.remote_online = False
        self.remote_typing = False
        # Live messages for this conversation, published after they are cached.
        self.incoming = Broadcaster(f"incoming:{conversation_id}")
        self._unsubscribers: list[Callable[[], None]] = []

    def __enter__(self) -> ChatController:
        self.open()
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    @property
    def is_open(self) -> bool:
        return bool(self._unsubscribers)

    def open(self, refresh: bool = True) -> None:
        """Subscribe to live events, connect the socket and load history.

        A socket that cannot connect is logged and tolerated: the
        conversation still works over REST.
        """
        if self.is_open:
            return
        self._unsubscribers = [
            self.socket.messages.subscribe(self._on_message),
            self.socket.statuses.subscribe(self._on_status),
            self.socket.typing.subscribe(self._on_typing),
        ]
        try:
            self.socket.connect(self.user_id)
        except RealtimeError as e:
            logger.warning(f"Live updates unavailable for {self.conversation_id}: {e}")
        if refresh:
            self.sync.refresh_history(self.conversation_id)

    def close(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []
        self.socket.disconnect()

    # ---- Messages ----

    def messages(self) -> list[Message]:
        return self.sync.messages(self.conversation_id)

    def observe(self, callback: MessagesCallback) -> Callable[[], None]:
        return self.sync.observe(self.conversation_id, callback)

    def on_text_changed(self, text: str) -> None:
        """Update the draft and tell the counterpart whether we are typing.

        Emits on every call; there is no debounce.
        """
        self.draft = text
        self.socket.send_typing(self.conversation_id, self.user_id, bool(text))

    def send(self) -> Message | None:
        """Send the current draft. A blank draft is left alone and returns None."""
        result = self.sync.send_message(self.conversation_id, self.draft)
        if result is None:
            return None
        self.draft = ""
        self.socket.send_typing(self.conversation_id, self.user_id, False)
        return result

    def resend(self, message_id: str) -> Message | None:
        return self.sync.resend_message(message_id)

    def load_older(self) -> int:
        return self.sync.load_older(self.conversation_id)

    # ---- Socket handlers ----

    def _on_message(self, payload: dict) -> None:
        message = self.sync.receive_live(payload)
        if message is not None and message.conversation_id == self.conversation_id:
            self.incoming.publish({"message": message})

    def _on_status(self, payload: dict) -> None:
        user_id = payload.get("userId")
        if self.counterpart_id and user_id and user_id != self.counterpart_id:
            return
        self.remote_online = bool(payload.get("isOnline", False))

    def _on_typing(self, payload: dict) -> None:
        conversation_id = payload.get("conversationId")
        if conversation_id and conversation_id != self.conversation_id:
            return
        if payload.get("userId") == self.user_id:
            return
        self.remote_typing = bool(payload.get("isTyping", False))
