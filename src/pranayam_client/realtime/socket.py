"""Socket.IO real-time channel: inbound chat events, outbound typing/messages."""

from __future__ import annotations

import logging
from urllib.parse import urlencode

from pranayam_client.exceptions import RealtimeError
from pranayam_client.realtime.broadcast import Broadcaster

logger = logging.getLogger(__name__)

EVENT_NEW_MESSAGE = "new_message"
EVENT_USER_STATUS = "user_status"
EVENT_USER_TYPING = "user_typing"
EVENT_SEND_MESSAGE = "send_message"
EVENT_TYPING = "typing"


class ChatSocket:
    """One Socket.IO connection per open chat, identified by ``userId``.

    Inbound events are republished on ``messages``, ``statuses`` and
    ``typing``. Outbound emits while disconnected are dropped with a log line.

    Args:
        url: Socket.IO server URL.
        reconnection: Let the underlying client reconnect on its own.
    """

    def __init__(self, url: str, reconnection: bool = True):
        try:
            import socketio  # noqa: F401
        except ImportError:
            raise ImportError(
                "python-socketio is required for ChatSocket. "
                "Install with: pip install pranayam-client[realtime]"
            )
        self.url = url
        self.reconnection = reconnection
        self.user_id: str | None = None
        self._client = None

        self.messages = Broadcaster(EVENT_NEW_MESSAGE)
        self.statuses = Broadcaster(EVENT_USER_STATUS)
        self.typing = Broadcaster(EVENT_USER_TYPING)

    @property
    def connected(self) -> bool:
        return self._client is not None and self._client.connected

    def connect(self, user_id: str, wait_timeout: float = 10) -> None:
        """Open the channel for ``user_id``; a no-op if already connected."""
        import socketio
        from socketio.exceptions import ConnectionError as SocketConnectError

        if self.connected:
            return
        client = socketio.Client(reconnection=self.reconnection)
        client.on("connect", lambda: logger.info(f"Socket connected as {user_id}"))
        client.on("disconnect", lambda *args: logger.info("Socket disconnected"))
        client.on(EVENT_NEW_MESSAGE, self._relay(self.messages))
        client.on(EVENT_USER_STATUS, self._relay(self.statuses))
        client.on(EVENT_USER_TYPING, self._relay(self.typing))

        url = f"{self.url}?{urlencode({'userId': user_id})}"
        try:
            client.connect(url, wait_timeout=wait_timeout)
        except SocketConnectError as e:
            raise RealtimeError(f"Could not connect to {self.url}: {e}") from e
        self._client = client
        self.user_id = user_id

    @staticmethod
    def _relay(stream: Broadcaster):
        def handler(data=None):
            if not isinstance(data, dict):
                logger.warning(f"Dropping malformed {stream.name} event: {data!r}")
                return
            stream.publish(data)

        return handler

    def _emit(self, event: str, data: dict) -> bool:
        if not self.connected:
            logger.debug(f"Not connected, dropping {event} emit")
            return False
        self._client.emit(event, data)
        return True

    def send_message(self, payload: dict) -> bool:
        """Emit ``send_message`` with a raw payload (conversationId, content, ...)."""
        return self._emit(EVENT_SEND_MESSAGE, payload)

    def send_typing(self, conversation_id: str, user_id: str, is_typing: bool) -> bool:
        return self._emit(
            EVENT_TYPING,
            {"conversationId": conversation_id, "userId": user_id, "isTyping": is_typing},
        )

    def disconnect(self) -> None:
        if self._client is not None:
            self._client.disconnect()
        self._client = None
        self.user_id = None
