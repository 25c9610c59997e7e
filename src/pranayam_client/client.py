"""One object that wires config, session, REST API, cache and chat together."""

from __future__ import annotations

import logging

from pranayam_client.api.client import PranayamAPI
from pranayam_client.auth.login import LoginFlow
from pranayam_client.auth.session import SessionStore
from pranayam_client.chat.controller import ChatController
from pranayam_client.chat.store import MessageStore
from pranayam_client.chat.sync import ChatSync
from pranayam_client.config import ClientConfig
from pranayam_client.discovery.deck import DiscoveryDeck
from pranayam_client.realtime.socket import ChatSocket

logger = logging.getLogger(__name__)


class PranayamClient:
    """Application-wide singletons, built lazily from a ClientConfig.

    Example:
        client = PranayamClient()
        client.api.verify_otp("+919800000000", "123456")
        with client.open_chat("conv-1") as chat:
            chat.on_text_changed("Hi!")
            chat.send()
    """

    def __init__(self, config: ClientConfig | None = None, **api_kwargs):
        self.config = config or ClientConfig.from_env()
        self.session = SessionStore(self.config.session_path)
        self.api = PranayamAPI(self.config, session=self.session, **api_kwargs)
        self._store: MessageStore | None = None

    @property
    def store(self) -> MessageStore:
        if self._store is None:
            self._store = MessageStore(self.config.database_path)
        return self._store

    def chat_sync(self) -> ChatSync:
        return ChatSync(self.api, self.store, current_user_id=self.session.get_user_id())

    def login_flow(self) -> LoginFlow:
        return LoginFlow(self.api)

    def discovery_deck(self) -> DiscoveryDeck:
        """Deck for the signed-in user. Raises AuthError when nobody is signed in."""
        return DiscoveryDeck(self.api, self.session.require_user_id())

    def open_chat(
        self,
        conversation_id: str,
        counterpart_id: str | None = None,
    ) -> ChatController:
        """Build a controller for one chat screen with its own socket.

        The controller is not opened; use it as a context manager or call
        ``open()``. Raises AuthError when nobody is signed in.
        """
        user_id = self.session.require_user_id()
        return ChatController(
            conversation_id,
            user_id,
            self.chat_sync(),
            ChatSocket(self.config.socket_url),
            counterpart_id=counterpart_id,
        )

    def logout(self) -> None:
        """Forget the session and drop the local message cache."""
        self.session.logout()
        if self._store is not None:
            self._store.close()
            self._store = None
        if self.config.database_path.exists():
            self.config.database_path.unlink()
        logger.info("Logged out and cleared local cache")

    def close(self) -> None:
        self.api.close()
        if self._store is not None:
            self._store.close()
            self._store = None
