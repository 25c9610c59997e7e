"""Reconciles the local message cache with the REST history and live events.

Sends are optimistic: a temporary record is written first and swapped for
the server's record once the API confirms it, or flagged FAILED otherwise.
History refreshes replace a conversation's cached page in one transaction.
Live messages are written through the cache before anyone displays them, and
every write is an upsert by id, so a live echo of a confirmed send collapses
onto the same row.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import replace
from typing import Callable

from pranayam_client.api.client import DEFAULT_PAGE_SIZE, PranayamAPI
from pranayam_client.api.parser import parse_message, utc_now
from pranayam_client.chat.models import (
    ContentType,
    Message,
    MessageStatus,
    can_transition,
)
from pranayam_client.chat.store import MessageStore, MessagesCallback
from pranayam_client.exceptions import (
    APIError,
    PranayamClientError,
    ResponseFormatError,
)

logger = logging.getLogger(__name__)

_PENDING = (MessageStatus.SENDING, MessageStatus.FAILED)


class ChatSync:
    """Chat read/write path shared by every open conversation.

    Args:
        api: REST client used for history pages and sends.
        store: Local message cache.
        current_user_id: Signed-in user, used to tell the direction of
            live messages that carry only a ``senderId``.
    """

    def __init__(
        self,
        api: PranayamAPI,
        store: MessageStore,
        current_user_id: str | None = None,
    ):
        self.api = api
        self.store = store
        self.current_user_id = current_user_id

    # ---- Reads ----

    def messages(self, conversation_id: str) -> list[Message]:
        return self.store.get_messages(conversation_id)

    def observe(self, conversation_id: str, callback: MessagesCallback) -> Callable[[], None]:
        return self.store.observe(conversation_id, callback)

    # ---- Sending ----

    def send_message(self, conversation_id: str, text: str) -> Message | None:
        """Optimistically send ``text``; returns the resulting record.

        Blank text is ignored (returns None, nothing stored or sent). On
        success the temporary record is replaced by the server's; on any
        failure it stays, with status FAILED. There is no retry.
        """
        text = text.strip()
        if not text:
            return None

        pending = Message(
            id=str(uuid.uuid4()),
            conversation_id=conversation_id,
            text=text,
            timestamp=utc_now(),
            is_sent=True,
            content_type=ContentType.TEXT,
            status=MessageStatus.SENDING,
        )
        self.store.insert_message(pending)

        try:
            sent = self.api.send_message(conversation_id, text)
        except APIError as e:
            logger.warning(f"Send to {conversation_id} failed: {e}")
            return self._mark_failed(pending)
        except Exception:
            logger.exception(f"Unexpected error sending to {conversation_id}")
            return self._mark_failed(pending)

        sent = replace(sent, status=MessageStatus.SENT, is_sent=True)
        self.store.replace_message(pending.id, sent)
        logger.info(f"Message {sent.id} sent to {conversation_id}")
        return sent

    def _mark_failed(self, pending: Message) -> Message:
        self.store.update_status(pending.id, MessageStatus.FAILED)
        return pending.with_status(MessageStatus.FAILED)

    def resend_message(self, message_id: str) -> Message | None:
        """Send a FAILED message again as a fresh optimistic send."""
        failed = self.store.get_message(message_id)
        if failed is None or failed.status != MessageStatus.FAILED:
            logger.debug(f"Message {message_id} is not a failed send, not resending")
            return None
        self.store.delete_message(message_id)
        return self.send_message(failed.conversation_id, failed.text)

    # ---- History ----

    def refresh_history(
        self,
        conversation_id: str,
        limit: int = DEFAULT_PAGE_SIZE,
        keep_pending: bool = False,
    ) -> bool:
        """Replace the cached conversation with the newest server page.

        Afterwards the cache holds exactly the fetched page, unless
        ``keep_pending`` is set, in which case local SENDING/FAILED records
        that the page does not contain are carried over. Other conversations
        are untouched. Any failure (fetch, malformed page, cache write)
        leaves the cache as it was and returns False.
        """
        try:
            page = self.api.get_messages(conversation_id, limit=limit)
            if keep_pending:
                fetched_ids = {m.id for m in page}
                page = page + [
                    m
                    for m in self.store.get_messages(conversation_id)
                    if m.status in _PENDING and m.id not in fetched_ids
                ]
            page.sort(key=lambda m: m.timestamp)
            self.store.replace_conversation(conversation_id, page)
        except PranayamClientError as e:
            logger.warning(f"History refresh for {conversation_id} failed: {e}")
            return False
        logger.debug(f"Cached {len(page)} messages for {conversation_id}")
        return True

    def load_older(self, conversation_id: str, limit: int = DEFAULT_PAGE_SIZE) -> int:
        """Merge the page preceding the oldest cached message; returns its size."""
        try:
            before = self.store.oldest_timestamp(conversation_id)
        except PranayamClientError as e:
            logger.warning(f"Loading older messages for {conversation_id} failed: {e}")
            return 0
        if before is None:
            if not self.refresh_history(conversation_id, limit=limit):
                return 0
            return len(self.store.get_messages(conversation_id))
        try:
            page = self.api.get_messages(conversation_id, limit=limit, before=before)
            self.store.insert_messages(page)
        except PranayamClientError as e:
            logger.warning(f"Loading older messages for {conversation_id} failed: {e}")
            return 0
        return len(page)

    # ---- Live events ----

    def receive_live(self, payload: dict) -> Message | None:
        """Persist a ``new_message`` socket payload and return it for display.

        For an id already cached, the stored content is kept and only the
        status is merged, and only forwards along the delivery state machine.
        """
        try:
            message = parse_message(payload, current_user_id=self.current_user_id)
        except ResponseFormatError as e:
            logger.warning(f"Ignoring malformed live message: {e}")
            return None

        existing = self.store.get_message(message.id)
        if existing is None:
            self.store.insert_message(message)
            return message
        if existing.status != message.status and can_transition(existing.status, message.status):
            self.store.update_status(existing.id, message.status)
            return existing.with_status(message.status)
        return existing

    # ---- Async wrappers (asyncio.to_thread) ----

    async def asend_message(self, conversation_id: str, text: str) -> Message | None:
        """Async version of send_message."""
        return await asyncio.to_thread(self.send_message, conversation_id, text)

    async def arefresh_history(self, conversation_id: str, **kwargs) -> bool:
        """Async version of refresh_history."""
        return await asyncio.to_thread(self.refresh_history, conversation_id, **kwargs)
