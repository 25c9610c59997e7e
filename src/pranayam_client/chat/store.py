"""On-device SQLite cache of chat messages with live query subscriptions."""

from __future__ import annotations

import logging
import sqlite3
import threading
from collections import defaultdict
from pathlib import Path
from typing import Callable, Iterable

from pranayam_client.chat.models import (
    ContentType,
    Message,
    MessageStatus,
    MessageType,
    can_transition,
)
from pranayam_client.exceptions import InvalidStatusTransition, MessageStoreError

logger = logging.getLogger(__name__)

MessagesCallback = Callable[[list[Message]], None]

_SCHEMA = """
CREATE TABLE IF NOT EXISTS messages (
    id TEXT PRIMARY KEY,
    conversation_id TEXT NOT NULL,
    text TEXT NOT NULL,
    timestamp TEXT NOT NULL,
    is_sent INTEGER NOT NULL,
    content_type TEXT NOT NULL,
    status TEXT NOT NULL,
    image_url TEXT,
    voice_url TEXT,
    duration TEXT,
    type TEXT NOT NULL DEFAULT 'REGULAR'
);
CREATE INDEX IF NOT EXISTS idx_messages_conversation
    ON messages (conversation_id, timestamp);
"""

_INSERT = """
INSERT OR REPLACE INTO messages (
    id, conversation_id, text, timestamp, is_sent,
    content_type, status, image_url, voice_url, duration, type
) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
"""


def _to_row(message: Message) -> tuple:
    return (
        message.id,
        message.conversation_id,
        message.text,
        message.timestamp,
        int(message.is_sent),
        message.content_type.value,
        message.status.value,
        message.image_url,
        message.voice_url,
        message.duration,
        message.message_type.value,
    )


def _from_row(row: sqlite3.Row) -> Message:
    return Message(
        id=row["id"],
        conversation_id=row["conversation_id"],
        text=row["text"],
        timestamp=row["timestamp"],
        is_sent=bool(row["is_sent"]),
        content_type=ContentType(row["content_type"]),
        status=MessageStatus(row["status"]),
        image_url=row["image_url"],
        voice_url=row["voice_url"],
        duration=row["duration"],
        message_type=MessageType(row["type"]),
    )


class MessageStore:
    """Local message table keyed by id, read per conversation in time order.

    Writes notify ``observe`` subscribers of every conversation they touched.
    The connection is shared across threads (socket callbacks run on the
    Socket.IO client's thread) and serialized with a lock.

    Args:
        db_path: SQLite file, or ``":memory:"`` for a throwaway cache.
    """

    def __init__(self, db_path: Path | str = ":memory:"):
        self.db_path = db_path
        self._lock = threading.RLock()
        self._observers: dict[str, list[MessagesCallback]] = defaultdict(list)
        try:
            if str(db_path) != ":memory:":
                Path(db_path).parent.mkdir(parents=True, exist_ok=True)
            self._conn = sqlite3.connect(str(db_path), check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
            self._conn.executescript(_SCHEMA)
        except (sqlite3.Error, OSError) as e:
            raise MessageStoreError(f"Failed to open message store at {db_path}: {e}") from e

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    # ---- Reads ----

    def get_messages(self, conversation_id: str) -> list[Message]:
        """All cached messages for a conversation, oldest first."""
        with self._lock:
            try:
                rows = self._conn.execute(
                    """
                    SELECT * FROM messages
                    WHERE conversation_id = ?
                    ORDER BY timestamp ASC, rowid ASC
                    """,
                    (conversation_id,),
                ).fetchall()
            except sqlite3.Error as e:
                raise MessageStoreError(f"Failed to read messages: {e}") from e
        return [_from_row(row) for row in rows]

    def get_message(self, message_id: str) -> Message | None:
        with self._lock:
            try:
                row = self._conn.execute(
                    "SELECT * FROM messages WHERE id = ?", (message_id,)
                ).fetchone()
            except sqlite3.Error as e:
                raise MessageStoreError(f"Failed to read message {message_id}: {e}") from e
        return _from_row(row) if row else None

    def oldest_timestamp(self, conversation_id: str) -> str | None:
        with self._lock:
            try:
                row = self._conn.execute(
                    "SELECT MIN(timestamp) FROM messages WHERE conversation_id = ?",
                    (conversation_id,),
                ).fetchone()
            except sqlite3.Error as e:
                raise MessageStoreError(f"Failed to read oldest timestamp: {e}") from e
        return row[0] if row else None

    # ---- Writes ----

    def _write(self, statements: Iterable[tuple[str, Iterable]], touched: set[str]) -> None:
        """Run statements in one transaction, then notify observers."""
        with self._lock:
            try:
                with self._conn:
                    for sql, params in statements:
                        self._conn.execute(sql, tuple(params))
            except sqlite3.Error as e:
                raise MessageStoreError(f"Message store write failed: {e}") from e
        self._notify(touched)

    def insert_message(self, message: Message) -> None:
        """Insert or replace by id."""
        self._write([(_INSERT, _to_row(message))], {message.conversation_id})

    def insert_messages(self, messages: list[Message]) -> None:
        if not messages:
            return
        self._write(
            [(_INSERT, _to_row(m)) for m in messages],
            {m.conversation_id for m in messages},
        )

    def delete_message(self, message_id: str) -> None:
        existing = self.get_message(message_id)
        if existing is None:
            return
        self._write(
            [("DELETE FROM messages WHERE id = ?", (message_id,))],
            {existing.conversation_id},
        )

    def delete_messages_for_conversation(self, conversation_id: str) -> None:
        self._write(
            [("DELETE FROM messages WHERE conversation_id = ?", (conversation_id,))],
            {conversation_id},
        )

    def replace_message(self, old_id: str, message: Message) -> None:
        """Swap one record for another atomically (temp row -> server row)."""
        self._write(
            [
                ("DELETE FROM messages WHERE id = ?", (old_id,)),
                (_INSERT, _to_row(message)),
            ],
            {message.conversation_id},
        )

    def replace_conversation(self, conversation_id: str, messages: list[Message]) -> None:
        """Replace a conversation's whole record set in a single transaction.

        Readers see either the old set or the new one, never an empty
        conversation in between.
        """
        statements: list[tuple[str, Iterable]] = [
            ("DELETE FROM messages WHERE conversation_id = ?", (conversation_id,))
        ]
        for message in messages:
            if message.conversation_id != conversation_id:
                raise MessageStoreError(
                    f"Message {message.id} belongs to {message.conversation_id}, "
                    f"not {conversation_id}"
                )
            statements.append((_INSERT, _to_row(message)))
        self._write(statements, {conversation_id})

    def update_status(self, message_id: str, status: MessageStatus) -> bool:
        """Move a message along the delivery state machine.

        Returns False when the message is unknown or already has ``status``.
        Raises InvalidStatusTransition for backwards or skipped-from-terminal moves.
        """
        existing = self.get_message(message_id)
        if existing is None or existing.status == status:
            return False
        if not can_transition(existing.status, status):
            raise InvalidStatusTransition(
                f"Message {message_id}: {existing.status.value} -> {status.value} not allowed"
            )
        self._write(
            [("UPDATE messages SET status = ? WHERE id = ?", (status.value, message_id))],
            {existing.conversation_id},
        )
        return True

    # ---- Live queries ----

    def observe(self, conversation_id: str, callback: MessagesCallback) -> Callable[[], None]:
        """Push the conversation's message list now and after every write to it.

        Returns a callable that removes the subscription.
        """
        with self._lock:
            self._observers[conversation_id].append(callback)
        callback(self.get_messages(conversation_id))

        def unsubscribe() -> None:
            with self._lock:
                callbacks = self._observers.get(conversation_id, [])
                if callback in callbacks:
                    callbacks.remove(callback)

        return unsubscribe

    def _notify(self, conversation_ids: set[str]) -> None:
        for conversation_id in conversation_ids:
            with self._lock:
                callbacks = list(self._observers.get(conversation_id, ()))
            if not callbacks:
                continue
            messages = self.get_messages(conversation_id)
            for callback in callbacks:
                try:
                    callback(messages)
                except Exception:
                    logger.exception(f"Message observer for {conversation_id} failed")
