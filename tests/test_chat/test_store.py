"""Tests for the local SQLite message store."""

import sqlite3

import pytest

from pranayam_client.chat.models import Message, MessageStatus
from pranayam_client.chat.store import MessageStore
from pranayam_client.exceptions import InvalidStatusTransition, MessageStoreError


def make_message(message_id, conversation_id="c1", ts="2024-01-15T10:00:00.000000Z", **kwargs):
    kwargs.setdefault("text", f"text of {message_id}")
    kwargs.setdefault("is_sent", True)
    return Message(id=message_id, conversation_id=conversation_id, timestamp=ts, **kwargs)


@pytest.fixture
def store():
    s = MessageStore()
    yield s
    s.close()


def test_messages_ordered_by_timestamp(store):
    store.insert_messages([
        make_message("b", ts="2024-01-15T10:05:00.000000Z"),
        make_message("a", ts="2024-01-15T10:00:00.000000Z"),
        make_message("c", ts="2024-01-15T10:10:00.000000Z"),
    ])
    assert [m.id for m in store.get_messages("c1")] == ["a", "b", "c"]


def test_insert_replaces_by_id(store):
    store.insert_message(make_message("m1", text="first"))
    store.insert_message(make_message("m1", text="second"))
    messages = store.get_messages("c1")
    assert len(messages) == 1
    assert messages[0].text == "second"


def test_roundtrip_preserves_fields(store):
    original = make_message(
        "m1", is_sent=False, status=MessageStatus.DELIVERED,
        voice_url="https://cdn.example.com/v.m4a", duration="0:12",
    )
    store.insert_message(original)
    assert store.get_message("m1") == original


def test_delete_for_conversation_leaves_others(store):
    store.insert_messages([make_message("a"), make_message("b", conversation_id="c2")])
    store.delete_messages_for_conversation("c1")
    assert store.get_messages("c1") == []
    assert [m.id for m in store.get_messages("c2")] == ["b"]


def test_delete_message(store):
    store.insert_message(make_message("a"))
    store.delete_message("a")
    store.delete_message("missing")
    assert store.get_message("a") is None


def test_replace_conversation(store):
    store.insert_messages([
        make_message("old"),
        make_message("other", conversation_id="c2"),
    ])
    store.replace_conversation("c1", [
        make_message("n2", ts="2024-01-15T11:00:00.000000Z"),
        make_message("n1", ts="2024-01-15T09:00:00.000000Z"),
    ])
    assert [m.id for m in store.get_messages("c1")] == ["n1", "n2"]
    assert [m.id for m in store.get_messages("c2")] == ["other"]


def test_replace_conversation_rejects_foreign_message(store):
    store.insert_message(make_message("keep"))
    with pytest.raises(MessageStoreError, match="belongs to c2"):
        store.replace_conversation("c1", [make_message("x", conversation_id="c2")])
    assert [m.id for m in store.get_messages("c1")] == ["keep"]


def test_replace_conversation_is_atomic(store):
    store.insert_message(make_message("keep"))
    broken = make_message("n1")
    object.__setattr__(broken, "text", None)  # violates NOT NULL
    with pytest.raises(MessageStoreError):
        store.replace_conversation("c1", [make_message("n0"), broken])
    assert [m.id for m in store.get_messages("c1")] == ["keep"]


def test_observer_never_sees_empty_refresh(store):
    store.insert_message(make_message("old"))
    seen = []
    store.observe("c1", lambda msgs: seen.append([m.id for m in msgs]))
    store.replace_conversation("c1", [make_message("new")])
    assert seen == [["old"], ["new"]]


def test_update_status_forward(store):
    store.insert_message(make_message("m1", status=MessageStatus.SENT))
    assert store.update_status("m1", MessageStatus.DELIVERED) is True
    assert store.update_status("m1", MessageStatus.READ) is True
    assert store.get_message("m1").status == MessageStatus.READ


def test_update_status_same_or_missing_is_noop(store):
    store.insert_message(make_message("m1", status=MessageStatus.SENT))
    assert store.update_status("m1", MessageStatus.SENT) is False
    assert store.update_status("nope", MessageStatus.READ) is False


@pytest.mark.parametrize("start,target", [
    (MessageStatus.READ, MessageStatus.DELIVERED),
    (MessageStatus.DELIVERED, MessageStatus.SENT),
    (MessageStatus.FAILED, MessageStatus.SENT),
    (MessageStatus.SENDING, MessageStatus.READ),
])
def test_update_status_rejects_illegal(store, start, target):
    store.insert_message(make_message("m1", status=start))
    with pytest.raises(InvalidStatusTransition):
        store.update_status("m1", target)


def test_observe_pushes_initial_and_on_write(store):
    seen = []
    unsubscribe = store.observe("c1", lambda msgs: seen.append(len(msgs)))
    store.insert_message(make_message("a"))
    store.insert_message(make_message("z", conversation_id="c2"))
    unsubscribe()
    store.insert_message(make_message("b"))
    assert seen == [0, 1]


def test_failing_observer_does_not_break_writes(store):
    def bad(msgs):
        if msgs:
            raise RuntimeError("ui crashed")

    store.observe("c1", bad)
    store.insert_message(make_message("a"))
    assert store.get_message("a") is not None


def test_oldest_timestamp(store):
    assert store.oldest_timestamp("c1") is None
    store.insert_messages([
        make_message("a", ts="2024-01-15T10:00:00.000000Z"),
        make_message("b", ts="2024-01-14T10:00:00.000000Z"),
    ])
    assert store.oldest_timestamp("c1") == "2024-01-14T10:00:00.000000Z"


def test_oldest_timestamp_on_closed_store_raises():
    store = MessageStore()
    store.close()
    with pytest.raises(MessageStoreError, match="oldest timestamp"):
        store.oldest_timestamp("c1")


def test_file_backed_store_persists(tmp_path):
    path = tmp_path / "cache" / "messages.db"
    store = MessageStore(path)
    store.insert_message(make_message("m1"))
    store.close()

    conn = sqlite3.connect(str(path))
    count = conn.execute("SELECT COUNT(*) FROM messages").fetchone()[0]
    conn.close()
    assert count == 1
    assert MessageStore(path).get_message("m1") is not None
