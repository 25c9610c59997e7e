"""Tests for the in-process event broadcaster."""

from pranayam_client.realtime.broadcast import Broadcaster


def test_publish_reaches_all_subscribers():
    stream = Broadcaster("user_status")
    a, b = [], []
    stream.subscribe(a.append)
    stream.subscribe(b.append)
    stream.publish({"isOnline": True})
    assert a == b == [{"isOnline": True}]


def test_late_subscriber_gets_no_replay():
    stream = Broadcaster("user_typing")
    stream.publish({"isTyping": True})
    seen = []
    stream.subscribe(seen.append)
    assert seen == []


def test_unsubscribe():
    stream = Broadcaster("new_message")
    seen = []
    unsubscribe = stream.subscribe(seen.append)
    unsubscribe()
    unsubscribe()
    stream.publish({"id": "m1"})
    assert seen == []
    assert len(stream) == 0


def test_failing_subscriber_does_not_block_others():
    stream = Broadcaster("new_message")
    seen = []

    def boom(event):
        raise ValueError("bad handler")

    stream.subscribe(boom)
    stream.subscribe(seen.append)
    stream.publish({"id": "m1"})
    assert seen == [{"id": "m1"}]
