from __future__ import annotations

from certifyone.apps.events.broker import EventBroker, StoreEvent


def _event(event_id: str, ok: bool = True) -> StoreEvent:
    return StoreEvent(
        id=event_id,
        type="training.created" if ok else "training.create_failed",
        entityId="rec-1",
        action="create",
        ok=ok,
        message="New session has been successfully added.",
        timestamp="2024-01-01T00:00:00+00:00",
    )


def test_subscribers_receive_published_events():
    broker = EventBroker()
    seen = []
    broker.subscribe(seen.append)

    broker.publish(_event("e1"))

    assert [event.id for event in seen] == ["e1"]


def test_unsubscribed_callback_is_not_called():
    broker = EventBroker()
    seen = []
    broker.subscribe(seen.append)
    broker.unsubscribe(seen.append)

    broker.publish(_event("e1"))

    assert seen == []


def test_failing_subscriber_does_not_block_others():
    broker = EventBroker()
    seen = []

    def broken(event):
        raise RuntimeError("toast renderer crashed")

    broker.subscribe(broken)
    broker.subscribe(seen.append)

    broker.publish(_event("e1"))

    assert len(seen) == 1


def test_replay_since_returns_later_events_and_flags_unknown_ids():
    broker = EventBroker(replay_size=2)
    for event_id in ("e1", "e2", "e3"):
        broker.publish(_event(event_id))

    replay, reset = broker.replay_since(last_event_id="e2")
    assert [event.id for event in replay] == ["e3"]
    assert reset is False

    replay, reset = broker.replay_since(last_event_id="e1")
    assert replay == []
    assert reset is True

