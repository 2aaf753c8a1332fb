from __future__ import annotations

import asyncio

import pytest

from washboard.core.entities.notification import ChangeType, ReservationChanged
from washboard.core.entities.reservation import Reservation, TimeSlot
from washboard.infrastructure.notifications.notification_hub import NotificationHub
from washboard.infrastructure.notifications.sinks import QueueSink, SinkClosedError
from washboard.infrastructure.notifications.sse_codec import decode_frame


class _CollectingSink:
    def __init__(self) -> None:
        self.frames: list[str] = []

    def send(self, frame: str) -> None:
        self.frames.append(frame)


class _BrokenSink:
    def __init__(self) -> None:
        self.attempts = 0

    def send(self, frame: str) -> None:
        self.attempts += 1
        raise SinkClosedError("peer went away")


def _event(change: ChangeType = ChangeType.ADD) -> ReservationChanged:
    return ReservationChanged(
        type=change,
        reservation=Reservation(
            id="2024-06-10-10-12-1718000000000-abcd1234",
            date="2024-06-10",
            time_slot=TimeSlot.SLOT_10_12,
            user_id="u1",
            user_color="#123456",
            created_at="2024-06-01T08:00:00.000Z",
        ),
    )


def test_publish_reaches_every_subscriber_with_sse_frame() -> None:
    hub = NotificationHub("test")
    sinks = [_CollectingSink() for _ in range(3)]
    for sink in sinks:
        hub.subscribe(sink)

    assert hub.publish(_event()) == 3

    for sink in sinks:
        assert len(sink.frames) == 1
        frame = sink.frames[0]
        assert frame.startswith("data: ") and frame.endswith("\n\n")
        envelope = decode_frame(frame)
        assert envelope["type"] == "add"
        assert envelope["reservation"]["timeSlot"] == "10-12"
        assert envelope["reservation"]["userColor"] == "#123456"


def test_broken_sink_does_not_stop_fan_out_and_is_pruned() -> None:
    hub = NotificationHub("test")
    before = _CollectingSink()
    broken = _BrokenSink()
    after = _CollectingSink()
    hub.subscribe(before)
    hub.subscribe(broken)
    hub.subscribe(after)

    assert hub.publish(_event()) == 2
    assert len(before.frames) == 1
    assert len(after.frames) == 1
    assert hub.subscriber_count == 2

    # pruned: the broken sink is not tried again
    hub.publish(_event(ChangeType.DELETE))
    assert broken.attempts == 1
    assert decode_frame(after.frames[-1])["type"] == "delete"


def test_subscriber_only_sees_events_published_after_subscribing() -> None:
    hub = NotificationHub("test")
    hub.publish(_event())

    late = _CollectingSink()
    hub.subscribe(late)
    assert late.frames == []

    hub.publish(_event(ChangeType.DELETE))
    assert [decode_frame(f)["type"] for f in late.frames] == ["delete"]


def test_unsubscribe_is_idempotent() -> None:
    hub = NotificationHub("test")
    sink = _CollectingSink()
    other = _CollectingSink()
    subscription_id = hub.subscribe(sink)
    hub.subscribe(other)

    hub.unsubscribe(subscription_id)
    hub.unsubscribe(subscription_id)
    hub.unsubscribe("never-registered")

    assert hub.subscriber_count == 1
    hub.publish(_event())
    assert sink.frames == []
    assert len(other.frames) == 1


def test_publish_with_no_subscribers_is_a_no_op() -> None:
    assert NotificationHub("test").publish(_event()) == 0


def test_queue_sink_rejects_writes_once_closed() -> None:
    async def scenario() -> None:
        sink = QueueSink(asyncio.get_running_loop(), maxsize=4)
        sink.send("data: {}\n\n")
        assert await sink.receive() == "data: {}\n\n"

        sink.close()
        with pytest.raises(SinkClosedError):
            sink.send("data: {}\n\n")

    asyncio.run(scenario())


def test_queue_sink_fails_after_its_loop_is_gone() -> None:
    loop = asyncio.new_event_loop()
    sink = QueueSink(loop, maxsize=4)
    loop.close()

    with pytest.raises(SinkClosedError):
        sink.send("data: {}\n\n")
    assert sink.closed
