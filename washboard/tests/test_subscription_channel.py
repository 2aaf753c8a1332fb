from __future__ import annotations

import asyncio
import threading
import time

import pytest

from washboard.core.entities.notification import ChangeType, ReservationChanged
from washboard.core.entities.reservation import Reservation, TimeSlot
from washboard.infrastructure.notifications.notification_hub import NotificationHub
from washboard.infrastructure.notifications.sse_codec import decode_frame
from washboard.infrastructure.notifications.subscription_channel import SubscriptionChannel, new_client_id


def _event(slot: TimeSlot = TimeSlot.SLOT_10_12, change: ChangeType = ChangeType.ADD) -> ReservationChanged:
    return ReservationChanged(
        type=change,
        reservation=Reservation(
            id=f"2024-06-10-{slot.value}-1718000000000-abcd1234",
            date="2024-06-10",
            time_slot=slot,
            user_id="u1",
            user_color=None,
            created_at="2024-06-01T08:00:00.000Z",
        ),
    )


async def _next(stream) -> str:
    return await asyncio.wait_for(stream.__anext__(), timeout=2)


def test_connected_envelope_comes_first_and_carries_client_id_and_retry() -> None:
    async def scenario() -> None:
        hub = NotificationHub("test")
        channel = SubscriptionChannel(hub, heartbeat_interval=60, retry_ms=3000, client_id="client-1-abc")
        stream = channel.stream()

        first = await _next(stream)
        assert first.startswith("retry: 3000\n")
        assert decode_frame(first) == {"type": "connected", "clientId": "client-1-abc"}
        assert hub.subscriber_count == 1

        await stream.aclose()

    asyncio.run(scenario())


def test_published_events_follow_in_order_then_close_unsubscribes() -> None:
    closed: list[str] = []

    async def scenario() -> None:
        hub = NotificationHub("test")
        channel = SubscriptionChannel(hub, heartbeat_interval=60, on_close=closed.append)
        stream = channel.stream()
        await _next(stream)

        hub.publish(_event(TimeSlot.SLOT_08_10))
        hub.publish(_event(TimeSlot.SLOT_08_10, ChangeType.DELETE))

        first = decode_frame(await _next(stream))
        second = decode_frame(await _next(stream))
        assert (first["type"], first["reservation"]["timeSlot"]) == ("add", "08-10")
        assert (second["type"], second["reservation"]["timeSlot"]) == ("delete", "08-10")

        await stream.aclose()
        assert hub.subscriber_count == 0
        assert closed == [channel.client_id]

        # publishing after the client left reaches nobody and raises nothing
        assert hub.publish(_event()) == 0

    asyncio.run(scenario())


def test_heartbeat_is_emitted_while_idle() -> None:
    async def scenario() -> None:
        hub = NotificationHub("test")
        stream = SubscriptionChannel(hub, heartbeat_interval=0.01).stream()
        await _next(stream)

        assert decode_frame(await _next(stream)) == {"type": "heartbeat"}
        assert decode_frame(await _next(stream)) == {"type": "heartbeat"}

        await stream.aclose()

    asyncio.run(scenario())


def test_transport_cancellation_tears_the_channel_down() -> None:
    closed: list[str] = []

    async def scenario() -> None:
        hub = NotificationHub("test")
        stream = SubscriptionChannel(hub, heartbeat_interval=60, on_close=closed.append).stream()

        async def consume() -> None:
            async for _ in stream:
                pass

        task = asyncio.create_task(consume())
        while hub.subscriber_count == 0:
            await asyncio.sleep(0)
        await asyncio.sleep(0.01)

        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert hub.subscriber_count == 0
        assert len(closed) == 1

    asyncio.run(scenario())


def test_slow_consumer_overflow_ends_stream_and_is_pruned() -> None:
    async def scenario() -> None:
        hub = NotificationHub("test")
        stream = SubscriptionChannel(hub, heartbeat_interval=60, buffer_size=2).stream()
        await _next(stream)

        for slot in (TimeSlot.SLOT_08_10, TimeSlot.SLOT_10_12, TimeSlot.SLOT_12_14):
            hub.publish(_event(slot))

        delivered = [decode_frame(await _next(stream))["reservation"]["timeSlot"] for _ in range(2)]
        assert delivered == ["08-10", "10-12"]

        with pytest.raises(StopAsyncIteration):
            await _next(stream)
        assert hub.subscriber_count == 0

    asyncio.run(scenario())


def test_client_ids_are_fresh_per_connection() -> None:
    ids = {new_client_id() for _ in range(50)}
    assert len(ids) == 50
    assert all(i.startswith("client-") for i in ids)
    assert new_client_id("profile-client").startswith("profile-client-")


def test_close_callback_runs_off_the_event_loop() -> None:
    callback_threads: list[int] = []

    def slow_on_close(client_id: str) -> None:
        callback_threads.append(threading.get_ident())
        time.sleep(0.2)

    async def scenario() -> int:
        hub = NotificationHub("test")
        stream = SubscriptionChannel(hub, heartbeat_interval=60, on_close=slow_on_close).stream()
        await _next(stream)

        ticks = 0

        async def ticker() -> None:
            nonlocal ticks
            while True:
                await asyncio.sleep(0.01)
                ticks += 1

        ticking = asyncio.create_task(ticker())
        await stream.aclose()
        ticking.cancel()
        return ticks

    ticks = asyncio.run(scenario())

    assert callback_threads and callback_threads[0] != threading.get_ident()
    assert ticks >= 5


def test_heartbeat_task_is_finished_after_close() -> None:
    async def scenario() -> None:
        hub = NotificationHub("test")
        stream = SubscriptionChannel(hub, heartbeat_interval=60).stream()
        await _next(stream)
        await stream.aclose()

        others = [t for t in asyncio.all_tasks() if t is not asyncio.current_task()]
        assert others == []

    asyncio.run(scenario())
