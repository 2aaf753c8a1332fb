"""
Notification Hub

In-process registry of live stream subscribers with best-effort fan-out.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from uuid import uuid4

from loguru import logger

from washboard.core.entities.notification import Notification
from washboard.infrastructure.notifications.sinks import Sink
from washboard.infrastructure.notifications.sse_codec import encode_frame


@dataclass(frozen=True, slots=True)
class Subscriber:
    id: str
    sink: Sink


class NotificationHub:
    """
    Delivers every published event to every registered sink.

    Registry mutation and the fan-out loop share one lock. The lock is only held while sinks
    are handed a frame; sinks never block, so the critical section stays short. A sink that
    raises is dropped on the spot and the remaining sinks are still served.
    """

    def __init__(self, topic: str) -> None:
        self.topic = topic
        self._subscribers: dict[str, Subscriber] = {}
        self._lock = threading.Lock()

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def subscribe(self, sink: Sink) -> str:
        subscription_id = uuid4().hex
        with self._lock:
            self._subscribers[subscription_id] = Subscriber(id=subscription_id, sink=sink)
            total = len(self._subscribers)

        logger.info(f"[{self.topic}] subscriber {subscription_id} added, total={total}")
        return subscription_id

    def unsubscribe(self, subscription_id: str) -> None:
        with self._lock:
            removed = self._subscribers.pop(subscription_id, None)
            total = len(self._subscribers)

        if removed is not None:
            logger.info(f"[{self.topic}] subscriber {subscription_id} removed, remaining={total}")

    def publish(self, event: Notification) -> int:
        """Returns the number of sinks that accepted the frame."""
        frame = encode_frame(event.to_payload())
        delivered = 0
        dead: list[str] = []

        with self._lock:
            for subscription_id, subscriber in self._subscribers.items():
                try:
                    subscriber.sink.send(frame)
                except Exception as e:
                    logger.warning(f"[{self.topic}] dropping subscriber {subscription_id}: {e!r}")
                    dead.append(subscription_id)
                else:
                    delivered += 1

            for subscription_id in dead:
                del self._subscribers[subscription_id]

        logger.debug(f"[{self.topic}] published to {delivered} subscribers, dropped {len(dead)}")
        return delivered


# Process-wide hubs, one per stream
reservation_hub = NotificationHub("reservations")
profile_hub = NotificationHub("profiles")
