from __future__ import annotations

from typing import Protocol

from washboard.core.entities.notification import Notification


class NotificationPublisher(Protocol):
    """
    Fan-out side of the live update stream. Implementations deliver best-effort and must not
    raise because a single subscriber went away.
    """

    def publish(self, event: Notification) -> int:
        raise NotImplementedError
