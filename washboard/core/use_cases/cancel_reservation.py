from __future__ import annotations

from loguru import logger

from washboard.core.entities.notification import ChangeType, ReservationChanged
from washboard.core.entities.reservation import Reservation
from washboard.core.repositories.errors import SlotNotFoundError
from washboard.core.repositories.notification_publisher import NotificationPublisher
from washboard.core.repositories.reservation_repository import ReservationRepository


class NotFoundError(Exception):
    """Raise to map to HTTP 404."""


class CancelReservationUseCase:
    def __init__(
            self,
            *,
            reservation_repo: ReservationRepository,
            publisher: NotificationPublisher,
    ) -> None:
        self._reservation_repo = reservation_repo
        self._publisher = publisher

    def execute(self, *, date: str, time_slot: str) -> Reservation:
        try:
            removed = self._reservation_repo.remove(date, time_slot)
        except SlotNotFoundError as e:
            logger.info(f"Nothing to cancel at {date} {time_slot}")
            raise NotFoundError("Reservation not found") from e

        logger.info(f"Reservation {removed.id} cancelled")

        try:
            self._publisher.publish(ReservationChanged(type=ChangeType.DELETE, reservation=removed))
        except Exception:
            logger.exception(f"Failed to publish delete event for reservation {removed.id}")

        return removed
