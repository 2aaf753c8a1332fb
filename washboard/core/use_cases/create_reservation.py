from __future__ import annotations

from loguru import logger

from washboard.core.entities.notification import ChangeType, ReservationChanged
from washboard.core.entities.reservation import Reservation, ReservationDraft
from washboard.core.repositories.errors import SlotConflictError
from washboard.core.repositories.notification_publisher import NotificationPublisher
from washboard.core.repositories.reservation_repository import ReservationRepository


class AlreadyBookedError(Exception):
    """Raise to map to HTTP 409."""


class CreateReservationUseCase:
    """
    Claims a slot and announces it to live subscribers.

    The slot store's uniqueness constraint is the only arbiter between concurrent creators:
    there is deliberately no read-before-insert here.
    """

    def __init__(
            self,
            *,
            reservation_repo: ReservationRepository,
            publisher: NotificationPublisher,
    ) -> None:
        self._reservation_repo = reservation_repo
        self._publisher = publisher

    def execute(self, draft: ReservationDraft) -> Reservation:
        try:
            reservation = self._reservation_repo.insert(draft)
        except SlotConflictError as e:
            logger.info(f"Slot {draft.date} {draft.time_slot.value} already booked, rejecting user {draft.user_id}")
            raise AlreadyBookedError("Slot already reserved") from e

        logger.info(f"Reservation {reservation.id} created for user {reservation.user_id}")

        try:
            self._publisher.publish(ReservationChanged(type=ChangeType.ADD, reservation=reservation))
        except Exception:
            logger.exception(f"Failed to publish add event for reservation {reservation.id}")

        return reservation
