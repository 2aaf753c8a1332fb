from __future__ import annotations

from washboard.core.entities.reservation import Reservation
from washboard.core.repositories.reservation_repository import ReservationRepository


class ListReservationsUseCase:
    def __init__(self, *, reservation_repo: ReservationRepository) -> None:
        self._reservation_repo = reservation_repo

    def execute(self) -> list[Reservation]:
        return self._reservation_repo.list_all()
