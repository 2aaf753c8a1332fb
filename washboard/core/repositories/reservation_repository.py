from __future__ import annotations

from abc import ABC, abstractmethod

from washboard.core.entities.reservation import Reservation, ReservationDraft


class ReservationRepository(ABC):
    @abstractmethod
    def list_all(self) -> list[Reservation]:
        raise NotImplementedError

    @abstractmethod
    def insert(self, draft: ReservationDraft) -> Reservation:
        """
        Persist a new reservation in one atomic step.

        Raises SlotConflictError if the slot is already held, StorageError on any other failure.
        """
        raise NotImplementedError

    @abstractmethod
    def remove(self, date: str, time_slot: str) -> Reservation:
        """
        Delete the reservation holding the slot and return it.

        Raises SlotNotFoundError if nothing (or someone else) removed it first.
        """
        raise NotImplementedError
