from __future__ import annotations

from loguru import logger
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from washboard.core.entities.reservation import Reservation, ReservationDraft, TimeSlot
from washboard.core.repositories.errors import SlotConflictError, SlotNotFoundError, StorageError
from washboard.core.repositories.reservation_repository import ReservationRepository
from washboard.infrastructure.models.models import ReservationModel


class ReservationRepositoryImpl(ReservationRepository):
    """
    SQLAlchemy slot store.

    Uniqueness of (date, time_slot) is enforced by the table's UNIQUE constraint, so a create is
    a single INSERT whose IntegrityError is the conflict signal. Removal is decided by the row
    count of a DELETE on the primary key, so two racing cancels cannot both succeed.
    """

    def __init__(self, db: Session):
        self.db = db

    def list_all(self) -> list[Reservation]:
        try:
            rows = self.db.scalars(
                select(ReservationModel).order_by(ReservationModel.date, ReservationModel.time_slot)
            ).all()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception("Failed to read reservations")
            raise StorageError("Failed to read reservations") from e
        return [self._to_entity(row) for row in rows]

    def insert(self, draft: ReservationDraft) -> Reservation:
        reservation = Reservation.from_draft(draft)
        self.db.add(
            ReservationModel(
                id=reservation.id,
                date=reservation.date,
                time_slot=reservation.time_slot.value,
                user_id=reservation.user_id,
                user_color=reservation.user_color,
                created_at=reservation.created_at,
            )
        )

        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise SlotConflictError(f"Slot {reservation.date} {reservation.time_slot.value} is taken") from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception(f"Failed to insert reservation {reservation.id}")
            raise StorageError("Failed to insert reservation") from e

        return reservation

    def remove(self, date: str, time_slot: str) -> Reservation:
        try:
            row = self.db.scalars(
                select(ReservationModel).where(
                    ReservationModel.date == date,
                    ReservationModel.time_slot == time_slot,
                )
            ).first()
            if row is None:
                raise SlotNotFoundError(f"No reservation at {date} {time_slot}")

            removed = self._to_entity(row)
            result = self.db.execute(
                delete(ReservationModel)
                .where(ReservationModel.id == removed.id)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                # Another request deleted it between our read and our delete
                self.db.rollback()
                raise SlotNotFoundError(f"No reservation at {date} {time_slot}")

            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception(f"Failed to remove reservation at {date} {time_slot}")
            raise StorageError("Failed to remove reservation") from e

        return removed

    @staticmethod
    def _to_entity(row: ReservationModel) -> Reservation:
        return Reservation(
            id=row.id,
            date=row.date,
            time_slot=TimeSlot(row.time_slot),
            user_id=row.user_id,
            user_color=row.user_color,
            created_at=row.created_at,
        )
