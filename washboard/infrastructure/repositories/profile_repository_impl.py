from __future__ import annotations

from loguru import logger
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from washboard.core.entities.profile import Profile
from washboard.core.repositories.errors import StorageError
from washboard.core.repositories.profile_repository import ProfileRepository
from washboard.infrastructure.models.models import ProfileModel


class ProfileRepositoryImpl(ProfileRepository):
    def __init__(self, db: Session) -> None:
        self._db = db

    def get(self, profile_id: str) -> Profile | None:
        try:
            row = self._db.get(ProfileModel, profile_id)
        except SQLAlchemyError as e:
            self._db.rollback()
            raise StorageError("Failed to read profile") from e
        if row is None:
            return None
        return self._to_entity(row)

    def list_all(self) -> list[Profile]:
        try:
            rows = self._db.scalars(select(ProfileModel)).all()
        except SQLAlchemyError as e:
            self._db.rollback()
            raise StorageError("Failed to read profiles") from e
        return [self._to_entity(row) for row in rows]

    def save(self, profile: Profile) -> None:
        try:
            row = self._db.get(ProfileModel, profile.id)
            if row is None:
                row = ProfileModel(id=profile.id)

            row.name = profile.name
            row.color = profile.color
            row.updated_at = profile.updated_at

            self._db.add(row)
            self._db.commit()
        except SQLAlchemyError as e:
            self._db.rollback()
            logger.exception(f"Failed to save profile {profile.id}")
            raise StorageError("Failed to save profile") from e

    @staticmethod
    def _to_entity(row: ProfileModel) -> Profile:
        return Profile(id=row.id, name=row.name, color=row.color, updated_at=row.updated_at)
