from __future__ import annotations

from loguru import logger

from washboard.core.entities.notification import ProfileUpdated
from washboard.core.entities.profile import Profile
from washboard.core.entities.timestamps import iso_utc
from washboard.core.repositories.notification_publisher import NotificationPublisher
from washboard.core.repositories.profile_repository import ProfileRepository


class SaveProfileUseCase:
    """
    Upserts a user's display profile and pushes it to the profile stream.

    Reservations keep the colour they were booked with; only the live profile changes.
    """

    def __init__(self, *, profile_repo: ProfileRepository, publisher: NotificationPublisher) -> None:
        self._profile_repo = profile_repo
        self._publisher = publisher

    def execute(self, *, profile_id: str, name: str, color: str) -> Profile:
        profile = Profile(id=profile_id, name=name, color=color, updated_at=iso_utc())
        self._profile_repo.save(profile)

        try:
            self._publisher.publish(ProfileUpdated(profile=profile))
        except Exception:
            logger.exception(f"Failed to publish profile update for {profile.id}")

        return profile


class ListProfilesUseCase:
    def __init__(self, *, profile_repo: ProfileRepository) -> None:
        self._profile_repo = profile_repo

    def execute(self) -> dict[str, Profile]:
        return {profile.id: profile for profile in self._profile_repo.list_all()}
