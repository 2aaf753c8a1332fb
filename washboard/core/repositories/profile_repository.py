from __future__ import annotations

from abc import ABC, abstractmethod

from washboard.core.entities.profile import Profile


class ProfileRepository(ABC):
    @abstractmethod
    def get(self, profile_id: str) -> Profile | None:
        raise NotImplementedError

    @abstractmethod
    def list_all(self) -> list[Profile]:
        raise NotImplementedError

    @abstractmethod
    def save(self, profile: Profile) -> None:
        raise NotImplementedError
