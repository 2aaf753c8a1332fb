from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol

from washboard.core.entities.profile import Profile
from washboard.core.entities.reservation import Reservation


class ChangeType(str, Enum):
    ADD = "add"
    DELETE = "delete"


class Notification(Protocol):
    """Anything that can be fanned out to live subscribers as a JSON envelope."""

    def to_payload(self) -> dict[str, Any]:
        raise NotImplementedError


@dataclass(frozen=True, slots=True)
class ReservationChanged:
    type: ChangeType
    reservation: Reservation

    def to_payload(self) -> dict[str, Any]:
        return {"type": self.type.value, "reservation": self.reservation.to_dict()}


@dataclass(frozen=True, slots=True)
class ProfileUpdated:
    profile: Profile

    def to_payload(self) -> dict[str, Any]:
        return {"type": "profile_update", "profile": self.profile.to_dict()}
