from __future__ import annotations

import time
from dataclasses import dataclass
from enum import Enum
from typing import Any
from uuid import uuid4

from washboard.core.entities.timestamps import iso_utc


class TimeSlot(str, Enum):
    SLOT_08_10 = "08-10"
    SLOT_10_12 = "10-12"
    SLOT_12_14 = "12-14"
    SLOT_14_16 = "14-16"
    SLOT_16_18 = "16-18"
    SLOT_18_20 = "18-20"
    SLOT_20_22 = "20-22"


@dataclass(frozen=True, slots=True)
class ReservationDraft:
    date: str
    time_slot: TimeSlot
    user_id: str
    user_color: str | None = None


@dataclass(frozen=True, slots=True)
class Reservation:
    id: str
    date: str
    time_slot: TimeSlot
    user_id: str
    user_color: str | None
    created_at: str

    @classmethod
    def from_draft(cls, draft: ReservationDraft) -> Reservation:
        """
        Stamp a draft with its identity and creation time.

        The id is derived from the slot and the creation instant, plus a random suffix so that
        two creations in the same millisecond never share an id.
        """
        slot = TimeSlot(draft.time_slot)
        millis = int(time.time() * 1000)
        return cls(
            id=f"{draft.date}-{slot.value}-{millis}-{uuid4().hex[:8]}",
            date=draft.date,
            time_slot=slot,
            user_id=draft.user_id,
            user_color=draft.user_color,
            created_at=iso_utc(),
        )

    @property
    def slot_key(self) -> tuple[str, str]:
        return self.date, self.time_slot.value

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "date": self.date,
            "timeSlot": self.time_slot.value,
            "userId": self.user_id,
            "userColor": self.user_color,
            "createdAt": self.created_at,
        }
