from __future__ import annotations

import datetime as dt
from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field

from washboard.core.entities.access_log import AccessAction
from washboard.core.entities.reservation import TimeSlot


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class ReservationCreate(_CamelModel):
    date: dt.date
    time_slot: TimeSlot = Field(alias="timeSlot")
    user_id: str = Field(alias="userId", min_length=1)
    user_color: str | None = Field(default=None, alias="userColor")


class Reservation(_CamelModel):
    id: str
    date: str
    time_slot: TimeSlot = Field(alias="timeSlot")
    user_id: str = Field(alias="userId")
    user_color: str | None = Field(default=None, alias="userColor")
    created_at: str = Field(alias="createdAt")


class CancelResult(BaseModel):
    success: bool


class ProfileSave(BaseModel):
    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    color: str = Field(min_length=1)


class Profile(_CamelModel):
    id: str
    name: str
    color: str
    updated_at: str = Field(alias="updatedAt")


class AccessLog(_CamelModel):
    id: int
    user_id: str | None = Field(default=None, alias="userId")
    user_name: str | None = Field(default=None, alias="userName")
    action: AccessAction
    detail: str | None = None
    ip_address: str | None = Field(default=None, alias="ipAddress")
    user_agent: str | None = Field(default=None, alias="userAgent")
    accessed_at: str = Field(alias="accessedAt")


class AccessLogPage(BaseModel):
    logs: List[AccessLog]
    total: int
    limit: int
    offset: int


class AccessSummary(_CamelModel):
    total_today: int = Field(alias="totalToday")
    unique_users_today: int = Field(alias="uniqueUsersToday")
    action_counts: Dict[str, int] = Field(alias="actionCounts")
