from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class AccessAction(str, Enum):
    PAGE_VIEW = "page_view"
    RESERVATION_CREATE = "reservation_create"
    RESERVATION_DELETE = "reservation_delete"
    PROFILE_UPDATE = "profile_update"
    SSE_CONNECT = "sse_connect"
    SSE_DISCONNECT = "sse_disconnect"


@dataclass(frozen=True, slots=True)
class AccessRecord:
    """What a caller knows when it logs an action; the log assigns id and timestamp."""
    action: AccessAction
    user_id: str | None = None
    user_name: str | None = None
    detail: str | None = None
    ip_address: str | None = None
    user_agent: str | None = None


@dataclass(frozen=True, slots=True)
class AccessLogEntry:
    id: int
    action: AccessAction
    user_id: str | None
    user_name: str | None
    detail: str | None
    ip_address: str | None
    user_agent: str | None
    accessed_at: str


@dataclass(frozen=True, slots=True)
class AccessLogFilter:
    user_id: str | None = None
    action: AccessAction | None = None
    start_date: str | None = None
    end_date: str | None = None


@dataclass(frozen=True, slots=True)
class AccessSummary:
    total_today: int
    unique_users_today: int
    action_counts: dict[str, int] = field(default_factory=dict)
