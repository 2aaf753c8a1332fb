from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from washboard.core.entities.access_log import AccessLogEntry, AccessLogFilter, AccessRecord, AccessSummary
from washboard.core.entities.timestamps import iso_utc, start_of_local_day
from washboard.core.repositories.access_log_repository import AccessLogRepository
from washboard.core.repositories.profile_repository import ProfileRepository

DEFAULT_PAGE_SIZE = 100


@dataclass(frozen=True, slots=True)
class AccessLogPage:
    logs: list[AccessLogEntry]
    total: int
    limit: int
    offset: int


class RecordAccessUseCase:
    """
    Appends one entry to the access log.

    When the record names a user but not their display name, the name is looked up from the
    profile store so the log stays readable after the profile changes.
    """

    def __init__(self, *, access_log_repo: AccessLogRepository, profile_repo: ProfileRepository | None = None) -> None:
        self._access_log_repo = access_log_repo
        self._profile_repo = profile_repo

    def execute(self, record: AccessRecord) -> AccessLogEntry:
        if record.user_id and not record.user_name and self._profile_repo is not None:
            profile = self._profile_repo.get(record.user_id)
            if profile is not None:
                record = AccessRecord(
                    action=record.action,
                    user_id=record.user_id,
                    user_name=profile.name,
                    detail=record.detail,
                    ip_address=record.ip_address,
                    user_agent=record.user_agent,
                )

        return self._access_log_repo.add(record, accessed_at=iso_utc())


class QueryAccessLogsUseCase:
    def __init__(self, *, access_log_repo: AccessLogRepository) -> None:
        self._access_log_repo = access_log_repo

    def execute(
            self,
            log_filter: AccessLogFilter,
            *,
            limit: int = DEFAULT_PAGE_SIZE,
            offset: int = 0,
    ) -> AccessLogPage:
        logs = self._access_log_repo.find(log_filter, limit=limit, offset=offset)
        total = self._access_log_repo.count(log_filter)
        return AccessLogPage(logs=logs, total=total, limit=limit, offset=offset)

    def summarize_today(self, *, now: datetime | None = None) -> AccessSummary:
        return self._access_log_repo.summarize_since(iso_utc(start_of_local_day(now)))
