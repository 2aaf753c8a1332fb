from __future__ import annotations

from abc import ABC, abstractmethod

from washboard.core.entities.access_log import AccessLogEntry, AccessLogFilter, AccessRecord, AccessSummary


class AccessLogRepository(ABC):
    @abstractmethod
    def add(self, record: AccessRecord, *, accessed_at: str) -> AccessLogEntry:
        raise NotImplementedError

    @abstractmethod
    def find(self, log_filter: AccessLogFilter, *, limit: int, offset: int) -> list[AccessLogEntry]:
        """Newest first."""
        raise NotImplementedError

    @abstractmethod
    def count(self, log_filter: AccessLogFilter) -> int:
        raise NotImplementedError

    @abstractmethod
    def summarize_since(self, since: str) -> AccessSummary:
        raise NotImplementedError
