from __future__ import annotations

from sqlalchemy import Select, distinct, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from washboard.core.entities.access_log import (
    AccessAction,
    AccessLogEntry,
    AccessLogFilter,
    AccessRecord,
    AccessSummary,
)
from washboard.core.repositories.access_log_repository import AccessLogRepository
from washboard.core.repositories.errors import StorageError
from washboard.infrastructure.models.models import AccessLogModel


class AccessLogRepositoryImpl(AccessLogRepository):
    """SQLAlchemy implementation of the append-only access log."""

    def __init__(self, db: Session) -> None:
        self._db = db

    def add(self, record: AccessRecord, *, accessed_at: str) -> AccessLogEntry:
        row = AccessLogModel(
            user_id=record.user_id,
            user_name=record.user_name,
            action=record.action.value,
            detail=record.detail,
            ip_address=record.ip_address,
            user_agent=record.user_agent,
            accessed_at=accessed_at,
        )
        try:
            self._db.add(row)
            self._db.commit()
            # reading the expired row refreshes it from the database
            return self._to_entity(row)
        except SQLAlchemyError as e:
            self._db.rollback()
            raise StorageError("Failed to write access log") from e

    def find(self, log_filter: AccessLogFilter, *, limit: int, offset: int) -> list[AccessLogEntry]:
        stmt = self._apply_filter(select(AccessLogModel), log_filter)
        stmt = stmt.order_by(AccessLogModel.accessed_at.desc(), AccessLogModel.id.desc()).limit(limit).offset(offset)
        try:
            rows = self._db.scalars(stmt).all()
        except SQLAlchemyError as e:
            self._db.rollback()
            raise StorageError("Failed to read access logs") from e
        return [self._to_entity(row) for row in rows]

    def count(self, log_filter: AccessLogFilter) -> int:
        stmt = self._apply_filter(select(func.count(AccessLogModel.id)), log_filter)
        try:
            return int(self._db.scalar(stmt) or 0)
        except SQLAlchemyError as e:
            self._db.rollback()
            raise StorageError("Failed to count access logs") from e

    def summarize_since(self, since: str) -> AccessSummary:
        today = AccessLogModel.accessed_at >= since
        try:
            total = self._db.scalar(select(func.count(AccessLogModel.id)).where(today)) or 0
            unique_users = self._db.scalar(
                select(func.count(distinct(AccessLogModel.user_id))).where(
                    today,
                    AccessLogModel.user_id.is_not(None),
                )
            ) or 0
            per_action = self._db.execute(
                select(AccessLogModel.action, func.count(AccessLogModel.id))
                .where(today)
                .group_by(AccessLogModel.action)
            ).all()
        except SQLAlchemyError as e:
            self._db.rollback()
            raise StorageError("Failed to summarize access logs") from e

        return AccessSummary(
            total_today=int(total),
            unique_users_today=int(unique_users),
            action_counts={action: int(count) for action, count in per_action},
        )

    @staticmethod
    def _apply_filter(stmt: Select, log_filter: AccessLogFilter) -> Select:
        if log_filter.user_id:
            stmt = stmt.where(AccessLogModel.user_id == log_filter.user_id)
        if log_filter.action:
            stmt = stmt.where(AccessLogModel.action == log_filter.action.value)
        if log_filter.start_date:
            stmt = stmt.where(AccessLogModel.accessed_at >= log_filter.start_date)
        if log_filter.end_date:
            stmt = stmt.where(AccessLogModel.accessed_at <= log_filter.end_date)
        return stmt

    @staticmethod
    def _to_entity(row: AccessLogModel) -> AccessLogEntry:
        return AccessLogEntry(
            id=row.id,
            action=AccessAction(row.action),
            user_id=row.user_id,
            user_name=row.user_name,
            detail=row.detail,
            ip_address=row.ip_address,
            user_agent=row.user_agent,
            accessed_at=row.accessed_at,
        )
