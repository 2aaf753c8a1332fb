from __future__ import annotations

from loguru import logger
from sqlalchemy.orm import Session

from washboard.core.entities.access_log import AccessAction, AccessLogEntry, AccessLogFilter, AccessRecord
from washboard.core.entities.profile import Profile as CoreProfile
from washboard.core.entities.reservation import Reservation as CoreReservation
from washboard.core.entities.reservation import ReservationDraft
from washboard.core.repositories.errors import StorageError
from washboard.core.repositories.notification_publisher import NotificationPublisher
from washboard.core.use_cases.access_logs import QueryAccessLogsUseCase, RecordAccessUseCase
from washboard.core.use_cases.cancel_reservation import CancelReservationUseCase
from washboard.core.use_cases.create_reservation import CreateReservationUseCase
from washboard.core.use_cases.list_reservations import ListReservationsUseCase
from washboard.core.use_cases.save_profile import ListProfilesUseCase, SaveProfileUseCase
from washboard.infrastructure.database import SessionLocal
from washboard.infrastructure.notifications.notification_hub import NotificationHub
from washboard.infrastructure.notifications.subscription_channel import SubscriptionChannel, new_client_id
from washboard.infrastructure.repositories.access_log_repository_impl import AccessLogRepositoryImpl
from washboard.infrastructure.repositories.profile_repository_impl import ProfileRepositoryImpl
from washboard.infrastructure.repositories.reservation_repository_impl import ReservationRepositoryImpl
from washboard.schemas.models import (
    AccessLog,
    AccessLogPage,
    AccessSummary,
    Profile,
    ProfileSave,
    Reservation,
    ReservationCreate,
)


def _settings():
    from washboard.infrastructure.config import settings
    return settings


def _to_reservation_schema(reservation: CoreReservation) -> Reservation:
    return Reservation(
        id=reservation.id,
        date=reservation.date,
        time_slot=reservation.time_slot,
        user_id=reservation.user_id,
        user_color=reservation.user_color,
        created_at=reservation.created_at,
    )


def _to_profile_schema(profile: CoreProfile) -> Profile:
    return Profile(id=profile.id, name=profile.name, color=profile.color, updated_at=profile.updated_at)


def _to_access_log_schema(entry: AccessLogEntry) -> AccessLog:
    return AccessLog(
        id=entry.id,
        user_id=entry.user_id,
        user_name=entry.user_name,
        action=entry.action,
        detail=entry.detail,
        ip_address=entry.ip_address,
        user_agent=entry.user_agent,
        accessed_at=entry.accessed_at,
    )


# -----------------------------
# Reservations
# -----------------------------
def list_reservations_service(db: Session) -> list[Reservation]:
    use_case = ListReservationsUseCase(reservation_repo=ReservationRepositoryImpl(db))
    return [_to_reservation_schema(r) for r in use_case.execute()]


def create_reservation_service(body: ReservationCreate, db: Session, publisher: NotificationPublisher) -> Reservation:
    use_case = CreateReservationUseCase(
        reservation_repo=ReservationRepositoryImpl(db),
        publisher=publisher,
    )
    reservation = use_case.execute(
        ReservationDraft(
            date=body.date.isoformat(),
            time_slot=body.time_slot,
            user_id=body.user_id,
            user_color=body.user_color,
        )
    )
    return _to_reservation_schema(reservation)


def cancel_reservation_service(date: str, time_slot: str, db: Session, publisher: NotificationPublisher) -> Reservation:
    use_case = CancelReservationUseCase(
        reservation_repo=ReservationRepositoryImpl(db),
        publisher=publisher,
    )
    return _to_reservation_schema(use_case.execute(date=date, time_slot=time_slot))


# -----------------------------
# Profiles
# -----------------------------
def list_profiles_service(db: Session) -> dict[str, Profile]:
    use_case = ListProfilesUseCase(profile_repo=ProfileRepositoryImpl(db))
    return {profile_id: _to_profile_schema(p) for profile_id, p in use_case.execute().items()}


def save_profile_service(body: ProfileSave, db: Session, publisher: NotificationPublisher) -> Profile:
    use_case = SaveProfileUseCase(profile_repo=ProfileRepositoryImpl(db), publisher=publisher)
    return _to_profile_schema(use_case.execute(profile_id=body.id, name=body.name, color=body.color))


# -----------------------------
# Access log
# -----------------------------
def record_access_service(db: Session, record: AccessRecord) -> None:
    """
    Best-effort audit write. Storage faults are logged and not raised.
    """
    use_case = RecordAccessUseCase(
        access_log_repo=AccessLogRepositoryImpl(db),
        profile_repo=ProfileRepositoryImpl(db),
    )
    try:
        use_case.execute(record)
    except StorageError:
        logger.exception(f"Failed to record access log entry {record.action.value}")


def _record_access_in_new_session(record: AccessRecord) -> None:
    db = SessionLocal()
    try:
        record_access_service(db, record)
    finally:
        db.close()


def query_access_logs_service(
        db: Session,
        *,
        log_filter: AccessLogFilter,
        limit: int,
        offset: int,
) -> AccessLogPage:
    page = QueryAccessLogsUseCase(access_log_repo=AccessLogRepositoryImpl(db)).execute(
        log_filter, limit=limit, offset=offset
    )
    return AccessLogPage(
        logs=[_to_access_log_schema(entry) for entry in page.logs],
        total=page.total,
        limit=page.limit,
        offset=page.offset,
    )


def access_summary_service(db: Session) -> AccessSummary:
    summary = QueryAccessLogsUseCase(access_log_repo=AccessLogRepositoryImpl(db)).summarize_today()
    return AccessSummary(
        total_today=summary.total_today,
        unique_users_today=summary.unique_users_today,
        action_counts=summary.action_counts,
    )


# -----------------------------
# Live streams
# -----------------------------
def open_reservation_stream(
        hub: NotificationHub,
        *,
        ip_address: str | None = None,
        user_agent: str | None = None,
) -> SubscriptionChannel:
    """
    Build the SSE channel for the reservation board. Connects and disconnects are written to
    the access log with a session of their own, since the request session is long gone by
    the time the client goes away.
    """
    settings = _settings()
    client_id = new_client_id()

    def _log(action: AccessAction, channel_client_id: str) -> None:
        _record_access_in_new_session(
            AccessRecord(
                action=action,
                detail=f"clientId: {channel_client_id}",
                ip_address=ip_address,
                user_agent=user_agent,
            )
        )

    _log(AccessAction.SSE_CONNECT, client_id)

    return SubscriptionChannel(
        hub,
        heartbeat_interval=settings.heartbeat_interval,
        retry_ms=settings.client_retry_ms,
        buffer_size=settings.sink_buffer_size,
        client_id=client_id,
        on_close=lambda closed_id: _log(AccessAction.SSE_DISCONNECT, closed_id),
    )


def open_profile_stream(hub: NotificationHub) -> SubscriptionChannel:
    settings = _settings()
    return SubscriptionChannel(
        hub,
        heartbeat_interval=settings.heartbeat_interval,
        retry_ms=settings.client_retry_ms,
        buffer_size=settings.sink_buffer_size,
        client_id=new_client_id("profile-client"),
    )
