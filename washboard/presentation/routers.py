from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from washboard.core.entities.access_log import AccessAction, AccessLogFilter, AccessRecord
from washboard.core.repositories.errors import StorageError
from washboard.core.use_cases.cancel_reservation import NotFoundError
from washboard.core.use_cases.create_reservation import AlreadyBookedError
from washboard.infrastructure.database import SessionLocal
from washboard.infrastructure.notifications.notification_hub import NotificationHub, profile_hub, reservation_hub
from washboard.infrastructure.notifications.sse_codec import MEDIA_TYPE, STREAM_HEADERS
from washboard.schemas.models import (
    AccessLogPage,
    AccessSummary,
    CancelResult,
    Profile,
    ProfileSave,
    Reservation,
    ReservationCreate,
)
from washboard.services.washboard_service import (
    access_summary_service,
    cancel_reservation_service,
    create_reservation_service,
    list_profiles_service,
    list_reservations_service,
    open_profile_stream,
    open_reservation_stream,
    query_access_logs_service,
    record_access_service,
    save_profile_service,
)

router = APIRouter()

STORAGE_FAILURE = "Storage failure"


def get_db() -> Session:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_reservation_hub() -> NotificationHub:
    return reservation_hub


def get_profile_hub() -> NotificationHub:
    return profile_hub


@dataclass(frozen=True, slots=True)
class ClientInfo:
    ip_address: str
    user_agent: str | None


def get_client_info(request: Request) -> ClientInfo:
    forwarded = request.headers.get("x-forwarded-for", "")
    ip_address = forwarded.split(",")[0].strip() or request.headers.get("x-real-ip") or "unknown"
    return ClientInfo(ip_address=ip_address, user_agent=request.headers.get("user-agent"))


# -----------------------------
# Reservations
# -----------------------------
@router.get("/reservations", response_model=List[Reservation])
def get_reservations(db: Session = Depends(get_db)) -> List[Reservation]:
    """
    List every reservation, past ones included
    """
    try:
        return list_reservations_service(db)
    except StorageError:
        raise HTTPException(status_code=500, detail=STORAGE_FAILURE)


@router.post("/reservations", response_model=Reservation, status_code=201)
def post_reservations(
    body: ReservationCreate,
    db: Session = Depends(get_db),
    hub: NotificationHub = Depends(get_reservation_hub),
    client: ClientInfo = Depends(get_client_info),
) -> Reservation:
    """
    Claim a slot

    Returns:
      - 201 with the stored reservation
      - 400 on missing or malformed fields
      - 409 if the slot is already taken
    """
    try:
        reservation = create_reservation_service(body, db, hub)
    except AlreadyBookedError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except StorageError:
        raise HTTPException(status_code=500, detail=STORAGE_FAILURE)

    record_access_service(
        db,
        AccessRecord(
            action=AccessAction.RESERVATION_CREATE,
            user_id=reservation.user_id,
            detail=f"{reservation.date} {reservation.time_slot.value}",
            ip_address=client.ip_address,
            user_agent=client.user_agent,
        ),
    )
    return reservation


@router.delete("/reservations", response_model=CancelResult)
def delete_reservations(
    date: str | None = Query(default=None),
    time_slot: str | None = Query(default=None, alias="timeSlot"),
    user_id: str | None = Query(default=None, alias="userId"),
    db: Session = Depends(get_db),
    hub: NotificationHub = Depends(get_reservation_hub),
    client: ClientInfo = Depends(get_client_info),
) -> CancelResult:
    """
    Free a slot identified by date and time slot
    """
    if not date or not time_slot:
        raise HTTPException(status_code=400, detail="Missing date or timeSlot")

    try:
        cancel_reservation_service(date, time_slot, db, hub)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except StorageError:
        raise HTTPException(status_code=500, detail=STORAGE_FAILURE)

    record_access_service(
        db,
        AccessRecord(
            action=AccessAction.RESERVATION_DELETE,
            user_id=user_id or None,
            detail=f"{date} {time_slot}",
            ip_address=client.ip_address,
            user_agent=client.user_agent,
        ),
    )
    return CancelResult(success=True)


@router.get("/reservations/stream")
def get_reservations_stream(
    hub: NotificationHub = Depends(get_reservation_hub),
    client: ClientInfo = Depends(get_client_info),
) -> StreamingResponse:
    """
    Live add/delete feed for the reservation board (Server-Sent Events)
    """
    channel = open_reservation_stream(hub, ip_address=client.ip_address, user_agent=client.user_agent)
    return StreamingResponse(channel.stream(), media_type=MEDIA_TYPE, headers=STREAM_HEADERS)


# -----------------------------
# Profiles
# -----------------------------
@router.get("/profiles", response_model=Dict[str, Profile])
def get_profiles(db: Session = Depends(get_db)) -> Dict[str, Profile]:
    try:
        return list_profiles_service(db)
    except StorageError:
        raise HTTPException(status_code=500, detail=STORAGE_FAILURE)


@router.post("/profiles", response_model=Profile)
def post_profiles(
    body: ProfileSave,
    db: Session = Depends(get_db),
    hub: NotificationHub = Depends(get_profile_hub),
    client: ClientInfo = Depends(get_client_info),
) -> Profile:
    try:
        profile = save_profile_service(body, db, hub)
    except StorageError:
        raise HTTPException(status_code=500, detail=STORAGE_FAILURE)

    record_access_service(
        db,
        AccessRecord(
            action=AccessAction.PROFILE_UPDATE,
            user_id=profile.id,
            user_name=profile.name,
            detail=f"color: {profile.color}",
            ip_address=client.ip_address,
            user_agent=client.user_agent,
        ),
    )
    return profile


@router.get("/profiles/stream")
def get_profiles_stream(hub: NotificationHub = Depends(get_profile_hub)) -> StreamingResponse:
    channel = open_profile_stream(hub)
    return StreamingResponse(channel.stream(), media_type=MEDIA_TYPE, headers=STREAM_HEADERS)


# -----------------------------
# Access log
# -----------------------------
@router.get("/access-logs", response_model=AccessLogPage | AccessSummary)
def get_access_logs(
    summary: bool = False,
    limit: int = Query(default=100, ge=1, le=1000),
    offset: int = Query(default=0, ge=0),
    user_id: str | None = Query(default=None, alias="userId"),
    action: AccessAction | None = None,
    start_date: str | None = Query(default=None, alias="startDate"),
    end_date: str | None = Query(default=None, alias="endDate"),
    db: Session = Depends(get_db),
) -> AccessLogPage | AccessSummary:
    """
    Page through the access log (newest first), or get today's totals with summary=true
    """
    try:
        if summary:
            return access_summary_service(db)
        return query_access_logs_service(
            db,
            log_filter=AccessLogFilter(user_id=user_id, action=action, start_date=start_date, end_date=end_date),
            limit=limit,
            offset=offset,
        )
    except StorageError:
        raise HTTPException(status_code=500, detail=STORAGE_FAILURE)
