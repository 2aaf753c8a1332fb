from __future__ import annotations

from datetime import datetime, timezone


def iso_utc(moment: datetime | None = None) -> str:
    """
    Render a moment as a UTC ISO 8601 string with millisecond precision and a `Z` suffix,
    e.g. `2024-06-10T08:15:00.123Z`. Strings in this form sort chronologically.
    """
    if moment is None:
        moment = datetime.now(timezone.utc)
    elif moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)

    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def start_of_local_day(now: datetime | None = None) -> datetime:
    """Local midnight of the current day, as an aware datetime."""
    now = (now or datetime.now()).astimezone()
    return now.replace(hour=0, minute=0, second=0, microsecond=0)
