"""Decide whether a reminder row is due on the current tick."""

from __future__ import annotations

from datetime import datetime, time, timedelta, tzinfo
from zoneinfo import ZoneInfo

from app.types.reminder_contract import EventRecord

REMINDER_WINDOW = timedelta(minutes=5)
# Rows without an explicit "Remind at" go out at this local time
DEFAULT_SEND_TIME = time(8, 0)


def get_zone(tz: str | tzinfo) -> tzinfo:
    return ZoneInfo(tz) if isinstance(tz, str) else tz


def now_in(tz: str | tzinfo) -> datetime:
    return datetime.now(get_zone(tz))


def localize(dt: datetime, tz: str | tzinfo) -> datetime:
    """Attach *tz* to naive values; aware values are left alone."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=get_zone(tz))
    return dt


def within_window(remind_at: datetime, now: datetime, window: timedelta = REMINDER_WINDOW) -> bool:
    """Both bounds are inclusive."""
    return now - window <= remind_at <= now + window


def is_default_send_minute(now: datetime, tz: str | tzinfo, send_time: time = DEFAULT_SEND_TIME) -> bool:
    local_now = now.astimezone(get_zone(tz))
    target = local_now.replace(hour=send_time.hour, minute=send_time.minute, second=0, microsecond=0)
    return local_now.replace(second=0, microsecond=0) == target


def is_due(event: EventRecord, now: datetime, tz: str | tzinfo) -> bool:
    """Return True if *event* should be notified at *now*.

    An explicit ``remind_at`` is matched against a +/- 5 minute window around
    *now*. Without one the row is due only during the 08:00 minute in *tz*,
    whatever its scheduled date says. The branches never combine. Rows
    already marked sent are never due.
    """
    if now.tzinfo is None:
        raise ValueError("now must be timezone-aware")

    if event.sent:
        return False
    if event.remind_at is not None:
        return within_window(localize(event.remind_at, tz), now)
    return is_default_send_minute(now, tz)
