"""Day-key arithmetic shared by every log type.

A day key is the aware local-midnight instant of the calendar day a record
belongs to. It is computed once when a record is written and stored with it.
Shifting by days goes through calendar dates, never through 24h offsets, so
daylight-saving transitions cannot move a key off midnight.
"""

from datetime import date, datetime, time, timedelta
from enum import StrEnum
from zoneinfo import ZoneInfo

TODAY_LABEL = "Today"
YESTERDAY_LABEL = "Yesterday"


class LabelStyle(StrEnum):
    """How days older than yesterday are labelled."""

    WEEKDAY = "weekday"
    SHORT_DATE = "date"


def day_key_for_date(day: date, tz: ZoneInfo) -> datetime:
    """Return the local-midnight instant for a calendar date."""
    return datetime.combine(day, time.min, tzinfo=tz)


def day_key(moment: datetime, tz: ZoneInfo) -> datetime:
    """Return the day key for an instant in the given timezone."""
    if moment.tzinfo is None:
        raise ValueError("day_key requires an aware datetime")
    return day_key_for_date(moment.astimezone(tz).date(), tz)


def shift_days(key: datetime, days: int, tz: ZoneInfo) -> datetime:
    """Return the day key ``days`` calendar days from ``key``."""
    local_day = key.astimezone(tz).date()
    return day_key_for_date(local_day + timedelta(days=days), tz)


def days_between(start: datetime, end: datetime, tz: ZoneInfo) -> int:
    """Return the number of calendar days from ``start`` to ``end``."""
    return (end.astimezone(tz).date() - start.astimezone(tz).date()).days


def short_date(day: date) -> str:
    """Format a date like ``Oct 3``."""
    return f"{day:%b} {day.day}"


def day_label(
    key: datetime,
    today: datetime,
    tz: ZoneInfo,
    style: LabelStyle = LabelStyle.WEEKDAY,
) -> str:
    """Label a day relative to today."""
    offset = days_between(key, today, tz)
    if offset == 0:
        return TODAY_LABEL
    if offset == 1:
        return YESTERDAY_LABEL
    local_day = key.astimezone(tz).date()
    if style == LabelStyle.SHORT_DATE:
        return short_date(local_day)
    return f"{local_day:%a}"
