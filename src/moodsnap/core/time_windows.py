"""Time window resolution in the caller's local timezone.

Day membership is decided by local day keys ("YYYY-MM-DD"), never by UTC
dates. Weeks run Sunday 00:00 through Saturday 23:59:59.999999 local time;
months run from the first to the last instant of the calendar month.

Every function takes an optional ``tz``. ``None`` means the process-local
timezone, matching how a device formats dates for its user.
"""

import calendar
import re
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from moodsnap.types import DayPart, TimeBucket

WEEK_STARTS_ON = 6  # Sunday, in datetime.weekday() numbering

_OFFSET_PATTERN = re.compile(r"^([+-])(\d{2}):(\d{2})$")


def resolve_timezone(name: str | None) -> tzinfo | None:
    """Turn a configured timezone name into a tzinfo.

    Accepts IANA names ("America/New_York"), "UTC", or fixed offsets
    ("+05:30"). Empty values return None (process-local time).

    Raises:
        ValueError: If the name is not a known timezone
    """
    if not name:
        return None
    if name.upper() in ("UTC", "Z"):
        return timezone.utc

    match = _OFFSET_PATTERN.match(name)
    if match:
        sign, hours, minutes = match.groups()
        offset = timedelta(hours=int(hours), minutes=int(minutes))
        return timezone(-offset if sign == "-" else offset)

    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"Unknown timezone: {name}") from e


def assume_utc(value: datetime) -> datetime:
    """Treat a naive timestamp as UTC; aware timestamps pass through."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _local_midnight(day: date, tz: tzinfo | None) -> datetime:
    if tz is None:
        return datetime.combine(day, time.min).astimezone()
    return datetime.combine(day, time.min, tzinfo=tz)


def _local_end_of_day(day: date, tz: tzinfo | None) -> datetime:
    if tz is None:
        return datetime.combine(day, time.max).astimezone()
    return datetime.combine(day, time.max, tzinfo=tz)


def to_local(value: datetime | date, tz: tzinfo | None = None) -> datetime:
    """Express a timestamp (or the start of a calendar date) in local time."""
    if not isinstance(value, datetime):
        return _local_midnight(value, tz)
    if value.tzinfo is None and tz is not None:
        return value.replace(tzinfo=tz)
    return value.astimezone(tz)


def local_day_key(value: datetime | date, tz: tzinfo | None = None) -> str:
    """Format a timestamp as its local calendar day, "YYYY-MM-DD"."""
    if not isinstance(value, datetime):
        return value.isoformat()
    return to_local(value, tz).strftime("%Y-%m-%d")


def local_date(value: datetime | date, tz: tzinfo | None = None) -> date:
    """Local calendar date of a timestamp."""
    if not isinstance(value, datetime):
        return value
    return to_local(value, tz).date()


def month_key(value: datetime | date, tz: tzinfo | None = None) -> str:
    """Format a timestamp as its local calendar month, "YYYY-MM"."""
    day = local_date(value, tz)
    return f"{day.year:04d}-{day.month:02d}"


def day_range(value: datetime | date, tz: tzinfo | None = None) -> tuple[datetime, datetime]:
    """First and last instant of the local day containing value."""
    day = local_date(value, tz)
    return _local_midnight(day, tz), _local_end_of_day(day, tz)


def week_range(value: datetime | date, tz: tzinfo | None = None) -> tuple[datetime, datetime]:
    """Sunday 00:00 through Saturday 23:59:59.999999 of the local week containing value."""
    day = local_date(value, tz)
    days_since_start = (day.weekday() - WEEK_STARTS_ON) % 7
    start_day = day - timedelta(days=days_since_start)
    end_day = start_day + timedelta(days=6)
    return _local_midnight(start_day, tz), _local_end_of_day(end_day, tz)


def month_range(value: datetime | date, tz: tzinfo | None = None) -> tuple[datetime, datetime]:
    """First and last instant of the local calendar month containing value."""
    day = local_date(value, tz)
    last_day = calendar.monthrange(day.year, day.month)[1]
    return (
        _local_midnight(day.replace(day=1), tz),
        _local_end_of_day(day.replace(day=last_day), tz),
    )


def days_between(start: date, end: date) -> list[date]:
    """Every calendar date from start to end, inclusive."""
    return [start + timedelta(days=offset) for offset in range((end - start).days + 1)]


def time_bucket(local_time: datetime) -> TimeBucket:
    """Coarse bucket: before 11:00 early, before 17:00 midday, otherwise late."""
    if local_time.hour < 11:
        return TimeBucket.EARLY
    if local_time.hour < 17:
        return TimeBucket.MIDDAY
    return TimeBucket.LATE


def day_part(local_time: datetime) -> DayPart:
    """Fine-grained part of the day, for prompt context."""
    hour = local_time.hour
    if hour < 5:
        return DayPart.LATE_NIGHT
    if hour < 12:
        return DayPart.MORNING
    if hour < 17:
        return DayPart.MIDDAY
    if hour < 21:
        return DayPart.EVENING
    return DayPart.NIGHT


def local_time_label(local_time: datetime) -> str:
    """Clock label such as "9:05 AM" or "12:41 AM"."""
    return local_time.strftime("%I:%M %p").lstrip("0")


def day_label(day: date) -> str:
    """Format as "Saturday, Nov 29"."""
    return f"{day:%A}, {day:%b} {day.day}"


def week_label(start: date, end: date) -> str:
    """Format as "Week of Nov 23 - Nov 29"."""
    return f"Week of {start:%b} {start.day} - {end:%b} {end.day}"


def month_label(day: date) -> str:
    """Format as "November 2025"."""
    return f"{day:%B} {day.year}"
