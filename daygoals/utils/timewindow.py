"""Local-day window arithmetic.

A user's "day" runs from 06:00 local time to 05:59:59 local time the next
morning. Windows are stored as UTC instants.
"""
from datetime import date, datetime, time, timedelta, timezone
from typing import Callable, NamedTuple, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

DAY_START_HOUR = 6
WINDOW_LENGTH = timedelta(hours=24) - timedelta(seconds=1)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class DayWindow(NamedTuple):
    """Inclusive [start, end] bounds of one local day, in UTC."""

    start: datetime
    end: datetime

    def contains(self, instant: datetime) -> bool:
        return self.start <= instant <= self.end


def zone(tz_name: str) -> ZoneInfo:
    """
    Load an IANA timezone.

    Raises:
        ValueError: If the identifier is unknown
    """
    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(f"Unknown timezone: {tz_name}")


def localize(instant: datetime, tz_name: str) -> datetime:
    """Convert an aware instant to the wall time of tz_name."""
    if instant.tzinfo is None:
        raise ValueError("Naive datetime given, expected an aware instant")
    return instant.astimezone(zone(tz_name))


def local_now(tz_name: str, clock: Clock = utc_now) -> datetime:
    """Current wall time in tz_name."""
    return localize(clock(), tz_name)


def day_window(tz_name: str, day: date) -> DayWindow:
    """
    Compute the window of a local calendar day.

    Args:
        tz_name: IANA timezone of the user
        day: Local calendar date

    Returns:
        DayWindow with start at 06:00 local and end 24h - 1s later

    Examples:
        >>> w = day_window("Asia/Yekaterinburg", date(2024, 3, 1))
        >>> w.start.isoformat()
        '2024-03-01T01:00:00+00:00'
        >>> w.end.isoformat()
        '2024-03-02T00:59:59+00:00'
    """
    local_start = datetime.combine(day, time(DAY_START_HOUR), tzinfo=zone(tz_name))
    # Arithmetic happens in UTC so a DST shift doesn't stretch the window
    start = local_start.astimezone(timezone.utc)
    return DayWindow(start=start, end=start + WINDOW_LENGTH)


def local_day(instant: datetime, tz_name: str) -> date:
    """The local day whose window contains instant."""
    local = localize(instant, tz_name)
    if local.hour < DAY_START_HOUR:
        return local.date() - timedelta(days=1)
    return local.date()


def window_for(tz_name: str, when: Union[date, datetime]) -> DayWindow:
    """
    Window for a calendar date, or the window containing an aware instant.

    Instants before 06:00 local belong to the previous day's window.
    """
    if isinstance(when, datetime):
        return day_window(tz_name, local_day(when, tz_name))
    return day_window(tz_name, when)
