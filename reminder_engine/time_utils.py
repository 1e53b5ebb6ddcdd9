"""Time-of-day parsing and next-occurrence arithmetic.

Day-of-week values follow the 0=Sunday ... 6=Saturday convention used by the
routine store. Every function here is pure: the current instant is always
passed in, never read from the wall clock.
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta
from typing import Optional, Union

from reminder_engine.schema import TimeOfDay

SUNDAY, MONDAY, TUESDAY, WEDNESDAY, THURSDAY, FRIDAY, SATURDAY = range(7)
WEEKDAYS = (MONDAY, TUESDAY, WEDNESDAY, THURSDAY, FRIDAY)
WEEKEND = (SUNDAY, SATURDAY)

_TIME_RE = re.compile(r"^([0-9]{1,2}):([0-9]{2})$")


def parse_time_of_day(value: Optional[str]) -> Optional[TimeOfDay]:
    """Parse ``"HH:MM"`` into a TimeOfDay, or None when malformed or out of range."""

    if not isinstance(value, str):
        return None
    match = _TIME_RE.match(value.strip())
    if not match:
        return None

    hours, minutes = int(match.group(1)), int(match.group(2))
    if not (0 <= hours <= 23 and 0 <= minutes <= 59):
        return None
    return TimeOfDay(hours=hours, minutes=minutes)


def format_time_of_day(time_of_day: TimeOfDay) -> str:
    return f"{time_of_day.hours:02d}:{time_of_day.minutes:02d}"


def day_of_week(moment: datetime) -> int:
    """Sunday-based weekday index of ``moment``."""

    return (moment.weekday() + 1) % 7


def next_occurrence(time_of_day: TimeOfDay, weekday: Optional[int], now: datetime) -> datetime:
    """Return the first instant strictly after ``now`` at ``time_of_day``.

    With ``weekday`` set, the result also falls on that day of the week; a
    target time already passed today moves a full week ahead.
    """

    candidate = now.replace(hour=time_of_day.hours, minute=time_of_day.minutes, second=0, microsecond=0)

    if weekday is None:
        if candidate > now:
            return candidate
        return candidate + timedelta(days=1)

    if not 0 <= weekday <= 6:
        raise ValueError(f"weekday must be between 0 and 6, got {weekday}")

    days_ahead = (weekday - day_of_week(now)) % 7
    candidate += timedelta(days=days_ahead)
    if candidate <= now:
        candidate += timedelta(days=7)
    return candidate


def expand_day_filter(day_filter: Union[str, int, None]) -> list[Optional[int]]:
    """Expand a routine day filter into concrete weekdays.

    ``None`` and ``"all"`` map to a single daily entry. Unknown filters expand
    to nothing so the routine is left unscheduled.
    """

    if day_filter is None:
        return [None]
    if isinstance(day_filter, int) and not isinstance(day_filter, bool):
        return [day_filter] if 0 <= day_filter <= 6 else []

    normalized = str(day_filter).strip().lower()
    if normalized in ("", "all"):
        return [None]
    if normalized == "weekdays":
        return list(WEEKDAYS)
    if normalized == "weekend":
        return list(WEEKEND)
    if normalized in {str(day) for day in range(7)}:
        return [int(normalized)]
    return []
