"""Busy/free interval computations.

Everything here is pure: functions take busy intervals and timestamps and
return new values without touching shared state, so any number of request
threads may call them at once.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Iterable, List, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .errors import ReferenceClockError
from .models import BusyInterval

AVAILABLE = "available"
UNAVAILABLE = "unavailable"
UNKNOWN_DURATION = -1


def compute_free(busy: Iterable[BusyInterval], reference: int, horizon: int) -> List[BusyInterval]:
    """Return the free intervals in ``[reference, horizon)`` not covered by ``busy``.

    The sweep keeps a cursor that only ever moves forward, so overlapping and
    nested busy intervals are absorbed without producing spurious gaps. The
    result is sorted and pairwise disjoint.
    """
    free: List[BusyInterval] = []
    cursor = reference
    for start, end in sorted(busy):
        if cursor >= horizon:
            break
        if start > cursor:
            free.append((cursor, min(start, horizon)))
        if end > cursor:
            cursor = end
    if cursor < horizon:
        free.append((cursor, horizon))
    return free


def status_at(busy: Iterable[BusyInterval], reference: int) -> Tuple[str, int]:
    """Return ``(status, duration)`` for a room at ``reference``.

    Scans the raw intervals in start order. Inside an interval the room is
    reported ``available`` with the seconds until that interval ends; before
    the next interval it is ``unavailable`` with the seconds until that one
    starts. With nothing current or upcoming the duration is unknown.
    """
    for start, end in sorted(busy):
        if start <= reference < end:
            return AVAILABLE, end - reference
        if start > reference:
            return UNAVAILABLE, start - reference
    return UNAVAILABLE, UNKNOWN_DURATION


def open_today(busy: Iterable[BusyInterval], day_start: int, day_end: int) -> bool:
    """Return True if any busy interval lies fully inside ``[day_start, day_end)``."""
    return any(start >= day_start and end <= day_end for start, end in busy)


def service_day(now: datetime, start_hour: int = 8, tz_name: str = "UTC") -> Tuple[int, int]:
    """Return the ``(start, end)`` timestamps of the service day containing ``now``'s date.

    The day starts at ``start_hour``:00 local time on ``now``'s calendar date
    in ``tz_name`` and lasts 24 hours.

    Raises:
        ReferenceClockError: if the timezone is unknown or the hour is invalid.
    """
    try:
        tz = ZoneInfo(tz_name)
        local_now = now.astimezone(tz)
        day_start = local_now.replace(hour=start_hour, minute=0, second=0, microsecond=0)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ReferenceClockError(f"cannot derive service day from {tz_name!r} at {start_hour}h: {exc}") from exc
    start_ts = int(day_start.timestamp())
    return start_ts, start_ts + int(timedelta(days=1).total_seconds())
