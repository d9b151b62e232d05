# src/ttt/core/windows.py

"""
Time windows and segment overlap.

Windows are half-open [start, end) UTC intervals whose edges sit on *local*
midnight. Each edge is converted with the UTC offset valid at that wall-clock
instant, so a week spanning a DST change is 167h or 169h long, not 168h.

`tz=None` means the OS local timezone everywhere in this module.
"""

from __future__ import annotations

from datetime import UTC, date, datetime, time, timedelta, tzinfo
from enum import StrEnum

from ..tasks.task_models import Segment

Bounds = tuple[datetime, datetime]


class WindowKind(StrEnum):
    ALL = "all"
    TODAY = "today"
    WEEK = "week"


def local_date(now: datetime, tz: tzinfo | None = None) -> date:
    local = now.astimezone(tz) if tz is not None else now.astimezone()
    return local.date()


def local_midnight(day: date, tz: tzinfo | None = None) -> datetime:
    """UTC instant of 00:00 local time on `day`."""
    naive = datetime.combine(day, time.min)
    if tz is None:
        # naive -> system local time, resolved for this exact wall-clock moment
        return naive.astimezone(UTC)
    return naive.replace(tzinfo=tz).astimezone(UTC)


def week_start_date(day: date) -> date:
    """Monday on or before `day` (ISO week)."""
    return day - timedelta(days=day.weekday())


def today_bounds(now: datetime, tz: tzinfo | None = None) -> Bounds:
    day = local_date(now, tz)
    return local_midnight(day, tz), local_midnight(day + timedelta(days=1), tz)


def week_bounds(now: datetime, tz: tzinfo | None = None) -> Bounds:
    monday = week_start_date(local_date(now, tz))
    return local_midnight(monday, tz), local_midnight(monday + timedelta(days=7), tz)


def window_bounds(now: datetime, kind: WindowKind, tz: tzinfo | None = None) -> Bounds | None:
    if kind is WindowKind.TODAY:
        return today_bounds(now, tz)
    if kind is WindowKind.WEEK:
        return week_bounds(now, tz)
    return None


def overlap(
    segment: Segment,
    window_start: datetime,
    window_end: datetime,
    now: datetime,
) -> Bounds | None:
    """Intersection of [start_at, end_at or now) with [window_start, window_end)."""
    segment_end = segment.end_at if segment.end_at is not None else now
    if segment_end <= window_start or segment.start_at >= window_end:
        return None
    start = max(segment.start_at, window_start)
    end = min(segment_end, window_end)
    if end <= start:
        return None
    return start, end


def segment_span(segment: Segment, bounds: Bounds | None, now: datetime) -> Bounds | None:
    """Overlap with `bounds`, or the segment's own interval for the unbounded window."""
    if bounds is not None:
        return overlap(segment, bounds[0], bounds[1], now)
    end_at = segment.end_at if segment.end_at is not None else now
    if end_at <= segment.start_at:
        return None
    return segment.start_at, end_at


def list_header(now: datetime, kind: WindowKind, tz: tzinfo | None = None) -> str | None:
    if kind is WindowKind.TODAY:
        return local_date(now, tz).isoformat()
    if kind is WindowKind.WEEK:
        monday = week_start_date(local_date(now, tz))
        sunday = monday + timedelta(days=6)
        return f"Week {monday.isoformat()} to {sunday.isoformat()}"
    return None
