# tests/test_windows.py

from __future__ import annotations

from datetime import UTC, date, datetime, timedelta
from zoneinfo import ZoneInfo

from ttt.core.windows import (
    WindowKind,
    list_header,
    local_midnight,
    overlap,
    segment_span,
    today_bounds,
    week_bounds,
    week_start_date,
    window_bounds,
)
from ttt.tasks.task_models import Segment

BERLIN = ZoneInfo("Europe/Berlin")
NEW_YORK = ZoneInfo("America/New_York")


def _utc(*args: int) -> datetime:
    return datetime(*args, tzinfo=UTC)


def test_week_bounds_across_spring_forward() -> None:
    now = _utc(2025, 3, 27, 12, 0)
    start, end = week_bounds(now, BERLIN)

    assert start == _utc(2025, 3, 23, 23, 0)
    assert end == _utc(2025, 3, 30, 22, 0)
    assert start.astimezone(BERLIN).utcoffset() == timedelta(hours=1)
    assert end.astimezone(BERLIN).utcoffset() == timedelta(hours=2)
    assert end - start == timedelta(hours=167)


def test_today_bounds_across_fall_back() -> None:
    now = _utc(2025, 11, 2, 15, 0)
    start, end = today_bounds(now, NEW_YORK)

    assert start == _utc(2025, 11, 2, 4, 0)
    assert end == _utc(2025, 11, 3, 5, 0)
    assert end - start == timedelta(hours=25)


def test_today_uses_local_date_not_utc_date() -> None:
    # 23:30 UTC on the 14th is already the 15th in Berlin
    now = _utc(2025, 1, 14, 23, 30)
    start, end = today_bounds(now, BERLIN)
    assert start == _utc(2025, 1, 14, 23, 0)
    assert end == _utc(2025, 1, 15, 23, 0)
    assert list_header(now, WindowKind.TODAY, BERLIN) == "2025-01-15"


def test_week_start_date_is_monday() -> None:
    assert week_start_date(date(2025, 3, 24)) == date(2025, 3, 24)
    assert week_start_date(date(2025, 3, 30)) == date(2025, 3, 24)
    assert week_start_date(date(2025, 3, 31)) == date(2025, 3, 31)


def test_local_midnight_with_explicit_zone() -> None:
    assert local_midnight(date(2025, 7, 1), BERLIN) == _utc(2025, 6, 30, 22, 0)


def test_window_bounds_dispatch() -> None:
    now = _utc(2025, 3, 27, 12, 0)
    assert window_bounds(now, WindowKind.ALL, BERLIN) is None
    assert window_bounds(now, WindowKind.TODAY, BERLIN) == today_bounds(now, BERLIN)
    assert window_bounds(now, WindowKind.WEEK, BERLIN) == week_bounds(now, BERLIN)


def test_list_header_for_week() -> None:
    now = _utc(2025, 3, 27, 12, 0)
    assert list_header(now, WindowKind.WEEK, BERLIN) == "Week 2025-03-24 to 2025-03-30"
    assert list_header(now, WindowKind.ALL, BERLIN) is None


def test_overlap_is_half_open() -> None:
    ws, we = _utc(2025, 1, 15, 0, 0), _utc(2025, 1, 16, 0, 0)
    now = _utc(2025, 1, 20, 0, 0)

    ends_at_start = Segment(start_at=_utc(2025, 1, 14, 20, 0), end_at=ws)
    starts_at_end = Segment(start_at=we, end_at=_utc(2025, 1, 16, 1, 0))
    assert overlap(ends_at_start, ws, we, now) is None
    assert overlap(starts_at_end, ws, we, now) is None


def test_overlap_clips_to_window() -> None:
    ws, we = _utc(2025, 1, 15, 0, 0), _utc(2025, 1, 16, 0, 0)
    now = _utc(2025, 1, 20, 0, 0)

    across_start = Segment(start_at=_utc(2025, 1, 14, 23, 0), end_at=_utc(2025, 1, 15, 1, 0))
    assert overlap(across_start, ws, we, now) == (ws, _utc(2025, 1, 15, 1, 0))

    covering = Segment(start_at=_utc(2025, 1, 14, 0, 0), end_at=_utc(2025, 1, 17, 0, 0))
    assert overlap(covering, ws, we, now) == (ws, we)


def test_overlap_open_segment_ends_at_now() -> None:
    ws, we = _utc(2025, 1, 15, 0, 0), _utc(2025, 1, 16, 0, 0)
    now = _utc(2025, 1, 15, 9, 0)
    running = Segment(start_at=_utc(2025, 1, 15, 8, 0))
    assert overlap(running, ws, we, now) == (_utc(2025, 1, 15, 8, 0), now)


def test_overlap_ignores_inverted_segment() -> None:
    ws, we = _utc(2025, 1, 15, 0, 0), _utc(2025, 1, 16, 0, 0)
    inverted = Segment(start_at=_utc(2025, 1, 15, 10, 0), end_at=_utc(2025, 1, 15, 9, 0))
    assert overlap(inverted, ws, we, _utc(2025, 1, 15, 12, 0)) is None


def test_segment_span_without_window() -> None:
    now = _utc(2025, 1, 15, 12, 0)
    closed = Segment(start_at=_utc(2020, 1, 1, 0, 0), end_at=_utc(2020, 1, 1, 1, 0))
    assert segment_span(closed, None, now) == (closed.start_at, closed.end_at)

    running = Segment(start_at=_utc(2025, 1, 15, 11, 0))
    assert segment_span(running, None, now) == (running.start_at, now)

    future = Segment(start_at=_utc(2025, 1, 15, 13, 0))
    assert segment_span(future, None, now) is None
