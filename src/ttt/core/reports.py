# src/ttt/core/reports.py

"""
List and report aggregation over a time window.

Both views share one per-task aggregation; they differ only in the grouping
key (task id for `list`, case-insensitive name for `report`) and use the same
ordering, which also numbers the entries shown to the user.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta, tzinfo
from typing import TypeVar

from ..tasks.task_engine import task_status
from ..tasks.task_models import Store, Task, TaskState
from .windows import Bounds, WindowKind, segment_span, window_bounds

_ONE_SECOND = timedelta(seconds=1)


@dataclass(slots=True)
class ListEntry:
    name: str
    id: str
    status: TaskState
    seconds: int
    start_at: datetime
    end_at: datetime


@dataclass(slots=True)
class ReportEntry:
    name: str
    seconds: int
    start_at: datetime
    end_at: datetime


@dataclass(slots=True)
class _Totals:
    seconds: int
    start_at: datetime
    end_at: datetime


def _task_totals(task: Task, bounds: Bounds | None, now: datetime) -> _Totals | None:
    seconds = 0
    earliest: datetime | None = None
    latest: datetime | None = None

    for seg in task.segments:
        span = segment_span(seg, bounds, now)
        if span is None:
            continue
        start, end = span
        duration = (end - start) // _ONE_SECOND
        if duration <= 0:
            continue
        seconds += duration
        earliest = start if earliest is None else min(earliest, start)
        latest = end if latest is None else max(latest, end)

    if seconds == 0 or earliest is None or latest is None:
        return None
    return _Totals(seconds=seconds, start_at=earliest, end_at=latest)


E = TypeVar("E", ListEntry, ReportEntry)


def sort_entries(entries: Iterable[E]) -> list[E]:
    """Latest end first, then latest start first, then name (case-insensitive)."""
    out = sorted(entries, key=lambda e: e.name.lower())
    out.sort(key=lambda e: (e.end_at, e.start_at), reverse=True)
    return out


def _list_entry(task: Task, totals: _Totals) -> ListEntry:
    return ListEntry(
        name=task.name,
        id=task.id,
        status=task_status(task),
        seconds=totals.seconds,
        start_at=totals.start_at,
        end_at=totals.end_at,
    )


def list_tasks(
    store: Store,
    now: datetime,
    kind: WindowKind = WindowKind.ALL,
    tz: tzinfo | None = None,
) -> list[ListEntry]:
    bounds = window_bounds(now, kind, tz)
    entries: list[ListEntry] = []
    for task in store.tasks:
        totals = _task_totals(task, bounds, now)
        if totals is None:
            continue
        entries.append(_list_entry(task, totals))
    return sort_entries(entries)


def edit_candidates(store: Store, now: datetime) -> list[ListEntry]:
    """
    Every task with its all-time total, in list order.

    Unlike list_tasks nothing is dropped: a task without tracked time (just
    started, or only zero-length segments) sorts as if it ended at created_at.
    """
    entries: list[ListEntry] = []
    for task in store.tasks:
        totals = _task_totals(task, None, now)
        if totals is None:
            totals = _Totals(seconds=0, start_at=task.created_at, end_at=task.created_at)
        entries.append(_list_entry(task, totals))
    return sort_entries(entries)


def report_tasks(
    store: Store,
    now: datetime,
    kind: WindowKind = WindowKind.TODAY,
    tz: tzinfo | None = None,
) -> list[ReportEntry]:
    bounds = window_bounds(now, kind, tz)
    merged: dict[str, ReportEntry] = {}
    for task in store.tasks:
        totals = _task_totals(task, bounds, now)
        if totals is None:
            continue
        key = task.name.lower()
        entry = merged.get(key)
        if entry is None:
            merged[key] = ReportEntry(
                name=task.name,
                seconds=totals.seconds,
                start_at=totals.start_at,
                end_at=totals.end_at,
            )
            continue
        entry.seconds += totals.seconds
        entry.start_at = min(entry.start_at, totals.start_at)
        entry.end_at = max(entry.end_at, totals.end_at)
    return sort_entries(merged.values())


def total_seconds(entries: Iterable[ListEntry | ReportEntry]) -> int:
    return sum(e.seconds for e in entries)
