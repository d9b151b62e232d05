# src/ttt/tasks/task_engine.py

"""
Task/segment state machine.

All functions operate on an in-memory Store loaded for the current command.
They never touch disk; the caller saves the store afterwards.

Invariant: at most one segment in the whole store is open. start_task and
resume_task refuse to break it (TaskConflictError); stop/pause only close.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta

from ..errors import TaskConflictError, ValidationError
from .task_models import Segment, Store, Task, TaskState

logger = logging.getLogger(__name__)

_ONE_SECOND = timedelta(seconds=1)


def find_open_segment_task(store: Store) -> int | None:
    """Index of the first task holding an open segment, if any."""
    for idx, task in enumerate(store.tasks):
        if task.open_segment() is not None:
            return idx
    return None


def _ensure_no_open_segment(store: Store) -> None:
    idx = find_open_segment_task(store)
    if idx is not None:
        name = store.tasks[idx].name
        raise TaskConflictError(
            f'Task "{name}" is still running. Pause or stop it first.'
        )


def current_task_state(store: Store) -> tuple[int, TaskState] | None:
    """
    First task (store order) that is not closed and has a meaningful state.

    Tasks without segments are skipped. Returns (index, ACTIVE|PAUSED).
    """
    for idx, task in enumerate(store.tasks):
        if task.closed_at is not None:
            continue
        if task.open_segment() is not None:
            return idx, TaskState.ACTIVE
        if task.segments:
            return idx, TaskState.PAUSED
    return None


def active_task_name(store: Store) -> str | None:
    current = current_task_state(store)
    if current is None or current[1] is not TaskState.ACTIVE:
        return None
    return store.tasks[current[0]].name


def task_status(task: Task) -> TaskState:
    if task.open_segment() is not None:
        return TaskState.ACTIVE
    if task.closed_at is None and task.segments:
        return TaskState.PAUSED
    return TaskState.STOPPED


def start_task(store: Store, name: str, now: datetime) -> int:
    """Append a new running task and return its index."""
    if not name or not name.strip():
        raise ValidationError("Task name cannot be empty.")
    _ensure_no_open_segment(store)

    task = Task(
        id=str(uuid.uuid4()),
        name=name,
        created_at=now,
        closed_at=None,
        segments=[Segment(start_at=now, end_at=None)],
    )
    store.tasks.append(task)
    logger.debug("Task started id=%s", task.id)
    return len(store.tasks) - 1


def stop_task(store: Store, idx: int, now: datetime) -> None:
    task = store.tasks[idx]
    seg = task.open_segment()
    if seg is not None:
        seg.end_at = now
    task.closed_at = now
    logger.debug("Task stopped id=%s", task.id)


def pause_task(store: Store, idx: int, now: datetime) -> None:
    task = store.tasks[idx]
    seg = task.open_segment()
    if seg is not None:
        seg.end_at = now
    logger.debug("Task paused id=%s", task.id)


def resume_task(store: Store, idx: int, now: datetime) -> None:
    task = store.tasks[idx]
    _ensure_no_open_segment(store)
    task.segments.append(Segment(start_at=now, end_at=None))
    logger.debug("Task resumed id=%s segments=%d", task.id, len(task.segments))


def segment_seconds(seg: Segment, now: datetime) -> int:
    """Whole seconds of a segment, clamped at zero."""
    end = seg.end_at if seg.end_at is not None else now
    return max(0, (end - seg.start_at) // _ONE_SECOND)


def total_elapsed(task: Task, now: datetime) -> int:
    return sum(segment_seconds(seg, now) for seg in task.segments)


def active_segment_start(task: Task) -> datetime | None:
    seg = task.open_segment()
    return seg.start_at if seg is not None else None


def last_segment_end(task: Task) -> datetime | None:
    for seg in reversed(task.segments):
        if seg.end_at is not None:
            return seg.end_at
    return None
