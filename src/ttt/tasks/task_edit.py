# src/ttt/tasks/task_edit.py

"""
Manual task corrections.

Edits are described by a TaskEdit value and applied by apply_task_edit.
Gathering the values (flags or interactive prompts) lives in the CLI layer.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Final

from ..errors import ValidationError
from .task_models import Store, Task, parse_instant

logger = logging.getLogger(__name__)


class _Unset(Enum):
    """Marker for "leave closed_at as it is"; None means "reopen"."""

    UNSET = "unset"


UNSET: Final = _Unset.UNSET

_OPEN_WORDS = {"open", "none"}


@dataclass(frozen=True, slots=True)
class SegmentEdit:
    index: int  # 1-based
    start_at: datetime
    end_at: datetime | None


@dataclass(frozen=True, slots=True)
class TaskEdit:
    name: str | None = None
    created_at: datetime | None = None
    closed_at: datetime | None | _Unset = UNSET
    segments: tuple[SegmentEdit, ...] = field(default_factory=tuple)

    @property
    def is_empty(self) -> bool:
        return (
            self.name is None
            and self.created_at is None
            and self.closed_at is UNSET
            and not self.segments
        )


def parse_datetime_input(raw: str, now: datetime, label: str) -> datetime:
    text = raw.strip()
    if text.lower() == "now":
        return now
    try:
        return parse_instant(text)
    except ValidationError as exc:
        raise ValidationError(f"Invalid {label} timestamp: {raw!r} (use RFC3339 or 'now').") from exc


def parse_optional_datetime_input(raw: str, now: datetime, label: str) -> datetime | None:
    if raw.strip().lower() in _OPEN_WORDS:
        return None
    return parse_datetime_input(raw, now, label)


def parse_segment_edit(raw: str, now: datetime) -> SegmentEdit:
    """Parse INDEX,START,END (END may be 'open')."""
    parts = raw.split(",", 2)
    if len(parts) != 3:
        raise ValidationError("Segment edit must be in the form INDEX,START,END.")
    try:
        index = int(parts[0].strip())
    except ValueError as exc:
        raise ValidationError("Segment index must be a number.") from exc
    return SegmentEdit(
        index=index,
        start_at=parse_datetime_input(parts[1], now, "segment start"),
        end_at=parse_optional_datetime_input(parts[2], now, "segment end"),
    )


def build_task_edit(
    *,
    name: str | None,
    created_at: str | None,
    closed_at: str | None,
    segment_edits: Iterable[str],
    now: datetime,
) -> TaskEdit:
    """Turn raw command-line values into a TaskEdit."""
    return TaskEdit(
        name=name,
        created_at=(
            parse_datetime_input(created_at, now, "created at") if created_at is not None else None
        ),
        closed_at=(
            parse_optional_datetime_input(closed_at, now, "closed at")
            if closed_at is not None
            else UNSET
        ),
        segments=tuple(parse_segment_edit(s, now) for s in segment_edits),
    )


def _validate(task: Task, edit: TaskEdit) -> None:
    if edit.name is not None and not edit.name.strip():
        raise ValidationError("Task name cannot be empty.")
    count = len(task.segments)
    for seg_edit in edit.segments:
        if seg_edit.index < 1 or seg_edit.index > count:
            if count == 0:
                raise ValidationError("Task has no segments to edit.")
            raise ValidationError(f"Segment index must be between 1 and {count}.")


def apply_task_edit(task: Task, edit: TaskEdit) -> Task:
    """
    Apply an edit in place and return the task.

    Everything is validated before the first assignment, so a rejected edit
    leaves the task untouched. Segment start/end ordering is not checked.
    """
    _validate(task, edit)

    if edit.name is not None:
        task.name = edit.name
    if edit.created_at is not None:
        task.created_at = edit.created_at
    if not isinstance(edit.closed_at, _Unset):
        task.closed_at = edit.closed_at

    for seg_edit in edit.segments:
        seg = task.segments[seg_edit.index - 1]
        seg.start_at = seg_edit.start_at
        seg.end_at = seg_edit.end_at
        if seg.end_at is not None and seg.end_at <= seg.start_at:
            logger.warning(
                "Segment %d of task %s now ends before it starts; it counts as zero.",
                seg_edit.index,
                task.id,
            )

    logger.debug("Task edited id=%s", task.id)
    return task


def resolve_task_index(
    store: Store,
    *,
    task_id: str | None,
    index: int | None,
    listed_ids: Sequence[str],
) -> int | None:
    """
    Map --id / --index to a store index.

    `listed_ids` is the numbering shown by `ttt list` (sorted entries).
    Returns None when neither selector was given.
    """
    if not store.tasks:
        raise ValidationError("No tasks to edit.")
    if task_id is not None and index is not None:
        raise ValidationError("Use either --id or --index, not both.")

    if task_id is not None:
        for idx, task in enumerate(store.tasks):
            if task.id == task_id:
                return idx
        raise ValidationError(f'No task found with id "{task_id}".')

    if index is not None:
        return store_index_for_selection(store, listed_ids, index)

    return None


def store_index_for_selection(store: Store, listed_ids: Sequence[str], selection: int) -> int:
    if not listed_ids:
        raise ValidationError("No tasks to select.")
    if selection < 1 or selection > len(listed_ids):
        raise ValidationError(f"Task index must be between 1 and {len(listed_ids)}.")
    wanted = listed_ids[selection - 1]
    for idx, task in enumerate(store.tasks):
        if task.id == wanted:
            return idx
    # The ids come from this very store; a miss means it changed underneath us.
    raise RuntimeError(f"Listed task {wanted} is missing from the store.")
