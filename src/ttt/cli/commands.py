# src/ttt/cli/commands.py

"""
Command handlers.

Each handler works on an already loaded AppState (or, for restore/rekey, on
the data file directly), talks to the user only through a Prompter and an
emitter, and returns the final text to print. Loading, saving and exit codes
are handled by ttt.cli.main.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from datetime import datetime
from pathlib import Path

from ..config import Settings
from ..core.ports import Prompter
from ..core.reports import ListEntry, edit_candidates, list_tasks, report_tasks, total_seconds
from ..core.state import AppState
from ..core.windows import WindowKind, list_header, local_date
from ..errors import CanceledError, ValidationError
from ..storage.store_file import list_backups, load_store, restore_backup, save_store
from ..tasks.task_edit import (
    UNSET,
    SegmentEdit,
    TaskEdit,
    apply_task_edit,
    build_task_edit,
    parse_datetime_input,
    parse_optional_datetime_input,
    resolve_task_index,
    store_index_for_selection,
)
from ..tasks.task_engine import (
    active_segment_start,
    active_task_name,
    current_task_state,
    last_segment_end,
    pause_task,
    resume_task,
    start_task,
    stop_task,
    total_elapsed,
)
from ..tasks.task_models import Task, TaskState
from .formatting import (
    format_backup_entry,
    format_datetime_local,
    format_day_time_local,
    format_duration,
    format_time_local,
)
from .prompts import prompt_optional, prompt_required, prompt_selection, read_passphrase

CommandEmitter = Callable[[str], None]

logger = logging.getLogger(__name__)


def window_from_flags(today: bool, week: bool, default: WindowKind) -> WindowKind:
    if today and week:
        raise ValidationError("Use either --today or --week, not both.")
    if today:
        return WindowKind.TODAY
    if week:
        return WindowKind.WEEK
    return default


# ---- state transitions ----


def cmd_start(state: AppState, prompter: Prompter, name: str | None) -> str:
    if name is None:
        name = prompt_required(prompter, "Task name:", "Task name")
    if not name.strip():
        raise ValidationError("Task name cannot be empty.")

    store, now = state.store, state.now
    current = current_task_state(store)
    if current is not None:
        idx, task_state = current
        existing = store.tasks[idx].name
        if task_state is TaskState.ACTIVE:
            question = f'Active task "{existing}" is running. Stop it and start "{name}"?'
        else:
            question = f'Task "{existing}" is paused. Abandon it and start "{name}"?'
        if not prompter.confirm(question):
            raise CanceledError()
        stop_task(store, idx, now)

    start_task(store, name, now)
    return f"Started: {name} at {format_time_local(now)}"


def cmd_stop(state: AppState) -> str:
    current = current_task_state(state.store)
    if current is None:
        raise ValidationError('No active or paused task. Start one with "ttt start <task>".')
    idx, _ = current
    task = state.store.tasks[idx]
    stop_task(state.store, idx, state.now)
    elapsed = total_elapsed(task, state.now)
    return f"Stopped: {task.name} at {format_time_local(state.now)} (total {format_duration(elapsed)})"


def cmd_pause(state: AppState) -> str:
    current = current_task_state(state.store)
    if current is None:
        raise ValidationError('No active task. Start one with "ttt start <task>".')
    idx, task_state = current
    if task_state is not TaskState.ACTIVE:
        raise ValidationError('Task is already paused. Resume it with "ttt resume".')
    task = state.store.tasks[idx]
    pause_task(state.store, idx, state.now)
    elapsed = total_elapsed(task, state.now)
    return f"Paused: {task.name} at {format_time_local(state.now)} (total {format_duration(elapsed)})"


def cmd_resume(state: AppState) -> str:
    current = current_task_state(state.store)
    if current is None:
        raise ValidationError('No paused task. Start one with "ttt start <task>".')
    idx, task_state = current
    if task_state is TaskState.ACTIVE:
        name = active_task_name(state.store) or ""
        raise ValidationError(f'Task "{name}" is already running. Pause it with "ttt pause".')
    task = state.store.tasks[idx]
    resume_task(state.store, idx, state.now)
    return f"Resumed: {task.name} at {format_time_local(state.now)}"


# ---- queries ----


def cmd_status(state: AppState) -> str:
    current = current_task_state(state.store)
    if current is None:
        return 'No active task. Start one with "ttt start".'
    idx, task_state = current
    task = state.store.tasks[idx]
    elapsed = format_duration(total_elapsed(task, state.now))
    if task_state is TaskState.ACTIVE:
        since = active_segment_start(task) or task.created_at
        return f"Active: {task.name} - {elapsed} (since {format_time_local(since)})"
    paused_at = last_segment_end(task) or task.created_at
    return f"Paused: {task.name} - {elapsed} (paused at {format_time_local(paused_at)})"


def _format_list(entries: Sequence[ListEntry]) -> list[str]:
    return [
        f"{i:>3}) [{e.status}] {e.name} ({e.id}) total {format_duration(e.seconds)}"
        for i, e in enumerate(entries, start=1)
    ]


def cmd_list(state: AppState, kind: WindowKind) -> str:
    entries = list_tasks(state.store, state.now, kind)
    if not entries:
        return "No matching tasks."
    lines: list[str] = []
    header = list_header(state.now, kind)
    if header:
        lines.append(header)
    lines.extend(_format_list(entries))
    lines.append(f"Total: {format_duration(total_seconds(entries))}")
    return "\n".join(lines)


def cmd_report(state: AppState, kind: WindowKind) -> str:
    entries = report_tasks(state.store, state.now, kind)
    if not entries:
        return "No entries for this week." if kind is WindowKind.WEEK else "No entries for today."
    header = list_header(state.now, kind) or local_date(state.now).isoformat()
    # week entries can span several days
    stamp = format_day_time_local if kind is WindowKind.WEEK else format_time_local
    lines = [header]
    for e in entries:
        lines.append(
            f"{stamp(e.start_at)} - {stamp(e.end_at)} - {e.name} ({format_duration(e.seconds)})"
        )
    lines.append(f"Total: {format_duration(total_seconds(entries))}")
    return "\n".join(lines)


# ---- edit ----


def _pick_task(state: AppState, prompter: Prompter, emit: CommandEmitter) -> int:
    entries = edit_candidates(state.store, state.now)
    emit("Select a task to edit:")
    for line in _format_list(entries):
        emit(line)
    selection = prompt_selection(
        prompter, "Enter task number (or 'q' to cancel):", len(entries), "Task index"
    )
    return store_index_for_selection(state.store, [e.id for e in entries], selection)


def prompt_task_edit(
    task: Task, prompter: Prompter, emit: CommandEmitter, now: datetime
) -> TaskEdit:
    """Ask field by field; empty answers keep the current value."""
    emit(f"Editing task: {task.name}")

    name = prompt_optional(prompter, f"Name [{task.name}]:")

    created_raw = prompt_optional(
        prompter, f"Created at [{format_datetime_local(task.created_at)}] (RFC3339/now):"
    )
    created_at = parse_datetime_input(created_raw, now, "created at") if created_raw else None

    closed_label = format_datetime_local(task.closed_at) if task.closed_at else "open"
    closed_raw = prompt_optional(prompter, f"Closed at [{closed_label}] (RFC3339/now/open):")
    closed_at = (
        parse_optional_datetime_input(closed_raw, now, "closed at") if closed_raw else UNSET
    )

    seg_edits: list[SegmentEdit] = []
    if not task.segments:
        emit("No segments to edit.")
    else:
        emit("Segments:")
    for number, seg in enumerate(task.segments, start=1):
        start_raw = prompt_optional(
            prompter,
            f"Segment {number} start [{format_datetime_local(seg.start_at)}] (RFC3339/now):",
        )
        end_label = format_datetime_local(seg.end_at) if seg.end_at else "open"
        end_raw = prompt_optional(
            prompter, f"Segment {number} end [{end_label}] (RFC3339/now/open):"
        )
        if start_raw is None and end_raw is None:
            continue
        seg_edits.append(
            SegmentEdit(
                index=number,
                start_at=(
                    parse_datetime_input(start_raw, now, "segment start")
                    if start_raw
                    else seg.start_at
                ),
                end_at=(
                    parse_optional_datetime_input(end_raw, now, "segment end")
                    if end_raw
                    else seg.end_at
                ),
            )
        )

    return TaskEdit(name=name, created_at=created_at, closed_at=closed_at, segments=tuple(seg_edits))


def cmd_edit(
    state: AppState,
    prompter: Prompter,
    emit: CommandEmitter,
    *,
    task_id: str | None = None,
    index: int | None = None,
    name: str | None = None,
    created_at: str | None = None,
    closed_at: str | None = None,
    segment_edits: Sequence[str] = (),
) -> str:
    ids = [e.id for e in edit_candidates(state.store, state.now)]
    idx = resolve_task_index(state.store, task_id=task_id, index=index, listed_ids=ids)

    edit = build_task_edit(
        name=name,
        created_at=created_at,
        closed_at=closed_at,
        segment_edits=segment_edits,
        now=state.now,
    )

    if idx is None:
        idx = _pick_task(state, prompter, emit)
    task = state.store.tasks[idx]

    if edit.is_empty:
        edit = prompt_task_edit(task, prompter, emit, state.now)

    apply_task_edit(task, edit)
    return f"Updated: {task.name} ({task.id})"


# ---- data file maintenance ----


def cmd_restore(settings: Settings, data_file: Path, prompter: Prompter, emit: CommandEmitter) -> str:
    backups = list_backups(data_file, settings.backup_retention)
    if not backups:
        raise ValidationError("No backups found.")

    emit("Available backups:")
    for i, entry in enumerate(backups, start=1):
        emit(f"{i:>3}) {format_backup_entry(entry)}")
    selection = prompt_selection(
        prompter, "Select backup number (or 'q' to cancel):", len(backups), "Backup selection"
    )
    entry = backups[selection - 1]
    if not prompter.confirm(f"Restore {format_backup_entry(entry)}?"):
        raise CanceledError()

    passphrase = read_passphrase(prompter, confirm=False)
    restore_backup(data_file, entry, passphrase, retention=settings.backup_retention)
    return f"Restored backup {entry.path}"


def cmd_rekey(settings: Settings, data_file: Path, prompter: Prompter) -> str:
    if not data_file.exists():
        raise ValidationError('No data file found. Start tracking with "ttt start" first.')
    current = read_passphrase(prompter, confirm=False)
    store = load_store(data_file, current)
    new_passphrase = read_passphrase(prompter, confirm=True, label="New passphrase")
    save_store(data_file, store, new_passphrase, retention=settings.backup_retention)
    logger.info("Passphrase changed for %s", data_file)
    return f"Passphrase updated for {data_file}"
