# src/ttt/tasks/task_models.py

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from ..errors import ValidationError

STORE_VERSION = 1

_RFC3339_RE = re.compile(
    r"(?P<date>\d{4}-\d{2}-\d{2})[Tt ](?P<time>\d{2}:\d{2}:\d{2})"
    r"(?:\.(?P<frac>\d+))?(?P<offset>[Zz]|[+-]\d{2}:\d{2})"
)


class TaskState(StrEnum):
    """
    Derived task status (never stored).

    - active:  some segment is still open
    - paused:  not closed and has at least one (closed) segment
    - stopped: everything else
    """

    ACTIVE = "active"
    PAUSED = "paused"
    STOPPED = "stopped"


@dataclass(slots=True)
class Segment:
    start_at: datetime
    end_at: datetime | None = None

    @property
    def is_open(self) -> bool:
        return self.end_at is None


@dataclass(slots=True)
class Task:
    id: str
    name: str
    created_at: datetime
    closed_at: datetime | None = None
    segments: list[Segment] = field(default_factory=list)

    def open_segment(self) -> Segment | None:
        for seg in self.segments:
            if seg.end_at is None:
                return seg
        return None


@dataclass(slots=True)
class Store:
    version: int = STORE_VERSION
    tasks: list[Task] = field(default_factory=list)


# ---- plaintext codec ----


def format_instant(dt: datetime) -> str:
    """RFC 3339 in UTC with a 'Z' suffix."""
    return dt.astimezone(UTC).isoformat().replace("+00:00", "Z")


def parse_instant(raw: str) -> datetime:
    """
    Parse an RFC 3339 timestamp and normalize it to UTC.

    Only the RFC 3339 profile is accepted (full date, full time, 'Z' or
    ±HH:MM offset); other ISO 8601 forms such as week dates, basic format or
    missing seconds are rejected, as are naive values.
    """
    m = _RFC3339_RE.fullmatch(raw.strip()) if isinstance(raw, str) else None
    if m is None:
        raise ValidationError(f"Invalid timestamp {raw!r}: not RFC 3339")
    day, clock, frac, offset = m.group("date", "time", "frac", "offset")
    # microsecond precision; extra fraction digits are truncated
    micros = f".{frac[:6].ljust(6, '0')}" if frac else ""
    if offset in ("Z", "z"):
        offset = "+00:00"
    try:
        dt = datetime.fromisoformat(f"{day}T{clock}{micros}{offset}")
    except ValueError as exc:
        raise ValidationError(f"Invalid timestamp {raw!r}: {exc}") from exc
    return dt.astimezone(UTC)


def _optional_instant(raw: Any) -> datetime | None:
    if raw is None:
        return None
    return parse_instant(str(raw))


def segment_to_dict(seg: Segment) -> dict[str, Any]:
    out: dict[str, Any] = {"start_at": format_instant(seg.start_at)}
    if seg.end_at is not None:
        out["end_at"] = format_instant(seg.end_at)
    return out


def task_to_dict(task: Task) -> dict[str, Any]:
    out: dict[str, Any] = {
        "id": task.id,
        "name": task.name,
        "created_at": format_instant(task.created_at),
    }
    if task.closed_at is not None:
        out["closed_at"] = format_instant(task.closed_at)
    out["segments"] = [segment_to_dict(s) for s in task.segments]
    return out


def store_to_dict(store: Store) -> dict[str, Any]:
    return {
        "version": int(store.version),
        "tasks": [task_to_dict(t) for t in store.tasks],
    }


def store_from_dict(data: dict[str, Any]) -> Store:
    """
    Build a Store from its plaintext JSON form.

    Raises KeyError/TypeError/ValidationError on malformed input; the crypto
    layer turns those into its uniform error.
    """
    tasks: list[Task] = []
    for raw_task in data["tasks"]:
        segments = [
            Segment(
                start_at=parse_instant(str(s["start_at"])),
                end_at=_optional_instant(s.get("end_at")),
            )
            for s in raw_task.get("segments", [])
        ]
        tasks.append(
            Task(
                id=str(raw_task["id"]),
                name=str(raw_task["name"]),
                created_at=parse_instant(str(raw_task["created_at"])),
                closed_at=_optional_instant(raw_task.get("closed_at")),
                segments=segments,
            )
        )
    return Store(version=int(data.get("version", STORE_VERSION)), tasks=tasks)
