# src/ttt/cli/formatting.py

from __future__ import annotations

from datetime import datetime

from ..storage.store_file import BackupEntry


def format_duration(seconds: int) -> str:
    total = max(0, int(seconds))
    hours, rem = divmod(total, 3600)
    minutes, secs = divmod(rem, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def format_time_local(dt: datetime) -> str:
    return dt.astimezone().strftime("%H:%M:%S")


def format_datetime_local(dt: datetime) -> str:
    return dt.astimezone().isoformat()


def format_backup_entry(entry: BackupEntry) -> str:
    modified = entry.modified.strftime("%Y-%m-%d %H:%M:%S") if entry.modified else "unknown"
    return f"{entry.path.name} (modified {modified}, {entry.size} bytes)"


def format_day_time_local(dt: datetime) -> str:
    return dt.astimezone().strftime("%Y-%m-%d %H:%M:%S")
