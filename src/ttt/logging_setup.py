# src/ttt/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path


class _ConsoleNoiseFilter(logging.Filter):
    """
    Keep the terminal clean for a short-lived CLI:
    - ttt logs pass at the configured level
    - Python warnings (captured as 'py.warnings') only at ERROR+
    - any other third-party logger only at ERROR+
    """

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name
        if name == "ttt" or name.startswith("ttt."):
            return True
        return record.levelno >= logging.ERROR


def setup_logging(
    *,
    console_level: int = logging.WARNING,
    log_file: str | Path | None = None,
    file_level: int = logging.DEBUG,
) -> None:
    """
    Configure logging with:
    - Console handler on stderr (stdout carries command output)
    - Optional file handler with full logs for debugging

    Call this ONCE per process, before the first command runs.
    """
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    # Remove any pre-existing handlers to avoid duplicates.
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(console_level)
    ch.setFormatter(fmt)
    ch.addFilter(_ConsoleNoiseFilter())
    root.addHandler(ch)

    if log_file is not None:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(str(log_path), encoding="utf-8")
        fh.setLevel(file_level)
        fh.setFormatter(fmt)
        root.addHandler(fh)

    # Route warnings.warn(...) into logging as 'py.warnings'
    logging.captureWarnings(True)


def level_from_name(name: str, default: int = logging.WARNING) -> int:
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else default
