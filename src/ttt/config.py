# src/ttt/config.py

"""Settings loaded from environment variables (+ optional .env).

- One Settings object per process.
- Nothing secret lives here: the passphrase is always prompted.
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "TTT"
APP_NAME = "ttt"
DATA_FILE_NAME = "ttt.json"

load_dotenv(override=False)


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path | None) -> Path | None:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


def default_data_dir() -> Path:
    """Per-user application data directory for the current platform."""
    home = Path.home()
    if sys.platform.startswith("win"):
        base = os.environ.get("APPDATA")
        root = Path(base) if base else home / "AppData" / "Roaming"
        return root / APP_NAME / APP_NAME / "data"
    if sys.platform == "darwin":
        return home / "Library" / "Application Support" / f"com.{APP_NAME}.{APP_NAME}"
    base = os.environ.get("XDG_DATA_HOME")
    root = Path(base) if base else home / ".local" / "share"
    return root / APP_NAME


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- Paths ----
    data_dir: Path
    data_file: Path | None

    # ---- Logging ----
    log_level: str
    log_file: Path | None

    # ---- Storage ----
    backup_retention: int

    @staticmethod
    def from_env() -> Settings:
        data_dir = _env_path(_k("DATA_DIR"), None) or default_data_dir()
        return Settings(
            data_dir=data_dir,
            data_file=_env_path(_k("DATA_FILE"), None),
            log_level=_env(_k("LOG_LEVEL"), "WARNING").strip().upper() or "WARNING",
            log_file=_env_path(_k("LOG_FILE"), None),
            backup_retention=max(1, _env_int(_k("BACKUP_RETENTION"), 3)),
        )


def resolve_data_file(settings: Settings, override: Path | None = None) -> Path:
    """--data-file beats TTT_DATA_FILE beats <data_dir>/ttt.json."""
    if override is not None:
        return Path(override).expanduser()
    if settings.data_file is not None:
        return settings.data_file
    return settings.data_dir / DATA_FILE_NAME


_SETTINGS: Settings | None = None


def get_settings() -> Settings:
    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = Settings.from_env()
    return _SETTINGS
