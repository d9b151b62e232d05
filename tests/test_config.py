# tests/test_config.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

import pytest

from ttt.config import DATA_FILE_NAME, Settings, default_data_dir, resolve_data_file
from ttt.logging_setup import level_from_name

_VARS = ("TTT_DATA_DIR", "TTT_DATA_FILE", "TTT_LOG_LEVEL", "TTT_LOG_FILE", "TTT_BACKUP_RETENTION")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _VARS:
        monkeypatch.delenv(name, raising=False)


def test_from_env_defaults(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path))
    s = Settings.from_env()
    assert s.data_file is None
    assert s.log_level == "WARNING"
    assert s.log_file is None
    assert s.backup_retention == 3
    if sys.platform not in ("win32", "darwin"):
        assert s.data_dir == tmp_path / "ttt"


def test_from_env_overrides(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("TTT_DATA_DIR", str(tmp_path / "dir"))
    monkeypatch.setenv("TTT_DATA_FILE", str(tmp_path / "file.json"))
    monkeypatch.setenv("TTT_LOG_LEVEL", "debug")
    monkeypatch.setenv("TTT_LOG_FILE", str(tmp_path / "ttt.log"))
    monkeypatch.setenv("TTT_BACKUP_RETENTION", "5")

    s = Settings.from_env()
    assert s.data_dir == tmp_path / "dir"
    assert s.data_file == tmp_path / "file.json"
    assert s.log_level == "DEBUG"
    assert s.log_file == tmp_path / "ttt.log"
    assert s.backup_retention == 5


@pytest.mark.parametrize("raw, expected", [("0", 1), ("-4", 1), ("many", 3), ("", 3)])
def test_backup_retention_is_sane(monkeypatch: pytest.MonkeyPatch, raw: str, expected: int) -> None:
    monkeypatch.setenv("TTT_BACKUP_RETENTION", raw)
    assert Settings.from_env().backup_retention == expected


def test_resolve_data_file_precedence(tmp_path: Path) -> None:
    base = Settings(
        data_dir=tmp_path,
        data_file=None,
        log_level="WARNING",
        log_file=None,
        backup_retention=3,
    )
    assert resolve_data_file(base) == tmp_path / DATA_FILE_NAME

    pinned = Settings(
        data_dir=tmp_path,
        data_file=tmp_path / "pinned.json",
        log_level="WARNING",
        log_file=None,
        backup_retention=3,
    )
    assert resolve_data_file(pinned) == tmp_path / "pinned.json"
    assert resolve_data_file(pinned, tmp_path / "flag.json") == tmp_path / "flag.json"


@pytest.mark.skipif(sys.platform in ("win32", "darwin"), reason="XDG layout")
def test_default_data_dir_without_xdg(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.delenv("XDG_DATA_HOME", raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))
    assert default_data_dir() == tmp_path / ".local" / "share" / "ttt"


def test_level_from_name() -> None:
    assert level_from_name("info") == logging.INFO
    assert level_from_name("nonsense") == logging.WARNING
