# tests/test_store_file.py

from __future__ import annotations

import os
import stat
import sys
from datetime import datetime, timedelta
from pathlib import Path

import pytest

from ttt.errors import CryptoError, StorageError
from ttt.storage.store_file import (
    backup_path,
    list_backups,
    load_store,
    restore_backup,
    rotate_backups,
    save_store,
    write_secure,
)
from ttt.tasks.task_models import Store

from .fakes import make_task

PASS = "correct horse"


def _store(now: datetime, count: int) -> Store:
    return Store(
        tasks=[make_task(f"task {i}", [(i, i + 1)], base=now) for i in range(count)]
    )


def test_missing_file_loads_empty_store(tmp_path: Path) -> None:
    path = tmp_path / "nothing.json"
    assert load_store(path, PASS) == Store()
    assert not path.exists()


def test_save_creates_parent_directories(tmp_path: Path, now: datetime) -> None:
    path = tmp_path / "deep" / "er" / "ttt.json"
    save_store(path, _store(now, 1), PASS)
    assert load_store(path, PASS) == _store(now, 1)


def test_first_save_makes_no_backup(tmp_path: Path, now: datetime) -> None:
    path = tmp_path / "ttt.json"
    save_store(path, _store(now, 1), PASS)
    assert list_backups(path) == []


def test_rotation_keeps_three_generations(tmp_path: Path, now: datetime) -> None:
    path = tmp_path / "ttt.json"
    for count in range(1, 5):
        save_store(path, _store(now, count), PASS)

    assert load_store(path, PASS) == _store(now, 4)
    assert load_store(backup_path(path, 1), PASS) == _store(now, 3)
    assert load_store(backup_path(path, 2), PASS) == _store(now, 2)
    assert load_store(backup_path(path, 3), PASS) == _store(now, 1)
    assert not backup_path(path, 4).exists()

    backups = list_backups(path)
    assert [b.generation for b in backups] == [1, 2, 3]
    assert [b.path.name for b in backups] == ["ttt.json.bak1", "ttt.json.bak2", "ttt.json.bak3"]
    assert all(b.size > 0 and b.modified is not None for b in backups)


def test_fifth_save_drops_oldest(tmp_path: Path, now: datetime) -> None:
    path = tmp_path / "ttt.json"
    for count in range(1, 6):
        save_store(path, _store(now, count), PASS)
    assert load_store(backup_path(path, 3), PASS) == _store(now, 2)


def test_save_without_rotation(tmp_path: Path, now: datetime) -> None:
    path = tmp_path / "ttt.json"
    save_store(path, _store(now, 1), PASS)
    save_store(path, _store(now, 2), PASS, rotate=False)
    assert list_backups(path) == []


def test_custom_retention(tmp_path: Path, now: datetime) -> None:
    path = tmp_path / "ttt.json"
    for count in range(1, 5):
        save_store(path, _store(now, count), PASS, retention=1)
    assert [b.generation for b in list_backups(path, retention=3)] == [1]


def test_rotate_without_primary_only_shifts(tmp_path: Path) -> None:
    path = tmp_path / "ttt.json"
    backup_path(path, 1).write_bytes(b"one")
    rotate_backups(path)
    assert not backup_path(path, 1).exists()
    assert backup_path(path, 2).read_bytes() == b"one"


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX permissions")
def test_files_are_owner_only(tmp_path: Path, now: datetime) -> None:
    path = tmp_path / "ttt.json"
    save_store(path, _store(now, 1), PASS)
    save_store(path, _store(now, 2), PASS)
    for target in (path, backup_path(path, 1)):
        assert stat.S_IMODE(os.stat(target).st_mode) == 0o600


def test_write_secure_replaces_and_leaves_no_temp(tmp_path: Path) -> None:
    path = tmp_path / "blob"
    write_secure(path, b"first")
    write_secure(path, b"second")
    assert path.read_bytes() == b"second"
    assert sorted(p.name for p in tmp_path.iterdir()) == ["blob"]


def test_wrong_passphrase_on_load(tmp_path: Path, now: datetime) -> None:
    path = tmp_path / "ttt.json"
    save_store(path, _store(now, 1), PASS)
    with pytest.raises(CryptoError):
        load_store(path, "wrong")


def test_unreadable_data_is_a_storage_error(tmp_path: Path) -> None:
    path = tmp_path / "ttt.json"
    path.mkdir()
    with pytest.raises(StorageError):
        load_store(path, PASS)


def test_restore_backup_rotates_and_replaces_primary(tmp_path: Path, now: datetime) -> None:
    path = tmp_path / "ttt.json"
    for count in range(1, 4):
        save_store(path, _store(now, count), PASS)

    oldest = list_backups(path)[-1]
    assert oldest.generation == 2
    restored = restore_backup(path, oldest, PASS)

    assert restored == _store(now, 1)
    assert load_store(path, PASS) == _store(now, 1)
    # the pre-restore primary is now the newest backup
    assert load_store(backup_path(path, 1), PASS) == _store(now, 3)


def test_restore_backup_with_new_passphrase(tmp_path: Path, now: datetime) -> None:
    path = tmp_path / "ttt.json"
    save_store(path, _store(now, 1), PASS)
    save_store(path, _store(now, 2), PASS)

    restore_backup(path, list_backups(path)[0], PASS, new_passphrase="new one")
    assert load_store(path, "new one") == _store(now, 1)


def test_restore_missing_backup(tmp_path: Path, now: datetime) -> None:
    path = tmp_path / "ttt.json"
    save_store(path, _store(now, 1), PASS)
    save_store(path, _store(now, 2), PASS)
    entry = list_backups(path)[0]
    entry.path.unlink()
    with pytest.raises(StorageError):
        restore_backup(path, entry, PASS)


def test_backup_modified_is_local_aware(tmp_path: Path, now: datetime) -> None:
    path = tmp_path / "ttt.json"
    save_store(path, _store(now, 1), PASS)
    save_store(path, _store(now, 2), PASS)
    modified = list_backups(path)[0].modified
    assert modified is not None
    assert modified.tzinfo is not None
    assert abs(modified - datetime.now().astimezone()) < timedelta(minutes=5)


def test_backup_generations_get_strictly_older(tmp_path: Path, now: datetime) -> None:
    path = tmp_path / "ttt.json"
    for count in range(1, 5):
        save_store(path, _store(now, count), PASS)
        # age every existing backup so rotation order shows up in mtimes
        for entry in list_backups(path):
            mtime = entry.path.stat().st_mtime - 60
            os.utime(entry.path, (mtime, mtime))

    backups = list_backups(path)
    stamps = [b.modified for b in backups]
    assert len(stamps) == 3 and None not in stamps
    assert stamps[0] > stamps[1] > stamps[2]
