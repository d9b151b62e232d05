# src/ttt/storage/store_file.py

"""
Encrypted data file on disk: load, save, backups.

- A missing primary file is an empty store (nothing is decrypted).
- Every save to the primary path rotates backups first:
    <name>.bak1 (newest) ... <name>.bakN (oldest)
  Backups are only ever written by rotation, never rotated themselves.
- Files are written owner-only (0600) through a temp file + os.replace.
"""

from __future__ import annotations

import contextlib
import logging
import os
import tempfile
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from ..errors import StorageError
from ..tasks.task_models import Store
from .crypto import KdfParams, decrypt_store, encrypt_store

logger = logging.getLogger(__name__)

BACKUP_RETENTION = 3
_PRIVATE_MODE = 0o600


@dataclass(frozen=True, slots=True)
class BackupEntry:
    path: Path
    generation: int
    modified: datetime | None
    size: int


def backup_path(path: str | Path, generation: int) -> Path:
    path = Path(path)
    return path.with_name(f"{path.name}.bak{generation}")


def write_secure(path: str | Path, data: bytes) -> None:
    """
    Atomically replace `path` with `data`, owner read/write only.

    The temp file lives next to the target so os.replace stays on one
    filesystem. chmod is best-effort (no-op semantics on Windows).
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    # mkstemp creates the file with 0600 on POSIX.
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    tmp = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(data)
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp, path)
    except BaseException:
        with contextlib.suppress(OSError):
            tmp.unlink()
        raise
    with contextlib.suppress(OSError, NotImplementedError):
        os.chmod(path, _PRIVATE_MODE)


def rotate_backups(path: str | Path, retention: int = BACKUP_RETENTION) -> None:
    """
    Shift backups one generation up and copy the current primary into .bak1.

    Must run before the primary is overwritten.
    """
    path = Path(path)
    if retention < 1:
        return

    oldest = backup_path(path, retention)
    if oldest.exists():
        oldest.unlink()
    for gen in range(retention - 1, 0, -1):
        src = backup_path(path, gen)
        if src.exists():
            os.replace(src, backup_path(path, gen + 1))

    if path.exists():
        write_secure(backup_path(path, 1), path.read_bytes())
        logger.debug("Backup rotated path=%s retention=%d", path, retention)


def list_backups(path: str | Path, retention: int = BACKUP_RETENTION) -> list[BackupEntry]:
    """Existing backup generations, newest (1) first."""
    out: list[BackupEntry] = []
    for gen in range(1, retention + 1):
        bak = backup_path(path, gen)
        try:
            st = bak.stat()
        except FileNotFoundError:
            continue
        except OSError:
            logger.debug("Cannot stat backup %s", bak, exc_info=True)
            out.append(BackupEntry(path=bak, generation=gen, modified=None, size=0))
            continue
        out.append(
            BackupEntry(
                path=bak,
                generation=gen,
                modified=datetime.fromtimestamp(st.st_mtime).astimezone(),
                size=int(st.st_size),
            )
        )
    return out


def load_store(path: str | Path, passphrase: str) -> Store:
    path = Path(path)
    if not path.exists():
        logger.info("No data file at %s; starting with an empty store.", path)
        return Store()
    try:
        payload = path.read_text("utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise StorageError(f"Cannot read {path}: {exc}") from exc
    store = decrypt_store(payload, passphrase)
    logger.info("Loaded store path=%s tasks=%d", path, len(store.tasks))
    return store


def save_store(
    path: str | Path,
    store: Store,
    passphrase: str,
    *,
    rotate: bool = True,
    retention: int = BACKUP_RETENTION,
    kdf: KdfParams | None = None,
) -> None:
    """
    Encrypt and write `store`.

    `rotate=False` is for writes that must not shift backups (e.g. writing a
    backup path directly).
    """
    path = Path(path)
    payload = encrypt_store(store, passphrase, kdf=kdf)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        if rotate:
            rotate_backups(path, retention)
        write_secure(path, payload.encode("utf-8"))
    except OSError as exc:
        raise StorageError(f"Cannot write {path}: {exc}") from exc
    logger.info("Saved store path=%s tasks=%d", path, len(store.tasks))


def restore_backup(
    path: str | Path,
    entry: BackupEntry,
    passphrase: str,
    *,
    new_passphrase: str | None = None,
    retention: int = BACKUP_RETENTION,
    kdf: KdfParams | None = None,
) -> Store:
    """Decrypt a backup generation and save it as the primary file."""
    if not entry.path.exists():
        raise StorageError(f"Backup {entry.path} no longer exists.")
    store = load_store(entry.path, passphrase)
    save_store(
        path,
        store,
        new_passphrase or passphrase,
        retention=retention,
        kdf=kdf,
    )
    logger.info("Restored backup generation=%d into %s", entry.generation, path)
    return store
