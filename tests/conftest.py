# tests/conftest.py

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

import pytest

from ttt.config import Settings
from ttt.core.state import AppState
from ttt.storage import crypto
from ttt.tasks.task_models import Store


@pytest.fixture(autouse=True)
def cheap_kdf(monkeypatch: pytest.MonkeyPatch) -> crypto.KdfParams:
    """
    Use a low Argon2id cost for every test.

    Tests that care about the real defaults pass KdfParams() explicitly.
    """
    params = crypto.KdfParams(m_cost=1024, t_cost=1, p_cost=1)
    monkeypatch.setattr(crypto, "DEFAULT_KDF", params)
    return params


@pytest.fixture()
def now() -> datetime:
    return datetime(2025, 1, 15, 10, 0, 0, tzinfo=UTC)


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    """
    Settings built directly (not from env) so tests are isolated from the
    developer's environment and .env file.
    """
    return Settings(
        data_dir=tmp_path,
        data_file=tmp_path / "ttt.json",
        log_level="WARNING",
        log_file=None,
        backup_retention=3,
    )


@pytest.fixture()
def state(settings: Settings, now: datetime) -> AppState:
    assert settings.data_file is not None
    return AppState(
        settings=settings,
        data_file=settings.data_file,
        now=now,
        store=Store(),
        passphrase="correct horse",
        is_new_store=True,
    )
