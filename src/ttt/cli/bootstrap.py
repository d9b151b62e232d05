# src/ttt/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once and configures logging,
- resolves the data file path,
- asks for the passphrase and loads the store into an AppState,
- writes the store back when a command changed it.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from pathlib import Path

from ..config import Settings, get_settings, resolve_data_file
from ..core.ports import Prompter
from ..core.state import AppState
from ..logging_setup import level_from_name, setup_logging
from ..storage.store_file import load_store, save_store
from .prompts import read_passphrase

logger = logging.getLogger(__name__)


def init_runtime(settings: Settings | None = None) -> Settings:
    """Load settings and configure logging; returns the settings used."""
    if settings is None:
        settings = get_settings()
    setup_logging(
        console_level=level_from_name(settings.log_level),
        log_file=settings.log_file,
    )
    return settings


def create_initial_state(
    *,
    settings: Settings,
    data_file: Path,
    prompter: Prompter,
    will_write: bool,
    now: datetime | None = None,
) -> AppState:
    """
    Prompt for the passphrase and load the store.

    The passphrase is confirmed only when this command is about to create the
    data file, so a typo cannot lock the user out of fresh data.
    """
    is_new_store = not data_file.exists()
    passphrase = read_passphrase(prompter, confirm=will_write and is_new_store)
    store = load_store(data_file, passphrase)
    return AppState(
        settings=settings,
        data_file=data_file,
        now=now or datetime.now(UTC),
        store=store,
        passphrase=passphrase,
        is_new_store=is_new_store,
    )


def persist_state(state: AppState) -> None:
    save_store(
        state.data_file,
        state.store,
        state.passphrase,
        retention=state.settings.backup_retention,
    )


def data_file_for(settings: Settings, override: Path | None) -> Path:
    path = resolve_data_file(settings, override)
    logger.debug("Using data file %s", path)
    return path
