# src/ttt/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from ..config import Settings
from ..tasks.task_models import Store


@dataclass
class AppState:
    """
    Everything one command invocation works with.

    Built fresh by the composition root for every process; nothing here
    outlives the command.
    """

    settings: Settings
    data_file: Path
    now: datetime
    store: Store
    passphrase: str
    is_new_store: bool
