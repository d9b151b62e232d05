# src/ttt/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the commands.

Commands talk to the user through a Prompter instead of reading stdin
directly. The console implementation lives in ttt.cli.prompts; tests use a
scripted fake.
"""

from typing import Protocol


class Prompter(Protocol):
    """Line-based interaction with the user."""

    def line(self, message: str) -> str:
        """Read one line, stripped. Empty string on empty input."""
        ...

    def confirm(self, message: str) -> bool:
        """Yes/no question; anything but an explicit yes is no."""
        ...

    def secret(self, message: str) -> str:
        """Read a line without echoing it."""
        ...
