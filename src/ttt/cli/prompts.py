# src/ttt/cli/prompts.py

from __future__ import annotations

import typer

from ..core.ports import Prompter
from ..errors import CanceledError, ValidationError

_CANCEL_WORDS = {"", "q", "quit"}


class ConsolePrompter:
    """Prompter backed by typer/click prompts on the controlling terminal."""

    def line(self, message: str) -> str:
        try:
            value = typer.prompt(message, default="", show_default=False, prompt_suffix=" ")
        except typer.Abort as exc:
            raise CanceledError() from exc
        return str(value).strip()

    def confirm(self, message: str) -> bool:
        try:
            return bool(typer.confirm(message, default=False))
        except typer.Abort as exc:
            raise CanceledError() from exc

    def secret(self, message: str) -> str:
        try:
            value = typer.prompt(
                message,
                default="",
                show_default=False,
                hide_input=True,
                prompt_suffix=" ",
            )
        except typer.Abort as exc:
            raise CanceledError() from exc
        return str(value)


def is_cancel(text: str) -> bool:
    return text.strip().lower() in _CANCEL_WORDS


def prompt_optional(prompter: Prompter, message: str) -> str | None:
    value = prompter.line(message)
    return value if value else None


def prompt_required(prompter: Prompter, message: str, label: str) -> str:
    value = prompter.line(message)
    if not value:
        raise ValidationError(f"{label} cannot be empty.")
    return value


def prompt_selection(prompter: Prompter, message: str, count: int, label: str) -> int:
    """
    Ask for a 1-based number in [1, count].

    Empty input, 'q' or 'quit' cancel the command.
    """
    raw = prompter.line(message)
    if is_cancel(raw):
        raise CanceledError()
    try:
        selection = int(raw)
    except ValueError as exc:
        raise ValidationError("Invalid selection. Enter a number from the list.") from exc
    if selection < 1 or selection > count:
        raise ValidationError(f"{label} must be between 1 and {count}.")
    return selection


def read_passphrase(prompter: Prompter, *, confirm: bool, label: str = "Passphrase") -> str:
    passphrase = prompter.secret(f"{label}:")
    if not passphrase.strip():
        raise ValidationError("Passphrase cannot be empty.")
    if confirm:
        again = prompter.secret(f"Confirm {label.lower()}:")
        if passphrase != again:
            raise ValidationError("Passphrases do not match.")
    return passphrase
