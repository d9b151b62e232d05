# src/ttt/errors.py

"""
User-facing error taxonomy.

Every TrackerError is reported by the CLI as a plain message with exit code 2.
Anything that is not a TrackerError is treated as a bug and propagates.
"""

from __future__ import annotations

GENERIC_CRYPTO_MESSAGE = "Invalid passphrase or corrupted data file."


class TrackerError(Exception):
    """Base class for errors shown to the user."""

    exit_code = 2


class ValidationError(TrackerError):
    """Bad user input: index, id, selection, name, timestamp, edit syntax."""


class TaskConflictError(ValidationError):
    """A transition would leave two segments open at the same time."""


class CanceledError(TrackerError):
    def __init__(self, message: str = "Canceled.") -> None:
        super().__init__(message)


class CryptoError(TrackerError):
    """
    Decryption failure.

    The message is always the same so the caller cannot tell a wrong
    passphrase from a damaged or foreign file.
    """

    def __init__(self) -> None:
        super().__init__(GENERIC_CRYPTO_MESSAGE)


class StorageError(TrackerError):
    """Reading or writing a data file failed."""
