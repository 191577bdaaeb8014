"""Exception types raised by the counterpoint generator.

Every error derives from :class:`CounterpointError` so callers such as the
CLI can handle the whole family with a single ``except`` clause. Lookup
failures additionally subclass :class:`ValueError` and search failures
subclass :class:`RuntimeError`, matching the built-in exceptions the rest of
the package raised before the hierarchy existed.
"""

from __future__ import annotations

__all__ = [
    "CounterpointError",
    "KeyNotFoundError",
    "NoteNotInKeyError",
    "OctaveAnchorError",
    "CantusGenerationStalled",
    "CounterpointSearchExhausted",
]


class CounterpointError(Exception):
    """Base class for all errors raised by this package."""


class KeyNotFoundError(CounterpointError, ValueError):
    """The requested key is missing from the key table."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Unknown key '{key}'")
        self.key = key


class NoteNotInKeyError(CounterpointError, ValueError):
    """A note name cannot be resolved against the active key."""

    def __init__(self, note: str, key) -> None:
        super().__init__(f"Note '{note}' is not part of key {list(key)}")
        self.note = note


class OctaveAnchorError(CounterpointError, ValueError):
    """No octave boundary could be derived for a key."""


class CantusGenerationStalled(CounterpointError, RuntimeError):
    """The cantus search ran out of legal notes."""


class CounterpointSearchExhausted(CounterpointError, RuntimeError):
    """The counterpoint search backtracked out of the first position."""

    def __init__(self, message: str, cantus=None) -> None:
        super().__init__(message)
        self.cantus = tuple(cantus) if cantus is not None else None
