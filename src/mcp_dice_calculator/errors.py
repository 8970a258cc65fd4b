from __future__ import annotations


class DiceError(ValueError):
    """User-facing validation errors (fail-fast, no roll performed)."""


class LexError(DiceError):
    """Raised when a chunk of the input is neither a number nor a die."""
