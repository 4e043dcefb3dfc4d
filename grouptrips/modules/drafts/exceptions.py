"""Draft specific exceptions."""

from __future__ import annotations

from typing import Any


class DraftError(Exception):
    """Base class for trip draft errors."""


class DraftValidationError(DraftError):
    """Raised when a draft is malformed, incomplete or stale.

    ``salvaged`` holds whatever fields could still be parsed so the details
    form can be pre-filled instead of starting from scratch.
    """

    def __init__(self, message: str, *, field: str | None = None, salvaged: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.field = field
        self.salvaged = dict(salvaged or {})
