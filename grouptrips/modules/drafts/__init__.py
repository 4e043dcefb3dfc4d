"""Exports for trip draft domain"""

from .exceptions import DraftError, DraftValidationError
from .models import TripDraft, parse_instant

__all__ = [
    "DraftError",
    "DraftValidationError",
    "TripDraft",
    "parse_instant",
]
