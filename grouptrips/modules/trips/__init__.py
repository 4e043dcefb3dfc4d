"""Exports for trip domain"""

from .exceptions import (
    CheckoutTokenConflictError,
    CreationTimeoutError,
    JoinCodeConflictError,
    JoinCodeExhaustedError,
    MembershipCreationError,
    TripCreationError,
    TripError,
)
from .join_codes import JOIN_CODE_ALPHABET, JOIN_CODE_LENGTH, generate_join_code, normalize_join_code
from .models import CreationResult, Trip, TripMembership
from .service import CREATION_TIMEOUT_MESSAGE, MEMBERSHIP_WARNING, RepositoryScope, TripCreator

__all__ = [
    "CREATION_TIMEOUT_MESSAGE",
    "CheckoutTokenConflictError",
    "CreationResult",
    "CreationTimeoutError",
    "JOIN_CODE_ALPHABET",
    "JOIN_CODE_LENGTH",
    "JoinCodeConflictError",
    "JoinCodeExhaustedError",
    "MEMBERSHIP_WARNING",
    "MembershipCreationError",
    "RepositoryScope",
    "Trip",
    "TripCreationError",
    "TripCreator",
    "TripError",
    "TripMembership",
    "generate_join_code",
    "normalize_join_code",
]
