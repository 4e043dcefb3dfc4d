"""Domain models for created trips."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(slots=True)
class Trip:
    id: str
    name: str
    join_code: str
    admin_id: str
    departure_time: datetime
    status: str
    group_name: Optional[str] = None
    description: Optional[str] = None
    return_time: Optional[datetime] = None
    checkout_token: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass(slots=True)
class TripMembership:
    id: str
    trip_id: str
    user_id: str
    role: str
    joined_at: Optional[datetime] = None


@dataclass(slots=True)
class CreationResult:
    trip: Trip
    membership: Optional[TripMembership]
    created: bool
    warning: Optional[str] = None
