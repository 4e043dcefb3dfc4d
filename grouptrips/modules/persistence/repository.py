"""Repository protocol for the server-side pending trip staging record."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from grouptrips.db.models import PendingTrip as PendingTripModel


class PendingTripRepository(Protocol):
    async def upsert_for_user(
        self,
        user_id: str,
        *,
        intent_id: str,
        name: str,
        group_name: str | None,
        description: str | None,
        departure_time: str,
        return_time: str | None,
        staged_at: datetime,
    ) -> PendingTripModel:
        ...

    async def get_for_user(self, user_id: str) -> PendingTripModel | None:
        ...

    async def delete_for_user(self, user_id: str) -> int:
        ...
