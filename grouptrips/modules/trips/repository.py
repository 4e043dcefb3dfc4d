"""Repository protocol for trips and their members."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from grouptrips.db.models import Trip as TripModel, TripMember as TripMemberModel


class TripRepository(Protocol):
    async def get_by_checkout_token(self, checkout_token: str) -> TripModel | None:
        ...

    async def get_by_join_code(self, join_code: str) -> TripModel | None:
        ...

    async def create_trip(
        self,
        *,
        name: str,
        group_name: str | None,
        description: str | None,
        join_code: str,
        admin_id: str,
        departure_time: datetime,
        return_time: datetime | None,
        checkout_token: str,
    ) -> TripModel:
        """Insert and commit the trip.

        Raises ``JoinCodeConflictError`` or ``CheckoutTokenConflictError``
        when a uniqueness constraint rejects the row.
        """
        ...

    async def get_member(self, trip_id: str, user_id: str) -> TripMemberModel | None:
        ...

    async def add_member(self, trip_id: str, user_id: str, role: str) -> TripMemberModel:
        ...
