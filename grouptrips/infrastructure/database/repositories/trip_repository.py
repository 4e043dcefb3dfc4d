"""SQLAlchemy implementation for trip repository"""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from grouptrips.db.models import Trip, TripMember
from grouptrips.modules.trips.exceptions import (
    CheckoutTokenConflictError,
    JoinCodeConflictError,
    MembershipCreationError,
    TripCreationError,
)
from grouptrips.modules.trips.join_codes import normalize_join_code
from grouptrips.modules.trips.service import RepositoryScope


class SqlTripRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_by_checkout_token(self, checkout_token: str) -> Trip | None:
        stmt = select(Trip).where(Trip.checkout_token == checkout_token)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def get_by_join_code(self, join_code: str) -> Trip | None:
        stmt = select(Trip).where(Trip.join_code == normalize_join_code(join_code))
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def _join_code_taken(self, join_code: str) -> bool:
        return await self.get_by_join_code(join_code) is not None

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
    ) -> Trip:
        trip = Trip(
            name=name,
            group_name=group_name,
            description=description,
            join_code=normalize_join_code(join_code),
            admin_id=admin_id,
            departure_time=departure_time,
            return_time=return_time,
            status="planning",
            checkout_token=checkout_token,
        )
        self.session.add(trip)
        try:
            # committed on its own so a later membership failure cannot undo it
            await self.session.commit()
        except IntegrityError as exc:
            await self.session.rollback()
            if await self.get_by_checkout_token(checkout_token) is not None:
                raise CheckoutTokenConflictError(checkout_token) from exc
            if await self._join_code_taken(join_code):
                raise JoinCodeConflictError(join_code) from exc
            raise TripCreationError(f"Failed to create trip: {exc.orig}") from exc
        except SQLAlchemyError as exc:
            await self.session.rollback()
            raise TripCreationError(f"Failed to create trip: {exc}") from exc
        await self.session.refresh(trip)
        return trip

    async def get_member(self, trip_id: str, user_id: str) -> TripMember | None:
        stmt = select(TripMember).where(TripMember.trip_id == trip_id, TripMember.user_id == user_id)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def add_member(self, trip_id: str, user_id: str, role: str) -> TripMember:
        member = TripMember(trip_id=trip_id, user_id=user_id, role=role)
        self.session.add(member)
        try:
            await self.session.commit()
        except SQLAlchemyError as exc:
            await self.session.rollback()
            raise MembershipCreationError(f"Failed to add member: {exc}") from exc
        await self.session.refresh(member)
        return member


def sql_repository_scope(session_factory: async_sessionmaker[AsyncSession]) -> RepositoryScope:
    """Each creation runs on its own session so it can outlive the caller's wait."""

    @asynccontextmanager
    async def scope() -> AsyncIterator[SqlTripRepository]:
        async with session_factory() as session:
            yield SqlTripRepository(session)

    return scope
