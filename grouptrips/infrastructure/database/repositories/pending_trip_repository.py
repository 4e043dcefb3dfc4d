"""SQLAlchemy implementation for the pending trip staging record"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from grouptrips.db.models import PendingTrip


class SqlPendingTripRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_for_user(self, user_id: str) -> PendingTrip | None:
        stmt = select(PendingTrip).where(PendingTrip.user_id == user_id)
        result = await self.session.execute(stmt)
        return result.scalars().first()

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
    ) -> PendingTrip:
        values = {
            "intent_id": intent_id,
            "name": name,
            "group_name": group_name,
            "description": description,
            "departure_time": departure_time,
            "return_time": return_time,
            "staged_at": staged_at,
        }
        record = await self.get_for_user(user_id)
        if record is None:
            record = PendingTrip(user_id=user_id, **values)
            self.session.add(record)
            try:
                await self.session.flush()
                return record
            except IntegrityError:
                # another request staged a record for this user first
                await self.session.rollback()
                record = await self.get_for_user(user_id)
                if record is None:
                    raise
        for key, value in values.items():
            setattr(record, key, value)
        await self.session.flush()
        return record

    async def delete_for_user(self, user_id: str) -> int:
        stmt = delete(PendingTrip).where(PendingTrip.user_id == user_id)
        result = await self.session.execute(stmt)
        return result.rowcount or 0
