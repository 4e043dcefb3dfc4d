"""Storage tiers able to hold a pending trip intent across the payment redirect."""

from __future__ import annotations

import json
import logging
from datetime import timezone
from typing import Callable, Protocol

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from grouptrips.db.models import PendingTrip as PendingTripModel
from grouptrips.modules.drafts import DraftValidationError, TripDraft

from .models import TIER_PRIORITY, IntentTierName, PersistedIntent
from .repository import PendingTripRepository
from .stores import KeyValueStore

logger = logging.getLogger(__name__)

INTENT_KEY = "pendingTripData"

PendingTripRepositoryFactory = Callable[[AsyncSession], PendingTripRepository]


class IntentTier(Protocol):
    name: IntentTierName

    @property
    def priority(self) -> int:
        ...

    async def save(self, intent: PersistedIntent) -> None:
        ...

    async def load(self, actor_id: str) -> PersistedIntent | None:
        ...

    async def delete(self, actor_id: str) -> None:
        ...


class StagingRecordTier:
    """Authoritative tier: the ``pending_trips`` row keyed by the actor.

    Every operation runs in its own session so a failure here never touches
    the caller's transaction.
    """

    name = IntentTierName.STAGING_RECORD

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        repository_factory: PendingTripRepositoryFactory,
    ) -> None:
        self._session_factory = session_factory
        self._repository_factory = repository_factory

    @property
    def priority(self) -> int:
        return TIER_PRIORITY[self.name]

    async def save(self, intent: PersistedIntent) -> None:
        draft = intent.draft
        async with self._session_factory() as session:
            repository = self._repository_factory(session)
            await repository.upsert_for_user(
                intent.actor_id,
                intent_id=intent.intent_id,
                name=draft.title,
                group_name=draft.group_label,
                description=draft.description,
                departure_time=draft.start_at.isoformat(),
                return_time=draft.end_at.isoformat() if draft.end_at else None,
                staged_at=intent.created_at,
            )
            await session.commit()

    async def load(self, actor_id: str) -> PersistedIntent | None:
        async with self._session_factory() as session:
            record = await self._repository_factory(session).get_for_user(actor_id)
        if record is None:
            return None
        return self._to_intent(record)

    async def delete(self, actor_id: str) -> None:
        async with self._session_factory() as session:
            await self._repository_factory(session).delete_for_user(actor_id)
            await session.commit()

    def _to_intent(self, record: PendingTripModel) -> PersistedIntent:
        draft = TripDraft.from_mapping(
            {
                "title": record.name,
                "group_label": record.group_name,
                "description": record.description,
                "start_at": record.departure_time,
                "end_at": record.return_time,
            }
        )
        staged_at = record.staged_at
        if staged_at is not None and staged_at.tzinfo is None:
            staged_at = staged_at.replace(tzinfo=timezone.utc)
        return PersistedIntent(
            draft=draft,
            actor_id=record.user_id,
            intent_id=record.intent_id,
            created_at=staged_at,
            tier=self.name,
        )


class KeyValueIntentTier:
    """Client-side tier storing the intent as JSON under ``<actor>:pendingTripData``."""

    def __init__(self, name: IntentTierName, store: KeyValueStore) -> None:
        self.name = name
        self._store = store

    @property
    def priority(self) -> int:
        return TIER_PRIORITY[self.name]

    @staticmethod
    def key_for(actor_id: str) -> str:
        return f"{actor_id}:{INTENT_KEY}"

    async def save(self, intent: PersistedIntent) -> None:
        await self._store.set(self.key_for(intent.actor_id), json.dumps(intent.to_mapping()))

    async def load(self, actor_id: str) -> PersistedIntent | None:
        raw = await self._store.get(self.key_for(actor_id))
        if raw is None:
            return None
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise DraftValidationError("Failed to parse trip data. Please try again.") from exc
        intent = PersistedIntent.from_mapping(payload, tier=self.name)
        if intent.actor_id != actor_id:
            logger.warning("Tier %s holds an intent owned by another actor, ignoring it", self.name.value)
            return None
        return intent

    async def delete(self, actor_id: str) -> None:
        await self._store.delete(self.key_for(actor_id))
