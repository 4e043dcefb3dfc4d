"""Fan-out persistence of pending trip intents over every configured tier."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from grouptrips.modules.drafts import DraftValidationError

from .models import IntentTierName, PersistedIntent
from .stores import KeyValueStore
from .tiers import IntentTier, KeyValueIntentTier, PendingTripRepositoryFactory, StagingRecordTier

logger = logging.getLogger(__name__)

AWAITING_PAYMENT_KEY = "pendingPayment"


@dataclass(slots=True)
class IntentPersistence:
    """Writes to all tiers, reads from the highest-priority tier that answers.

    A failing tier is logged and skipped; only the caller decides whether the
    absence of an intent everywhere is an error.
    """

    tiers: Sequence[IntentTier]
    flag_store: KeyValueStore
    _ordered: list[IntentTier] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._ordered = sorted(self.tiers, key=lambda tier: tier.priority, reverse=True)

    @classmethod
    def build(
        cls,
        session_factory: async_sessionmaker[AsyncSession],
        repository_factory: PendingTripRepositoryFactory,
        *,
        durable_store: KeyValueStore,
        ephemeral_store: KeyValueStore,
    ) -> "IntentPersistence":
        return cls(
            tiers=[
                StagingRecordTier(session_factory, repository_factory),
                KeyValueIntentTier(IntentTierName.LOCAL_DURABLE, durable_store),
                KeyValueIntentTier(IntentTierName.EPHEMERAL, ephemeral_store),
            ],
            flag_store=ephemeral_store,
        )

    @property
    def ordered_tiers(self) -> list[IntentTier]:
        return list(self._ordered)

    async def save(self, intent: PersistedIntent) -> list[IntentTierName]:
        stored: list[IntentTierName] = []
        for tier in self._ordered:
            try:
                await tier.save(intent)
            except Exception:
                logger.warning("Failed to stage intent %s in tier %s", intent.intent_id, tier.name.value, exc_info=True)
                continue
            stored.append(tier.name)
        if not stored:
            logger.warning("Intent %s could not be staged in any tier", intent.intent_id)
        else:
            logger.info("Intent %s staged in tiers %s", intent.intent_id, [name.value for name in stored])
        return stored

    async def load_best_available(self, actor_id: str) -> PersistedIntent | None:
        """Return the first intent found in descending tier priority.

        A tier holding an unreadable draft is skipped in favour of lower
        tiers; if nothing usable is found the first validation error is
        raised so the form can be pre-filled from what was salvaged.
        """
        invalid: DraftValidationError | None = None
        for tier in self._ordered:
            try:
                intent = await tier.load(actor_id)
            except DraftValidationError as exc:
                logger.warning("Tier %s holds an invalid draft for actor %s: %s", tier.name.value, actor_id, exc)
                invalid = invalid or exc
                continue
            except Exception:
                logger.warning("Failed to read tier %s for actor %s", tier.name.value, actor_id, exc_info=True)
                continue
            if intent is not None:
                logger.info("Recovered intent %s from tier %s", intent.intent_id, tier.name.value)
                return intent
        if invalid is not None:
            raise invalid
        return None

    async def purge(self, actor_id: str) -> list[IntentTierName]:
        cleared: list[IntentTierName] = []
        for tier in self._ordered:
            try:
                await tier.delete(actor_id)
            except Exception:
                logger.warning("Failed to purge tier %s for actor %s", tier.name.value, actor_id, exc_info=True)
                continue
            cleared.append(tier.name)
        return cleared

    async def mark_awaiting_payment(self, actor_id: str) -> None:
        try:
            await self.flag_store.set(self._flag_key(actor_id), "true")
        except Exception:
            logger.warning("Failed to set awaiting-payment marker for actor %s", actor_id, exc_info=True)

    async def is_awaiting_payment(self, actor_id: str) -> bool:
        try:
            return await self.flag_store.get(self._flag_key(actor_id)) == "true"
        except Exception:
            logger.warning("Failed to read awaiting-payment marker for actor %s", actor_id, exc_info=True)
            return False

    async def clear_awaiting_payment(self, actor_id: str) -> None:
        try:
            await self.flag_store.delete(self._flag_key(actor_id))
        except Exception:
            logger.warning("Failed to clear awaiting-payment marker for actor %s", actor_id, exc_info=True)

    @staticmethod
    def _flag_key(actor_id: str) -> str:
        return f"{actor_id}:{AWAITING_PAYMENT_KEY}"
