"""Domain models for trip intents stashed across the payment redirect."""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from grouptrips.modules.drafts import DraftValidationError, TripDraft, parse_instant


class IntentTierName(str, Enum):
    STAGING_RECORD = "staging_record"
    LOCAL_DURABLE = "local_durable"
    EPHEMERAL = "ephemeral"


# A record that cannot be lost by closing the tab outranks one that can.
TIER_PRIORITY: dict[IntentTierName, int] = {
    IntentTierName.STAGING_RECORD: 300,
    IntentTierName.LOCAL_DURABLE: 200,
    IntentTierName.EPHEMERAL: 100,
}


def new_intent_id() -> str:
    return str(uuid.uuid4())


@dataclass(frozen=True, slots=True)
class PersistedIntent:
    draft: TripDraft
    actor_id: str
    intent_id: str = field(default_factory=new_intent_id)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    tier: Optional[IntentTierName] = None

    @classmethod
    def from_mapping(cls, payload: Any, *, tier: IntentTierName | None = None) -> "PersistedIntent":
        if not isinstance(payload, Mapping):
            raise DraftValidationError("Stored intent must be an object")
        actor_id = payload.get("actor_id")
        intent_id = payload.get("intent_id")
        if not actor_id or not intent_id:
            raise DraftValidationError("Stored intent is missing its owner", salvaged=_salvage(payload.get("draft")))
        draft = TripDraft.from_mapping(payload.get("draft"))
        try:
            created_at = parse_instant(payload.get("created_at")) or datetime.now(timezone.utc)
        except ValueError:
            created_at = datetime.now(timezone.utc)
        return cls(
            draft=draft,
            actor_id=str(actor_id),
            intent_id=str(intent_id),
            created_at=created_at,
            tier=tier,
        )

    def to_mapping(self) -> dict[str, Any]:
        return {
            "intent_id": self.intent_id,
            "actor_id": self.actor_id,
            "created_at": self.created_at.isoformat(),
            "draft": self.draft.to_mapping(),
        }


def _salvage(payload: Any) -> dict[str, Any]:
    try:
        return TripDraft.from_mapping(payload).to_mapping()
    except DraftValidationError as exc:
        return exc.salvaged
