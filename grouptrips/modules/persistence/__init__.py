"""Exports for pending intent persistence"""

from .models import IntentTierName, PersistedIntent, TIER_PRIORITY
from .service import IntentPersistence
from .stores import KeyValueStore
from .tiers import IntentTier, KeyValueIntentTier, PendingTripRepositoryFactory, StagingRecordTier

__all__ = [
    "IntentPersistence",
    "IntentTier",
    "IntentTierName",
    "KeyValueIntentTier",
    "KeyValueStore",
    "PendingTripRepositoryFactory",
    "PersistedIntent",
    "StagingRecordTier",
    "TIER_PRIORITY",
]
