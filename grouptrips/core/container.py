"""Simple dependency container for wiring core services."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from grouptrips.core.config import Settings, get_settings
from grouptrips.infrastructure.database.repositories import SqlPendingTripRepository, sql_repository_scope
from grouptrips.infrastructure.database.session import get_engine
from grouptrips.infrastructure.payments import StripePaymentGateway
from grouptrips.infrastructure.storage import InMemoryKeyValueStore, JsonFileKeyValueStore
from grouptrips.modules.checkout import CheckoutFlow
from grouptrips.modules.payments import Correlator, PaymentGateway
from grouptrips.modules.persistence import IntentPersistence, KeyValueStore
from grouptrips.modules.trips import TripCreator


@dataclass(slots=True)
class ApplicationContainer:
    settings: Settings
    payment_gateway: PaymentGateway
    durable_store: KeyValueStore
    ephemeral_store: KeyValueStore

    def init_infrastructure(self) -> None:
        """Ensure infrastructure singletons (database engine, etc.) are initialised."""
        get_engine()

    def build_persistence(self, session_factory: async_sessionmaker[AsyncSession]) -> IntentPersistence:
        return IntentPersistence.build(
            session_factory,
            SqlPendingTripRepository,
            durable_store=self.durable_store,
            ephemeral_store=self.ephemeral_store,
        )

    def build_trip_creator(self, session_factory: async_sessionmaker[AsyncSession]) -> TripCreator:
        return TripCreator.from_settings(sql_repository_scope(session_factory), self.settings.checkout)

    def build_checkout_flow(self, session_factory: async_sessionmaker[AsyncSession]) -> CheckoutFlow:
        return CheckoutFlow(
            correlator=Correlator(self.payment_gateway),
            gateway=self.payment_gateway,
            persistence=self.build_persistence(session_factory),
            creator=self.build_trip_creator(session_factory),
        )


@lru_cache()
def get_container() -> ApplicationContainer:
    settings = get_settings()
    container = ApplicationContainer(
        settings=settings,
        payment_gateway=StripePaymentGateway(settings.payments, settings.return_url),
        durable_store=JsonFileKeyValueStore(settings.checkout.local_store_dir),
        ephemeral_store=InMemoryKeyValueStore(),
    )
    container.init_infrastructure()
    return container


__all__ = ["ApplicationContainer", "get_container"]
