import asyncio
from dataclasses import replace
from typing import Any

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from grouptrips.core.config import CheckoutSettings
from grouptrips.db import models  # noqa: F401
from grouptrips.infrastructure.database.base import Base
from grouptrips.infrastructure.database.repositories import SqlPendingTripRepository, sql_repository_scope
from grouptrips.infrastructure.storage import InMemoryKeyValueStore, JsonFileKeyValueStore
from grouptrips.modules.checkout import CheckoutFlow
from grouptrips.modules.payments import (
    ActorVerification,
    Correlator,
    GatewaySession,
    PaymentGatewayError,
    SessionVerification,
    TokenShape,
)
from grouptrips.modules.persistence import IntentPersistence
from grouptrips.modules.trips import TripCreator


class FakeGateway:
    """In-memory payment gateway recording every call made to it."""

    def __init__(self, *, sessions: bool = True, links: bool = True) -> None:
        self.supports_sessions = sessions
        self.supports_actor_links = links
        self.sessions: dict[str, dict[str, Any]] = {}
        # actor id -> paid checkout ids, newest first
        self.paid_checkouts: dict[str, list[str]] = {}
        self.metadata_limit = 500
        self.calls: list[tuple[str, str]] = []
        self.fail_create = False
        self.fail_verify_session = False
        self.fail_verify_actor = False

    async def create_session(self, draft, actor_id, *, email=None):
        self.calls.append(("create_session", actor_id))
        if self.fail_create:
            raise PaymentGatewayError("gateway rejected the session")
        session_id = f"sess_{len(self.sessions) + 1}"
        held = replace(
            draft,
            title=draft.title[: self.metadata_limit],
            description=draft.description[: self.metadata_limit] if draft.description else None,
        )
        self.sessions[session_id] = {
            "draft": held,
            "actor_id": actor_id,
            "paid": False,
            "truncated": held != draft,
        }
        return GatewaySession(id=session_id, url=f"https://pay.example/{session_id}")

    def redirect_to(self, token, actor_hint=None):
        if token.shape is TokenShape.SESSION:
            return token.redirect_url
        return f"https://pay.example/link?client_reference_id={token.value}"

    def pay(self, session_id: str) -> None:
        session = self.sessions[session_id]
        session["paid"] = True
        self.paid_checkouts.setdefault(session["actor_id"], []).insert(0, session_id)

    def pay_link(self, actor_id: str, checkout_id: str) -> None:
        self.paid_checkouts.setdefault(actor_id, []).insert(0, checkout_id)

    async def verify_by_session(self, token):
        self.calls.append(("verify_by_session", token))
        # give concurrently scheduled tasks a chance to run
        await asyncio.sleep(0)
        if self.fail_verify_session:
            raise PaymentGatewayError("gateway unreachable")
        session = self.sessions.get(token)
        if session is None:
            return SessionVerification(paid=False)
        return SessionVerification(
            paid=session["paid"],
            draft=session["draft"] if session["paid"] else None,
            actor_id=session["actor_id"],
            draft_truncated=session["truncated"],
        )

    def calls_to(self, name: str) -> list[str]:
        return [arg for call, arg in self.calls if call == name]

    async def verify_by_actor(self, actor_id):
        self.calls.append(("verify_by_actor", actor_id))
        await asyncio.sleep(0)
        if self.fail_verify_actor:
            raise PaymentGatewayError("gateway unreachable")
        return ActorVerification(session_ids=tuple(self.paid_checkouts.get(actor_id, [])))


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def durable_store(tmp_path) -> JsonFileKeyValueStore:
    return JsonFileKeyValueStore(tmp_path / "pending_intents")


@pytest.fixture
def ephemeral_store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def persistence(session_factory, durable_store, ephemeral_store) -> IntentPersistence:
    return IntentPersistence.build(
        session_factory,
        SqlPendingTripRepository,
        durable_store=durable_store,
        ephemeral_store=ephemeral_store,
    )


@pytest.fixture
def creator(session_factory) -> TripCreator:
    return TripCreator.from_settings(sql_repository_scope(session_factory), CheckoutSettings())


@pytest.fixture
def make_flow(gateway, persistence, creator):
    """Each call models a fresh mount of the page, sharing storage and gateway."""

    def factory(**overrides) -> CheckoutFlow:
        options = {
            "correlator": Correlator(gateway),
            "gateway": gateway,
            "persistence": persistence,
            "creator": creator,
        }
        options.update(overrides)
        return CheckoutFlow(**options)

    return factory
