"""Trip creation after a verified payment."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import timezone
from typing import AsyncContextManager, Callable, Optional

from grouptrips.core.config import CheckoutSettings
from grouptrips.db.models import Trip as TripModel, TripMember as TripMemberModel
from grouptrips.modules.drafts import TripDraft

from .exceptions import (
    CheckoutTokenConflictError,
    CreationTimeoutError,
    JoinCodeConflictError,
    JoinCodeExhaustedError,
    MembershipCreationError,
    TripCreationError,
)
from .join_codes import JOIN_CODE_ALPHABET, JOIN_CODE_LENGTH, generate_join_code
from .models import CreationResult, Trip, TripMembership
from .repository import TripRepository

logger = logging.getLogger(__name__)

OWNER_ROLE = "admin"

CREATION_TIMEOUT_MESSAGE = (
    "Creating the trip is taking longer than expected. It may still have been created on the server, "
    "so check your trips before trying again."
)
MEMBERSHIP_WARNING = "Trip created, but you could not be added as its admin yet. Re-open the trip to retry."

RepositoryScope = Callable[[], AsyncContextManager[TripRepository]]


@dataclass(slots=True)
class TripCreator:
    """Creates a trip plus its owner membership at most once per checkout token."""

    repository_scope: RepositoryScope
    timeout_seconds: float = 15.0
    join_code_length: int = JOIN_CODE_LENGTH
    join_code_alphabet: str = JOIN_CODE_ALPHABET
    max_attempts: int = 5
    code_generator: Optional[Callable[[], str]] = None

    @classmethod
    def from_settings(cls, repository_scope: RepositoryScope, settings: CheckoutSettings) -> "TripCreator":
        return cls(
            repository_scope=repository_scope,
            timeout_seconds=settings.creation_timeout_seconds,
            join_code_length=settings.join_code_length,
            join_code_alphabet=settings.join_code_alphabet,
            max_attempts=settings.join_code_max_attempts,
        )

    async def create(self, draft: TripDraft, actor_id: str, checkout_token: str) -> CreationResult:
        """Create the trip for ``checkout_token`` or return the one already created.

        Bounded by ``timeout_seconds``. On timeout the write is left running
        and ``CreationTimeoutError`` is raised: the trip may exist afterwards.
        """
        # re-checked here since stored drafts can be corrupted or tampered with
        draft.validate()
        task = asyncio.ensure_future(self._create(draft, actor_id, checkout_token))
        try:
            return await asyncio.wait_for(asyncio.shield(task), timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            logger.error("Trip creation for token %s timed out after %.1fs", checkout_token, self.timeout_seconds)
            task.add_done_callback(lambda done: _log_late_outcome(checkout_token, done))
            raise CreationTimeoutError(CREATION_TIMEOUT_MESSAGE) from None

    async def find_by_checkout_token(self, checkout_token: str) -> Trip | None:
        """Trip already paid for by ``checkout_token``, if any."""
        async with self.repository_scope() as repository:
            existing = await repository.get_by_checkout_token(checkout_token)
        return self._to_trip(existing) if existing is not None else None

    async def _create(self, draft: TripDraft, actor_id: str, checkout_token: str) -> CreationResult:
        async with self.repository_scope() as repository:
            existing = await repository.get_by_checkout_token(checkout_token)
            if existing is not None:
                logger.info("Trip %s already exists for token %s, not creating another", existing.id, checkout_token)
                trip, created = existing, False
            else:
                trip, created = await self._insert_trip(repository, draft, actor_id, checkout_token)

            membership, warning = await self._ensure_membership(repository, trip, actor_id)
            return CreationResult(
                trip=self._to_trip(trip),
                membership=membership,
                created=created,
                warning=warning,
            )

    async def _insert_trip(
        self,
        repository: TripRepository,
        draft: TripDraft,
        actor_id: str,
        checkout_token: str,
    ) -> tuple[TripModel, bool]:
        for attempt in range(1, self.max_attempts + 1):
            join_code = self._next_join_code()
            try:
                trip = await repository.create_trip(
                    name=draft.title,
                    group_name=draft.group_label,
                    description=draft.description,
                    join_code=join_code,
                    admin_id=actor_id,
                    departure_time=draft.start_at,
                    return_time=draft.end_at,
                    checkout_token=checkout_token,
                )
            except JoinCodeConflictError:
                logger.warning("Join code %s already taken (attempt %d/%d)", join_code, attempt, self.max_attempts)
                continue
            except CheckoutTokenConflictError:
                existing = await repository.get_by_checkout_token(checkout_token)
                if existing is None:
                    raise TripCreationError(f"Trip for token {checkout_token} vanished after a conflict")
                logger.info("Concurrent creation for token %s won, reusing trip %s", checkout_token, existing.id)
                return existing, False
            logger.info("Created trip %s with join code %s for actor %s", trip.id, trip.join_code, actor_id)
            return trip, True
        raise JoinCodeExhaustedError(f"Could not allocate a unique join code after {self.max_attempts} attempts")

    async def _ensure_membership(
        self,
        repository: TripRepository,
        trip: TripModel,
        actor_id: str,
    ) -> tuple[TripMembership | None, str | None]:
        member = await repository.get_member(trip.id, actor_id)
        if member is None:
            try:
                member = await repository.add_member(trip.id, actor_id, OWNER_ROLE)
            except MembershipCreationError as exc:
                # billing already happened; the member can be re-added later
                logger.warning("Trip %s created but owner membership failed: %s", trip.id, exc)
                return None, MEMBERSHIP_WARNING
        return self._to_membership(member), None

    def _next_join_code(self) -> str:
        if self.code_generator is not None:
            return self.code_generator()
        return generate_join_code(self.join_code_length, self.join_code_alphabet)

    @staticmethod
    def _to_trip(model: TripModel) -> Trip:
        return Trip(
            id=model.id,
            name=model.name,
            join_code=model.join_code,
            admin_id=model.admin_id,
            departure_time=_aware(model.departure_time),
            status=model.status,
            group_name=model.group_name,
            description=model.description,
            return_time=_aware(model.return_time),
            checkout_token=model.checkout_token,
            created_at=_aware(model.created_at),
        )

    @staticmethod
    def _to_membership(model: TripMemberModel) -> TripMembership:
        return TripMembership(
            id=model.id,
            trip_id=model.trip_id,
            user_id=model.user_id,
            role=model.role,
            joined_at=_aware(model.joined_at),
        )


def _aware(value):
    # SQLite hands back naive datetimes even for timezone-aware columns
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _log_late_outcome(checkout_token: str, task: "asyncio.Future[CreationResult]") -> None:
    if task.cancelled():
        logger.warning("Timed-out trip creation for token %s was cancelled", checkout_token)
        return
    exc = task.exception()
    if exc is not None:
        logger.error("Timed-out trip creation for token %s failed: %s", checkout_token, exc)
    else:
        logger.warning("Timed-out trip creation for token %s completed late: trip %s", checkout_token, task.result().trip.id)
