"""Checkout return flow: redirect out for payment, then create the trip exactly once."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from grouptrips.modules.drafts import DraftValidationError, TripDraft
from grouptrips.modules.payments import (
    Correlator,
    PaymentGateway,
    PaymentGatewayError,
    ReturnClassification,
    ReturnKind,
    ReturnSignals,
    TokenShape,
)
from grouptrips.modules.persistence import IntentPersistence, PersistedIntent
from grouptrips.modules.trips import CreationTimeoutError, TripCreator, TripError

from .guard import ProcessGuard
from .models import (
    BUSY_STATES,
    INTENT_LOST_MESSAGE,
    PAYMENT_ALREADY_USED_MESSAGE,
    PAYMENT_CANCELLED_MESSAGE,
    PAYMENT_NOT_VERIFIED_MESSAGE,
    TRIP_CREATED_MESSAGE,
    UNEXPECTED_ERROR_MESSAGE,
    VERIFICATION_UNAVAILABLE_MESSAGE,
    CheckoutRedirect,
    FlowOutcome,
    FlowState,
)

logger = logging.getLogger(__name__)


class CheckoutFlow:
    """State machine behind the trip creation modal.

    One instance corresponds to one mount of the page. ``begin_checkout``
    stages the draft and hands back the payment redirect; ``on_mount``
    classifies the return signals of a later load and drives verification
    and creation. Every failure inside ``on_mount`` ends in an actionable
    outcome instead of an exception.
    """

    def __init__(
        self,
        *,
        correlator: Correlator,
        gateway: PaymentGateway,
        persistence: IntentPersistence,
        creator: TripCreator,
        guard: ProcessGuard | None = None,
    ) -> None:
        self._correlator = correlator
        self._gateway = gateway
        self._persistence = persistence
        self._creator = creator
        self._guard = guard or ProcessGuard()
        self._state = FlowState.IDLE
        self._outcome = FlowOutcome(FlowState.IDLE)

    @property
    def state(self) -> FlowState:
        return self._state

    @property
    def outcome(self) -> FlowOutcome:
        return self._outcome

    def _transition(self, state: FlowState) -> None:
        if state is not self._state:
            logger.debug("Checkout flow %s -> %s", self._state.value, state.value)
        self._state = state

    def _settle(self, outcome: FlowOutcome) -> FlowOutcome:
        self._transition(outcome.state)
        self._outcome = outcome
        return outcome

    async def begin_checkout(
        self,
        draft: TripDraft,
        actor_id: str,
        *,
        email: str | None = None,
        now: datetime | None = None,
    ) -> CheckoutRedirect:
        """Stage the draft in every tier, mint the token and return the payment URL.

        Raises ``DraftValidationError`` for an unusable draft and
        ``PaymentUnavailableError`` when no redirect can be produced.
        """
        draft.validate_for_submission(now)
        intent = PersistedIntent(draft=draft, actor_id=actor_id)
        await self._persistence.save(intent)

        token = await self._correlator.mint(draft, actor_id, email=email)
        url = self._gateway.redirect_to(token, email)
        await self._persistence.mark_awaiting_payment(actor_id)

        self._transition(FlowState.AWAITING_PAYMENT)
        logger.info("Actor %s redirected to payment with %s token", actor_id, token.shape.value)
        return CheckoutRedirect(url=url, token=token, intent_id=intent.intent_id)

    async def on_mount(self, signals: ReturnSignals, actor_id: str | None) -> FlowOutcome:
        classification = self._correlator.classify(signals)

        if classification.kind is ReturnKind.NONE:
            if self._guard.held:
                return self._outcome
            return self._settle(FlowOutcome(FlowState.IDLE))

        if actor_id is None:
            # the identity can arrive later; do not latch yet
            logger.debug("Return signals (%s) seen before the actor is known", classification.kind.value)
            return FlowOutcome(self._state, pending=True, classification=classification.kind)

        if not self._guard.acquire():
            logger.debug("Return signals already handled by this flow instance")
            if self._state in BUSY_STATES:
                return FlowOutcome(self._state, pending=True, classification=classification.kind)
            return self._outcome

        try:
            if classification.kind is ReturnKind.CANCELLED:
                outcome = await self._handle_cancelled(actor_id)
            else:
                outcome = await self._handle_success(classification, actor_id)
        except Exception:
            logger.exception("Unexpected failure while processing payment return for actor %s", actor_id)
            outcome = self._error(UNEXPECTED_ERROR_MESSAGE)

        outcome.clear_signals = True
        outcome.classification = classification.kind
        return self._settle(outcome)

    async def collect_signals(self, params: Mapping[str, str], actor_id: str | None) -> ReturnSignals:
        """Build return signals from query params plus the stored awaiting-payment marker."""
        signals = ReturnSignals.from_query(params)
        if actor_id is None or signals.has_return_params:
            return signals
        awaiting = await self._persistence.is_awaiting_payment(actor_id)
        return ReturnSignals.from_query(params, awaiting_payment=awaiting)

    def dismiss(self) -> FlowOutcome:
        """Close the modal. Storage is left alone so a stale tab can still recover."""
        if self._state is FlowState.SUCCESS or self._state in BUSY_STATES:
            return self._outcome
        return self._settle(FlowOutcome(FlowState.IDLE))

    async def _handle_cancelled(self, actor_id: str) -> FlowOutcome:
        await self._persistence.clear_awaiting_payment(actor_id)
        await self._persistence.purge(actor_id)
        logger.info("Payment cancelled by actor %s, staged intent discarded", actor_id)
        return FlowOutcome(FlowState.IDLE, message=PAYMENT_CANCELLED_MESSAGE)

    async def _handle_success(self, classification: ReturnClassification, actor_id: str) -> FlowOutcome:
        self._transition(FlowState.RETURN_VERIFICATION)

        if classification.shape is not TokenShape.SESSION or not classification.token:
            return await self._verify_by_actor(actor_id)

        session_token = classification.token
        try:
            verification = await self._gateway.verify_by_session(session_token)
        except PaymentGatewayError as exc:
            logger.warning("Session verification for %s failed (%s), trying actor verification", session_token, exc)
            return await self._verify_by_actor(actor_id, session_token=session_token)

        if verification.actor_id and verification.actor_id != actor_id:
            logger.warning("Session %s belongs to another actor, refusing to use it for %s", session_token, actor_id)
            return self._error(PAYMENT_NOT_VERIFIED_MESSAGE)
        if not verification.paid:
            logger.info("Session %s is not paid", session_token)
            await self._persistence.clear_awaiting_payment(actor_id)
            return self._error(PAYMENT_NOT_VERIFIED_MESSAGE)
        if verification.draft is not None and not verification.draft_truncated:
            # gateway-held metadata wins over any locally cached draft
            return await self._create(verification.draft, actor_id, session_token)
        if verification.draft_truncated:
            logger.info("Session %s carries truncated metadata, preferring the staged draft", session_token)
        return await self._create_from_tiers(actor_id, session_token, fallback=verification.draft)

    async def _verify_by_actor(self, actor_id: str, *, session_token: str | None = None) -> FlowOutcome:
        """Verify through the actor's paid checkouts and bind the trip to one of them.

        With ``session_token`` only that checkout counts. Without it the first
        paid checkout that has not created a trip yet is used, so a single
        payment never pays for two trips.
        """
        try:
            verification = await self._gateway.verify_by_actor(actor_id)
        except PaymentGatewayError as exc:
            logger.warning("Actor verification for %s failed: %s", actor_id, exc)
            return self._error(VERIFICATION_UNAVAILABLE_MESSAGE)

        session_ids = verification.session_ids
        if session_token is not None:
            session_ids = tuple(session_id for session_id in session_ids if session_id == session_token)
        if not session_ids:
            logger.info("No paid checkout found for actor %s", actor_id)
            await self._persistence.clear_awaiting_payment(actor_id)
            return self._error(PAYMENT_NOT_VERIFIED_MESSAGE)

        intent, failure = await self._load_intent(actor_id)
        if failure is not None:
            return failure
        checkout_token = await self._claim_payment(session_ids, intent.draft)
        if checkout_token is None:
            logger.warning("Every paid checkout of actor %s already created a trip", actor_id)
            await self._persistence.clear_awaiting_payment(actor_id)
            return self._error(PAYMENT_ALREADY_USED_MESSAGE, prefill=intent.draft.to_mapping())
        return await self._create(intent.draft, actor_id, checkout_token)

    async def _claim_payment(self, session_ids: tuple[str, ...], draft: TripDraft) -> str | None:
        # a checkout whose trip matches the draft is a replay, e.g. after a timed-out creation landed
        replay = None
        for session_id in session_ids:
            trip = await self._creator.find_by_checkout_token(session_id)
            if trip is None:
                return session_id
            if replay is None and trip.name == draft.title and trip.departure_time == draft.start_at:
                replay = session_id
        return replay

    async def _load_intent(self, actor_id: str) -> tuple[PersistedIntent | None, FlowOutcome | None]:
        try:
            intent = await self._persistence.load_best_available(actor_id)
        except DraftValidationError as exc:
            return None, self._error(str(exc), prefill=exc.salvaged)
        if intent is None:
            logger.warning("Payment verified for actor %s but no staged intent survived", actor_id)
            await self._persistence.clear_awaiting_payment(actor_id)
            return None, self._error(INTENT_LOST_MESSAGE)
        return intent, None

    async def _create_from_tiers(
        self,
        actor_id: str,
        checkout_token: str,
        *,
        fallback: TripDraft | None = None,
    ) -> FlowOutcome:
        if fallback is not None:
            try:
                intent = await self._persistence.load_best_available(actor_id)
            except DraftValidationError:
                intent = None
            draft = intent.draft if intent is not None else fallback
            return await self._create(draft, actor_id, checkout_token)

        intent, failure = await self._load_intent(actor_id)
        if failure is not None:
            return failure
        return await self._create(intent.draft, actor_id, checkout_token)

    async def _create(self, draft: TripDraft, actor_id: str, checkout_token: str) -> FlowOutcome:
        self._transition(FlowState.CREATING)
        try:
            result = await self._creator.create(draft, actor_id, checkout_token)
        except DraftValidationError as exc:
            return self._error(str(exc), prefill=exc.salvaged or draft.to_mapping())
        except CreationTimeoutError as exc:
            return self._error(str(exc), prefill=draft.to_mapping())
        except TripError as exc:
            logger.error("Trip creation for token %s failed: %s", checkout_token, exc)
            return self._error(f"Failed to create trip: {exc}", prefill=draft.to_mapping())

        await self._persistence.purge(actor_id)
        await self._persistence.clear_awaiting_payment(actor_id)
        return FlowOutcome(
            FlowState.SUCCESS,
            message=TRIP_CREATED_MESSAGE,
            warning=result.warning,
            trip=result.trip,
        )

    @staticmethod
    def _error(message: str, *, prefill: dict[str, Any] | None = None) -> FlowOutcome:
        return FlowOutcome(FlowState.ERROR_RECOVERABLE, message=message, prefill=prefill or None)
