"""Correlation tokens linking a payment attempt back to the actor and draft."""

from __future__ import annotations

import logging

from grouptrips.modules.drafts import TripDraft

from .exceptions import PaymentGatewayError, PaymentUnavailableError
from .gateway import PaymentGateway
from .models import (
    SESSION_PLACEHOLDER,
    CorrelationToken,
    ReturnClassification,
    ReturnSignals,
    TokenShape,
)

logger = logging.getLogger(__name__)

PAYMENT_UNAVAILABLE_MESSAGE = "Payment system unavailable. Please try again later."

_SUCCESS_STATUSES = {"success", "succeeded", "paid"}
_CANCELLED_STATUSES = {"cancelled", "canceled"}


class Correlator:
    def __init__(self, gateway: PaymentGateway) -> None:
        self._gateway = gateway

    async def mint(self, draft: TripDraft, actor_id: str, *, email: str | None = None) -> CorrelationToken:
        """Prefer a gateway session holding the draft; fall back to an actor-bound token."""
        if self._gateway.supports_sessions:
            try:
                session = await self._gateway.create_session(draft, actor_id, email=email)
            except PaymentGatewayError as exc:
                if not self._gateway.supports_actor_links:
                    raise PaymentUnavailableError(PAYMENT_UNAVAILABLE_MESSAGE) from exc
                logger.warning("Checkout session creation failed for actor %s, using payment link: %s", actor_id, exc)
            else:
                logger.info("Minted session token %s for actor %s", session.id, actor_id)
                return CorrelationToken(TokenShape.SESSION, session.id, redirect_url=session.url)

        if not self._gateway.supports_actor_links:
            raise PaymentUnavailableError(PAYMENT_UNAVAILABLE_MESSAGE)
        logger.info("Minted actor-bound token for actor %s", actor_id)
        return CorrelationToken(TokenShape.ACTOR, actor_id)

    @staticmethod
    def classify(signals: ReturnSignals) -> ReturnClassification:
        status = signals.status
        if status in _CANCELLED_STATUSES:
            return ReturnClassification.cancelled()
        if status in _SUCCESS_STATUSES:
            session_id = signals.session_id
            if session_id and session_id != SESSION_PLACEHOLDER:
                return ReturnClassification.success(TokenShape.SESSION, session_id)
            return ReturnClassification.success(TokenShape.ACTOR)
        if status is None and signals.awaiting_payment:
            return ReturnClassification.success(TokenShape.ACTOR)
        return ReturnClassification.none()
