"""Stripe implementation of the payment gateway boundary."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Any
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import stripe

from grouptrips.core.config import PaymentSettings
from grouptrips.modules.drafts import DraftValidationError, TripDraft
from grouptrips.modules.payments import (
    ActorVerification,
    CorrelationToken,
    GatewaySession,
    PaymentGatewayError,
    PaymentUnavailableError,
    SessionVerification,
    TokenShape,
)
from grouptrips.modules.payments.models import SESSION_PARAM, SESSION_PLACEHOLDER, STATUS_PARAM

logger = logging.getLogger(__name__)

# Stripe rejects metadata values longer than this.
METADATA_VALUE_LIMIT = 500
TRUNCATED_KEY = "truncated"


class StripePaymentGateway:
    def __init__(self, settings: PaymentSettings, return_url: str) -> None:
        self._settings = settings
        self._return_url = return_url

    @property
    def supports_sessions(self) -> bool:
        return bool(self._settings.stripe_secret_key)

    @property
    def supports_actor_links(self) -> bool:
        return bool(self._settings.payment_link)

    @property
    def success_url(self) -> str:
        return f"{self._return_url}?{STATUS_PARAM}=success&{SESSION_PARAM}={SESSION_PLACEHOLDER}"

    @property
    def cancel_url(self) -> str:
        return f"{self._return_url}?{STATUS_PARAM}=cancelled"

    def _require_api_key(self) -> str:
        if not self._settings.stripe_secret_key:
            raise PaymentGatewayError("Stripe secret key is not configured")
        return self._settings.stripe_secret_key

    @staticmethod
    def _metadata(draft: TripDraft, actor_id: str) -> dict[str, str]:
        metadata = {
            "tripName": draft.title,
            "userId": actor_id,
            "groupName": draft.group_label or "",
            "description": draft.description or "",
            "departureTime": draft.start_at.isoformat(),
            "returnTime": draft.end_at.isoformat() if draft.end_at else "",
        }
        clipped = {key: value[:METADATA_VALUE_LIMIT] for key, value in metadata.items()}
        if clipped != metadata:
            clipped[TRUNCATED_KEY] = "true"
        return clipped

    async def create_session(self, draft: TripDraft, actor_id: str, *, email: str | None = None) -> GatewaySession:
        params: dict[str, Any] = {
            "api_key": self._require_api_key(),
            "mode": "payment",
            "payment_method_types": ["card", "ideal"],
            "line_items": [
                {
                    "price_data": {
                        "currency": self._settings.currency,
                        "product_data": {
                            "name": f"{self._settings.product_name} - {draft.title}",
                            "description": self._settings.product_description,
                        },
                        "unit_amount": self._settings.unit_amount,
                    },
                    "quantity": 1,
                }
            ],
            "success_url": self.success_url,
            "cancel_url": self.cancel_url,
            "client_reference_id": actor_id,
            "metadata": self._metadata(draft, actor_id),
        }
        if email:
            params["customer_email"] = email

        try:
            session = await asyncio.to_thread(stripe.checkout.Session.create, **params)
        except stripe.StripeError as exc:
            logger.error("Stripe checkout session creation failed: %s", exc)
            raise PaymentGatewayError("Failed to create checkout session") from exc
        return GatewaySession(id=session["id"], url=session["url"])

    def redirect_to(self, token: CorrelationToken, actor_hint: str | None = None) -> str:
        if token.shape is TokenShape.SESSION:
            if not token.redirect_url:
                raise PaymentUnavailableError("Checkout session has no redirect URL")
            return token.redirect_url

        if not self._settings.payment_link:
            raise PaymentUnavailableError("Payment link is not configured")
        parts = urlsplit(self._settings.payment_link)
        query = dict(parse_qsl(parts.query))
        query["client_reference_id"] = token.value
        if actor_hint:
            query["prefilled_email"] = actor_hint
        return urlunsplit(parts._replace(query=urlencode(query)))

    async def verify_by_session(self, token: str) -> SessionVerification:
        api_key = self._require_api_key()
        try:
            session = await asyncio.to_thread(stripe.checkout.Session.retrieve, token, api_key=api_key)
        except stripe.StripeError as exc:
            logger.error("Stripe session %s lookup failed: %s", token, exc)
            raise PaymentGatewayError("Failed to verify payment") from exc

        paid = session.get("payment_status") == "paid"
        metadata = dict(session.get("metadata") or {})
        actor_id = metadata.get("userId") or session.get("client_reference_id")
        draft = None
        if paid and metadata:
            try:
                draft = TripDraft.from_mapping(metadata)
            except DraftValidationError as exc:
                logger.warning("Session %s carries unusable trip metadata: %s", token, exc)
        return SessionVerification(
            paid=paid,
            draft=draft,
            actor_id=actor_id,
            draft_truncated=metadata.get(TRUNCATED_KEY) == "true",
        )

    async def verify_by_actor(self, actor_id: str) -> ActorVerification:
        api_key = self._require_api_key()
        since = datetime.now(timezone.utc) - timedelta(hours=self._settings.actor_lookup_window_hours)
        try:
            sessions = await asyncio.to_thread(
                stripe.checkout.Session.list,
                limit=self._settings.actor_lookup_limit,
                created={"gte": int(since.timestamp())},
                api_key=api_key,
            )
        except stripe.StripeError as exc:
            logger.error("Stripe session listing for actor %s failed: %s", actor_id, exc)
            raise PaymentGatewayError("Failed to verify payment") from exc

        # Stripe lists sessions newest first
        session_ids = tuple(
            session["id"]
            for session in sessions.get("data") or []
            if session.get("client_reference_id") == actor_id and session.get("payment_status") == "paid"
        )
        return ActorVerification(session_ids=session_ids)
