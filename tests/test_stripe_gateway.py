from datetime import datetime, timezone
from urllib.parse import parse_qs, urlsplit

import pytest
import stripe

from grouptrips.core.config import PaymentSettings
from grouptrips.infrastructure.payments import StripePaymentGateway
from grouptrips.modules.drafts import TripDraft
from grouptrips.modules.payments import (
    CorrelationToken,
    PaymentGatewayError,
    PaymentUnavailableError,
    TokenShape,
)

RETURN_URL = "http://localhost:5173/dashboard"


@pytest.fixture
def draft() -> TripDraft:
    return TripDraft.create(
        title="Weekend in Lisbon",
        start_at=datetime(2025, 6, 1, 9, tzinfo=timezone.utc),
        description="x" * 600,
    )


@pytest.fixture
def gateway() -> StripePaymentGateway:
    return StripePaymentGateway(
        PaymentSettings(stripe_secret_key="sk_test_123", payment_link="https://buy.stripe.com/test_abc"),
        RETURN_URL,
    )


def test_capabilities_follow_configuration():
    bare = StripePaymentGateway(PaymentSettings(), RETURN_URL)

    assert not bare.supports_sessions
    assert not bare.supports_actor_links


async def test_create_session_embeds_draft_metadata(gateway, draft, monkeypatch):
    captured = {}

    def fake_create(**params):
        captured.update(params)
        return {"id": "cs_test_1", "url": "https://checkout.stripe.com/c/cs_test_1"}

    monkeypatch.setattr(stripe.checkout.Session, "create", fake_create)

    session = await gateway.create_session(draft, "user-1", email="ana@example.com")

    assert session.id == "cs_test_1"
    assert captured["api_key"] == "sk_test_123"
    assert captured["client_reference_id"] == "user-1"
    assert captured["customer_email"] == "ana@example.com"
    assert captured["success_url"] == f"{RETURN_URL}?payment=success&session_id={{CHECKOUT_SESSION_ID}}"
    assert captured["cancel_url"] == f"{RETURN_URL}?payment=cancelled"
    assert captured["line_items"][0]["price_data"]["unit_amount"] == 2499
    metadata = captured["metadata"]
    assert metadata["tripName"] == "Weekend in Lisbon"
    assert metadata["userId"] == "user-1"
    assert metadata["departureTime"] == "2025-06-01T09:00:00+00:00"
    assert len(metadata["description"]) == 500
    assert metadata["truncated"] == "true"


async def test_create_session_wraps_stripe_errors(gateway, draft, monkeypatch):
    def fake_create(**params):
        raise stripe.StripeError("card network down")

    monkeypatch.setattr(stripe.checkout.Session, "create", fake_create)

    with pytest.raises(PaymentGatewayError):
        await gateway.create_session(draft, "user-1")


def test_redirect_to_payment_link_carries_actor(gateway):
    url = gateway.redirect_to(CorrelationToken(TokenShape.ACTOR, "user-1"), "ana@example.com")

    query = parse_qs(urlsplit(url).query)
    assert url.startswith("https://buy.stripe.com/test_abc?")
    assert query["client_reference_id"] == ["user-1"]
    assert query["prefilled_email"] == ["ana@example.com"]


def test_redirect_without_payment_link_is_unavailable():
    gateway = StripePaymentGateway(PaymentSettings(stripe_secret_key="sk_test_123"), RETURN_URL)

    with pytest.raises(PaymentUnavailableError):
        gateway.redirect_to(CorrelationToken(TokenShape.ACTOR, "user-1"))


async def test_verify_by_session_rebuilds_draft(gateway, monkeypatch):
    def fake_retrieve(session_id, api_key=None):
        assert session_id == "cs_test_1"
        return {
            "payment_status": "paid",
            "client_reference_id": "user-1",
            "metadata": {
                "tripName": "Weekend in Lisbon",
                "userId": "user-1",
                "groupName": "",
                "description": "",
                "departureTime": "2025-06-01T09:00:00+00:00",
                "returnTime": "",
            },
        }

    monkeypatch.setattr(stripe.checkout.Session, "retrieve", fake_retrieve)

    verification = await gateway.verify_by_session("cs_test_1")

    assert verification.paid
    assert verification.actor_id == "user-1"
    assert verification.draft.title == "Weekend in Lisbon"
    assert verification.draft.end_at is None
    assert not verification.draft_truncated


async def test_verify_by_session_unpaid_has_no_draft(gateway, monkeypatch):
    monkeypatch.setattr(
        stripe.checkout.Session,
        "retrieve",
        lambda session_id, api_key=None: {"payment_status": "unpaid", "metadata": {"tripName": "Lisbon"}},
    )

    verification = await gateway.verify_by_session("cs_test_1")

    assert not verification.paid
    assert verification.draft is None


async def test_verify_by_actor_matches_paid_sessions(gateway, monkeypatch):
    sessions = {
        "data": [
            {"id": "cs_3", "client_reference_id": "user-2", "payment_status": "paid"},
            {"id": "cs_2", "client_reference_id": "user-1", "payment_status": "unpaid"},
            {"id": "cs_1", "client_reference_id": "user-2", "payment_status": "paid"},
        ]
    }
    monkeypatch.setattr(stripe.checkout.Session, "list", lambda **params: sessions)

    assert not (await gateway.verify_by_actor("user-1")).paid
    assert (await gateway.verify_by_actor("user-2")).session_ids == ("cs_3", "cs_1")


async def test_create_session_leaves_short_metadata_unmarked(gateway, monkeypatch):
    captured = {}

    def fake_create(**params):
        captured.update(params)
        return {"id": "cs_test_1", "url": "https://checkout.stripe.com/c/cs_test_1"}

    monkeypatch.setattr(stripe.checkout.Session, "create", fake_create)
    short = TripDraft.create(title="Porto", start_at=datetime(2025, 7, 1, 9, tzinfo=timezone.utc))

    await gateway.create_session(short, "user-1")

    assert "truncated" not in captured["metadata"]


async def test_verify_by_session_reports_truncated_metadata(gateway, monkeypatch):
    monkeypatch.setattr(
        stripe.checkout.Session,
        "retrieve",
        lambda session_id, api_key=None: {
            "payment_status": "paid",
            "client_reference_id": "user-1",
            "metadata": {
                "tripName": "Weekend in Lisbon",
                "userId": "user-1",
                "description": "x" * 500,
                "departureTime": "2025-06-01T09:00:00+00:00",
                "truncated": "true",
            },
        },
    )

    verification = await gateway.verify_by_session("cs_test_1")

    assert verification.paid
    assert verification.draft_truncated
    assert len(verification.draft.description) == 500
