import httpx
import pytest
import pytest_asyncio

from grouptrips.core.security import create_access_token
from grouptrips.interfaces.http.deps import get_checkout_flow, get_db_session
from grouptrips.main import create_app


@pytest_asyncio.fixture
async def client(make_flow, session_factory):
    app = create_app()

    async def override_db_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_checkout_flow] = lambda: make_flow()
    app.dependency_overrides[get_db_session] = override_db_session

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token('user-1', 'ana@example.com')}"}


DRAFT = {"title": "Weekend in Lisbon", "start_at": "2099-06-01T09:00:00Z", "group_label": "Uni friends"}


async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


async def test_start_checkout_returns_redirect(client, auth_headers, gateway):
    response = await client.post("/api/checkout", json=DRAFT, headers=auth_headers)

    assert response.status_code == 201
    body = response.json()
    assert body["redirect_url"] == "https://pay.example/sess_1"
    assert body["token_shape"] == "session"
    assert body["intent_id"]
    assert gateway.calls_to("create_session") == ["user-1"]


async def test_start_checkout_requires_identity(client):
    response = await client.post("/api/checkout", json=DRAFT)

    assert response.status_code in {401, 403}


async def test_start_checkout_rejects_past_departure(client, auth_headers):
    response = await client.post(
        "/api/checkout",
        json={"title": "Lisbon", "start_at": "2001-06-01T09:00:00Z"},
        headers=auth_headers,
    )

    assert response.status_code == 422
    assert response.json()["detail"] == {"message": "Departure date cannot be in the past", "field": "start_at"}


async def test_start_checkout_without_payment_options_is_unavailable(client, auth_headers, gateway):
    gateway.supports_sessions = False
    gateway.supports_actor_links = False

    response = await client.post("/api/checkout", json=DRAFT, headers=auth_headers)

    assert response.status_code == 503
    assert response.json()["detail"] == "Payment system unavailable. Please try again later."


async def test_paid_return_creates_trip_once(client, auth_headers, gateway):
    await client.post("/api/checkout", json=DRAFT, headers=auth_headers)
    gateway.pay("sess_1")
    params = {"payment": "success", "session_id": "sess_1"}

    first = await client.get("/api/checkout/return", params=params, headers=auth_headers)
    second = await client.get("/api/checkout/return", params=params, headers=auth_headers)

    assert first.status_code == 200
    body = first.json()
    assert body["state"] == "success"
    assert body["classification"] == "success"
    assert body["location"] == "/api/checkout/return"
    assert body["trip"]["name"] == "Weekend in Lisbon"
    assert body["trip"]["group_name"] == "Uni friends"
    assert second.json()["trip"]["id"] == body["trip"]["id"]

    lookup = await client.get(f"/api/trips/by-code/{body['trip']['join_code'].lower()}", headers=auth_headers)
    assert lookup.status_code == 200
    assert lookup.json()["id"] == body["trip"]["id"]


async def test_return_without_identity_is_pending(client, gateway):
    response = await client.get("/api/checkout/return", params={"payment": "success", "session_id": "sess_1"})

    body = response.json()
    assert response.status_code == 200
    assert body["pending"] is True
    assert body["location"] is None
    assert gateway.calls_to("verify_by_session") == []


async def test_cancelled_return(client, auth_headers):
    await client.post("/api/checkout", json=DRAFT, headers=auth_headers)

    response = await client.get("/api/checkout/return", params={"payment": "cancelled"}, headers=auth_headers)

    body = response.json()
    assert body["state"] == "idle"
    assert body["classification"] == "cancelled"
    assert body["message"] == "Payment was cancelled. Your trip has not been created."


async def test_unknown_join_code(client, auth_headers):
    response = await client.get("/api/trips/by-code/ZZZZZZ", headers=auth_headers)

    assert response.status_code == 404
