import json

import pytest
from fastapi.testclient import TestClient

from parafort_core.api.dependencies import checkout_store_dependency
from parafort_core.api.payments_router import payment_service_dependency
from parafort_core.checkout.session_store import InMemoryCheckoutSessionStore
from parafort_core.db.session import get_async_db_session
from parafort_core.main import app
from parafort_core.payments.stripe_service import StripeConfig
from parafort_core.preferences.cookie_preferences import STORAGE_KEY
from parafort_core.services.payment_service import PaymentService


async def _no_db():
    yield None


@pytest.fixture
def client():
    store = InMemoryCheckoutSessionStore(ttl_seconds=60)
    app.dependency_overrides[get_async_db_session] = _no_db
    app.dependency_overrides[checkout_store_dependency] = lambda: store
    app.dependency_overrides[payment_service_dependency] = lambda: PaymentService(
        store=store, cfg=StripeConfig(secret_key="sk_test_x", publishable_key="pk_test_x")
    )
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_correlation_id_is_echoed(client):
    response = client.get("/health", headers={"X-Correlation-ID": "corr-123"})
    assert response.headers["x-correlation-id"] == "corr-123"


def test_correlation_id_is_generated(client):
    response = client.get("/health")
    assert response.headers["x-correlation-id"]


def test_missing_checkout_session_renders_error_envelope(client):
    response = client.get("/api/checkout/sessions/does-not-exist", headers={"X-Correlation-ID": "corr-404"})

    assert response.status_code == 404
    error = response.json()["error"]
    assert error["code"] == "CHECKOUT_SESSION_NOT_FOUND"
    assert error["trace_id"] == "corr-404"


def test_verification_code_must_be_six_characters(client):
    response = client.post("/api/checkout/sessions/any/verify-email", json={"code": "12345"})
    assert response.status_code == 422


def test_create_account_rejects_short_password(client):
    response = client.post(
        "/api/checkout/sessions/any/account",
        json={"first_name": "Ada", "last_name": "Lovelace", "password": "short", "confirm_password": "short"},
    )
    assert response.status_code == 422


def test_create_account_rejects_blank_name(client):
    response = client.post(
        "/api/checkout/sessions/any/account",
        json={"first_name": "   ", "last_name": "Lovelace", "password": "s3cret-pass", "confirm_password": "s3cret-pass"},
    )
    assert response.status_code == 422


def test_admin_routes_require_a_token(client):
    assert client.get("/api/admin/formation-orders").status_code == 401
    assert client.get("/api/admin/announcements").status_code == 401


def test_stripe_config_is_public(client):
    response = client.get("/api/stripe/config")

    assert response.status_code == 200
    assert response.json() == {"publishable_key": "pk_test_x", "environment": "test"}


def test_complete_order_requires_a_payment_reference(client):
    response = client.post("/api/complete-formation-order", json={})
    assert response.status_code == 422


def test_complete_order_with_malformed_secret_is_expired(client):
    response = client.post("/api/complete-formation-order", json={"clientSecret": "garbage"})

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "PAYMENT_SESSION_EXPIRED"


def test_cookie_preferences_default_to_essential_only(client):
    response = client.get("/api/cookie-preferences")

    assert response.status_code == 200
    assert response.json() == {"essential": True, "analytics": False, "marketing": False, "preferences": False}


def test_reject_optional_sets_cookie(client):
    response = client.post("/api/cookie-preferences/reject-optional")

    assert response.status_code == 200
    assert response.json()["analytics"] is False
    set_cookie = response.headers["set-cookie"]
    assert set_cookie.startswith(f"{STORAGE_KEY}=")
    assert "Max-Age=31536000" in set_cookie
    assert "SameSite=lax" in set_cookie


def test_put_preferences_forces_essential(client):
    response = client.put("/api/cookie-preferences", json={"analytics": True, "marketing": False, "preferences": True})

    assert response.status_code == 200
    assert response.json() == {"essential": True, "analytics": True, "marketing": False, "preferences": True}
    assert STORAGE_KEY in response.headers["set-cookie"]


def test_preferences_are_read_back_from_cookie(client):
    client.cookies.set(STORAGE_KEY, json.dumps({"analytics": True, "preferences": True}, separators=(",", ":")))

    response = client.get("/api/cookie-preferences")

    assert response.json()["analytics"] is True
    assert response.json()["preferences"] is True
    assert response.json()["essential"] is True
