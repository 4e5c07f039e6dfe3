from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from minutemate.main import app
from minutemate.models import CalendlyIntegration, ExpertAvailability
from minutemate.security_utils import create_oauth_state, decrypt_token, encrypt_token, verify_oauth_state
from minutemate.services.calendly_service import CalendlyService, get_calendly_client

CALENDLY_USER = {
    "uri": "https://api.calendly.com/users/ADA",
    "slug": "ada-lovelace",
    "email": "ada@calendly.example",
    "name": "Ada Lovelace",
    "scheduling_url": "https://calendly.com/ada-lovelace",
    "timezone": "Europe/London",
}

EVENT_TYPES = {
    "collection": [
        {"name": "Intro", "active": False, "scheduling_url": "https://calendly.com/ada-lovelace/intro"},
        {"name": "30 min", "active": True, "scheduling_url": "https://calendly.com/ada-lovelace/30min"},
    ]
}


class CalendlyStub:
    """Routes MockTransport requests to per-test responses"""

    def __init__(self):
        self.token_response = httpx.Response(
            200, json={"access_token": "new-access", "refresh_token": "new-refresh", "expires_in": 7200}
        )
        self.user_response = httpx.Response(200, json={"resource": CALENDLY_USER})
        self.event_types_by_token = {}
        self.requests = []

    def __call__(self, request):
        self.requests.append(request)
        if request.url.path == "/oauth/token":
            return self.token_response
        if request.url.path == "/users/me":
            return self.user_response
        if request.url.path == "/event_types":
            token = request.headers["authorization"].removeprefix("Bearer ")
            return self.event_types_by_token.get(token, httpx.Response(401))
        return httpx.Response(404)


@pytest.fixture(scope="function")
def calendly_stub(client):
    stub = CalendlyStub()
    service = CalendlyService(
        client_id="client-123",
        client_secret="secret-456",
        redirect_uri="http://testserver/calendly/callback",
        transport=httpx.MockTransport(stub),
    )
    app.dependency_overrides[get_calendly_client] = lambda: service
    return stub


def seed_integration(db_session, user, **overrides):
    fields = {
        "user_id": user.id,
        "calendly_user_uri": CALENDLY_USER["uri"],
        "calendly_username": CALENDLY_USER["slug"],
        "calendly_email": CALENDLY_USER["email"],
        "access_token": encrypt_token("old-access"),
        "refresh_token": encrypt_token("old-refresh"),
        "scheduling_url": CALENDLY_USER["scheduling_url"],
        "integration_status": "active",
    }
    fields.update(overrides)
    integration = CalendlyIntegration(**fields)
    db_session.add(integration)
    db_session.commit()
    return integration


def redirect_query(response):
    location = urlparse(response.headers["location"])
    assert location.path == "/expert/onboarding/calendly"
    return parse_qs(location.query)


# ============================================================================
# OAUTH
# ============================================================================


def test_oauth_url_carries_signed_state(client, calendly_stub, expert_user, auth_headers):
    response = client.get("/calendly/oauth", params={"user_id": expert_user.id}, headers=auth_headers(expert_user))
    assert response.status_code == 200
    data = response.json()
    assert verify_oauth_state(data["state"]) == expert_user.id
    assert parse_qs(urlparse(data["authorization_url"]).query)["state"] == [data["state"]]


def test_callback_stores_encrypted_integration(client, db_session, calendly_stub, expert_user):
    state = create_oauth_state(expert_user.id)
    response = client.get(
        "/calendly/callback", params={"code": "auth-code", "state": state}, follow_redirects=False
    )
    assert response.status_code in (302, 307)
    assert redirect_query(response) == {"calendly_connected": ["true"]}

    integration = db_session.query(CalendlyIntegration).filter_by(user_id=expert_user.id).one()
    assert integration.calendly_username == "ada-lovelace"
    assert integration.timezone == "Europe/London"
    assert integration.integration_status == "active"
    assert integration.access_token != "new-access"
    assert decrypt_token(integration.access_token) == "new-access"
    assert integration.token_expires_at is not None


def test_callback_reconnect_updates_existing_row(client, db_session, calendly_stub, expert_user):
    seed_integration(db_session, expert_user, integration_status="disabled")
    state = create_oauth_state(expert_user.id)
    client.get("/calendly/callback", params={"code": "auth-code", "state": state}, follow_redirects=False)

    rows = db_session.query(CalendlyIntegration).filter_by(user_id=expert_user.id).all()
    assert len(rows) == 1
    db_session.refresh(rows[0])
    assert rows[0].integration_status == "active"


def test_callback_provider_error(client, calendly_stub):
    response = client.get("/calendly/callback", params={"error": "access_denied"}, follow_redirects=False)
    assert redirect_query(response) == {"error": ["oauth_failed"]}


def test_callback_rejects_forged_state(client, calendly_stub, expert_user):
    response = client.get(
        "/calendly/callback", params={"code": "auth-code", "state": expert_user.id}, follow_redirects=False
    )
    assert redirect_query(response) == {"error": ["callback_failed"]}


def test_callback_token_exchange_failure(client, calendly_stub, expert_user):
    calendly_stub.token_response = httpx.Response(400, json={"error": "invalid_grant"})
    state = create_oauth_state(expert_user.id)
    response = client.get(
        "/calendly/callback", params={"code": "bad-code", "state": state}, follow_redirects=False
    )
    assert redirect_query(response) == {"error": ["callback_failed"]}


def test_callback_malformed_user_payload_redirects(client, db_session, calendly_stub, expert_user):
    calendly_stub.user_response = httpx.Response(200, json={"resource": None})
    state = create_oauth_state(expert_user.id)
    response = client.get(
        "/calendly/callback", params={"code": "auth-code", "state": state}, follow_redirects=False
    )
    assert redirect_query(response) == {"error": ["callback_failed"]}
    assert db_session.query(CalendlyIntegration).filter_by(user_id=expert_user.id).count() == 0


# ============================================================================
# INTEGRATION
# ============================================================================


def test_integration_status_not_connected(client, calendly_stub, expert_user, auth_headers):
    response = client.get(
        "/calendly/integration", params={"user_id": expert_user.id}, headers=auth_headers(expert_user)
    )
    assert response.json() == {"connected": False, "integration": None}


def test_integration_status_connected(client, db_session, calendly_stub, expert_user, auth_headers):
    seed_integration(db_session, expert_user)
    response = client.get(
        "/calendly/integration", params={"user_id": expert_user.id}, headers=auth_headers(expert_user)
    )
    data = response.json()
    assert data["connected"] is True
    assert data["integration"]["username"] == "ada-lovelace"
    assert data["integration"]["status"] == "active"


def test_disconnect_disables_integration_and_availability(
    client, db_session, calendly_stub, expert_user, auth_headers
):
    integration = seed_integration(db_session, expert_user)
    db_session.add(ExpertAvailability(user_id=expert_user.id, is_active=True))
    db_session.commit()

    response = client.delete(
        "/calendly/integration", params={"user_id": expert_user.id}, headers=auth_headers(expert_user)
    )
    assert response.status_code == 200
    assert response.json()["message"] == "Integration disconnected successfully"

    db_session.refresh(integration)
    assert integration.integration_status == "disabled"
    availability = db_session.query(ExpertAvailability).filter_by(user_id=expert_user.id).one()
    db_session.refresh(availability)
    assert availability.is_active is False


def test_refresh_token_keeps_old_refresh_token(client, db_session, calendly_stub, expert_user, auth_headers):
    integration = seed_integration(db_session, expert_user)
    calendly_stub.token_response = httpx.Response(200, json={"access_token": "fresh", "expires_in": 3600})

    response = client.post(
        "/calendly/integration/refresh", json={"user_id": expert_user.id}, headers=auth_headers(expert_user)
    )
    assert response.status_code == 200
    assert response.json()["message"] == "Token refreshed successfully"

    db_session.refresh(integration)
    assert decrypt_token(integration.access_token) == "fresh"
    assert decrypt_token(integration.refresh_token) == "old-refresh"
    assert integration.last_sync_at is not None


def test_refresh_token_failure_marks_error(client, db_session, calendly_stub, expert_user, auth_headers):
    integration = seed_integration(db_session, expert_user)
    calendly_stub.token_response = httpx.Response(400, json={"error": "invalid_grant"})

    response = client.post(
        "/calendly/integration/refresh", json={"user_id": expert_user.id}, headers=auth_headers(expert_user)
    )
    assert response.status_code == 502
    assert response.json()["detail"] == "Failed to refresh token - user may need to reconnect"
    db_session.refresh(integration)
    assert integration.integration_status == "error"


def test_refresh_token_without_integration(client, calendly_stub, expert_user, auth_headers):
    response = client.post(
        "/calendly/integration/refresh", json={"user_id": expert_user.id}, headers=auth_headers(expert_user)
    )
    assert response.status_code == 404
    assert response.json()["detail"] == "No active integration found"


# ============================================================================
# AVAILABILITY
# ============================================================================


def test_availability_uses_first_active_event_type(client, db_session, calendly_stub, expert_user, auth_headers):
    seed_integration(db_session, expert_user)
    calendly_stub.event_types_by_token["old-access"] = httpx.Response(200, json=EVENT_TYPES)

    response = client.get(
        "/calendly/availability", params={"user_id": expert_user.id}, headers=auth_headers(expert_user)
    )
    assert response.status_code == 200
    data = response.json()
    assert data["has_active_event_types"] is True
    assert data["scheduling_url"] == "https://calendly.com/ada-lovelace/30min"
    assert data["total_event_types"] == 2
    assert data["active_event_types"] == 1


def test_availability_refreshes_expired_token_once(client, db_session, calendly_stub, expert_user, auth_headers):
    seed_integration(db_session, expert_user)
    calendly_stub.event_types_by_token["new-access"] = httpx.Response(200, json={"collection": []})

    response = client.get(
        "/calendly/availability", params={"user_id": expert_user.id}, headers=auth_headers(expert_user)
    )
    assert response.status_code == 200
    data = response.json()
    assert data["has_active_event_types"] is False
    assert data["scheduling_url"] == CALENDLY_USER["scheduling_url"]

    paths = [r.url.path for r in calendly_stub.requests]
    assert paths == ["/event_types", "/oauth/token", "/event_types"]


def test_availability_without_integration(client, calendly_stub, expert_user, auth_headers):
    response = client.get(
        "/calendly/availability", params={"user_id": expert_user.id}, headers=auth_headers(expert_user)
    )
    assert response.status_code == 404
    data = response.json()
    assert data["has_active_event_types"] is False
    assert data["last_error"] == "No active Calendly integration found"


def test_availability_api_error_returns_fallback_url(client, db_session, calendly_stub, expert_user, auth_headers):
    seed_integration(db_session, expert_user)
    calendly_stub.event_types_by_token["old-access"] = httpx.Response(503)

    response = client.get(
        "/calendly/availability", params={"user_id": expert_user.id}, headers=auth_headers(expert_user)
    )
    assert response.status_code == 500
    data = response.json()
    assert data["scheduling_url"] == CALENDLY_USER["scheduling_url"]
    assert data["last_error"] == "Calendly API error: 503"
