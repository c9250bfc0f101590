from urllib.parse import parse_qs, urlparse

import httpx
import pytest
from cryptography.fernet import Fernet

from rentalcore.routes import google_calendar
from rentalcore.services.calendar_credentials import GoogleCredentialService, TokenCipher

from .conftest import TENANT_ID

HEADERS = {"X-Tenant-ID": TENANT_ID}
KEY = Fernet.generate_key().decode()


@pytest.fixture
def configured(monkeypatch):
    monkeypatch.setattr(google_calendar, "GOOGLE_CLIENT_ID", "client-id")
    monkeypatch.setattr(google_calendar, "GOOGLE_CLIENT_SECRET", "client-secret")


@pytest.fixture
def token_endpoint(client):
    """Route the callback's code exchange to a canned Google token response"""
    from rentalcore.main import app

    def install(status_code=200, payload=None):
        if payload is None:
            payload = {"access_token": "ya29.x", "refresh_token": "1//refresh", "expires_in": 3600}
        transport = httpx.MockTransport(lambda request: httpx.Response(status_code, json=payload))
        app.dependency_overrides[google_calendar.get_credential_service] = lambda: GoogleCredentialService(
            cipher=TokenCipher(KEY),
            http_client=httpx.AsyncClient(transport=transport),
            client_id="client-id",
            client_secret="client-secret",
        )

    return install


def redirect_query(response):
    assert response.status_code == 302
    return parse_qs(urlparse(response.headers["location"]).query)


def test_connect_requires_configuration(client, make_crew, monkeypatch):
    monkeypatch.setattr(google_calendar, "GOOGLE_CLIENT_ID", None)
    crew = make_crew()

    response = client.get("/google-calendar/connect", params={"crew_member_id": crew.id}, headers=HEADERS)

    assert response.status_code == 500


def test_connect_returns_authorization_url(client, configured, make_crew):
    crew = make_crew()

    response = client.get("/google-calendar/connect", params={"crew_member_id": crew.id}, headers=HEADERS)

    assert response.status_code == 200
    query = parse_qs(urlparse(response.json()["authorization_url"]).query)
    assert query["state"] == [f"{TENANT_ID}:{crew.id}"]
    assert query["access_type"] == ["offline"]
    assert query["prompt"] == ["consent"]
    assert query["scope"] == ["https://www.googleapis.com/auth/calendar.events"]


def test_connect_unknown_crew_member(client, configured):
    response = client.get("/google-calendar/connect", params={"crew_member_id": "missing"}, headers=HEADERS)

    assert response.status_code == 404


def test_callback_stores_encrypted_credential(client, make_crew, token_endpoint):
    token_endpoint()
    crew = make_crew()

    response = client.get(
        "/google-calendar/callback",
        params={"code": "auth-code", "state": f"{TENANT_ID}:{crew.id}"},
        follow_redirects=False,
    )

    assert redirect_query(response) == {"success": ["calendar_connected"]}
    status = client.get(f"/google-calendar/status/{crew.id}", headers=HEADERS).json()
    assert status["connected"] is True
    assert status["has_credential"] is True


def test_callback_without_refresh_token(client, make_crew, token_endpoint):
    token_endpoint(payload={"access_token": "ya29.x", "expires_in": 3600})
    crew = make_crew()

    response = client.get(
        "/google-calendar/callback",
        params={"code": "auth-code", "state": f"{TENANT_ID}:{crew.id}"},
        follow_redirects=False,
    )

    assert redirect_query(response) == {"error": ["no_refresh_token"]}


def test_callback_exchange_failure(client, make_crew, token_endpoint):
    token_endpoint(status_code=400, payload={"error": "invalid_grant"})
    crew = make_crew()

    response = client.get(
        "/google-calendar/callback",
        params={"code": "auth-code", "state": f"{TENANT_ID}:{crew.id}"},
        follow_redirects=False,
    )

    assert redirect_query(response) == {"error": ["token_exchange_failed"]}


@pytest.mark.parametrize(
    "params, error",
    [
        ({"error": "access_denied"}, "oauth_cancelled"),
        ({"state": f"{TENANT_ID}:abc"}, "no_code"),
        ({"code": "auth-code", "state": "garbage"}, "no_crew_id"),
        ({"code": "auth-code", "state": f"{TENANT_ID}:missing"}, "no_crew_id"),
    ],
)
def test_callback_error_redirects(client, token_endpoint, params, error):
    token_endpoint()

    response = client.get("/google-calendar/callback", params=params, follow_redirects=False)

    assert redirect_query(response) == {"error": [error]}


def test_status_for_unconnected_crew_member(client, make_crew):
    crew = make_crew()

    response = client.get(f"/google-calendar/status/{crew.id}", headers=HEADERS)

    assert response.json() == {"connected": False, "has_credential": False, "token_expiry": None}


def test_status_unknown_crew_member(client):
    assert client.get("/google-calendar/status/missing", headers=HEADERS).status_code == 404
