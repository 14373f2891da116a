"""
Tests for the login HTTP endpoints.
"""
from urllib.parse import parse_qs, urlparse

import pytest
from fastapi.testclient import TestClient

from google_login.dependencies.flow import get_client_factory
from google_login.main import create_app


def location_params(response) -> dict:
    return {k: v[0] for k, v in parse_qs(urlparse(response.headers["location"]).query).items()}


def begin_login(client) -> str:
    response = client.get("/login/google", follow_redirects=False)
    assert response.status_code in (302, 307)
    return location_params(response)["state"]


class TestRedirectOut:

    def test_redirects_to_google(self, client):
        response = client.get("/login/google", follow_redirects=False)

        assert response.status_code in (302, 307)
        location = response.headers["location"]
        assert location.startswith("https://accounts.google.com/o/oauth2/v2/auth?")

        params = location_params(response)
        assert params["client_id"] == "client-123.apps.googleusercontent.com"
        assert params["redirect_uri"] == "http://testserver/login/google/callback"
        assert params["scope"] == "email openid profile"
        assert params["response_type"] == "code"
        assert params["access_type"] == "offline"
        assert len(params["state"]) >= 48

    def test_redirect_uri_defaults_to_callback_route(self, settings_factory, google):
        app = create_app(settings_factory(GOOGLE_REDIRECT_URI=None))
        app.dependency_overrides[get_client_factory] = lambda: google.client_factory

        response = TestClient(app).get("/login/google", follow_redirects=False)

        assert location_params(response)["redirect_uri"] == "http://testserver/login/google/callback"

    def test_not_configured(self, settings_factory, google):
        app = create_app(settings_factory(GOOGLE_CLIENT_SECRET=""))
        app.dependency_overrides[get_client_factory] = lambda: google.client_factory
        client = TestClient(app)

        response = client.get("/login/google", follow_redirects=False)

        assert response.headers["location"] == "/login"
        messages = client.get("/login").json()["messages"]
        assert messages == [{
            "level": "error",
            "text": "Google login is not configured properly. Contact the site administrator.",
        }]
        assert google.requests == []


class TestCallback:

    def test_full_login(self, client, google):
        state = begin_login(client)

        response = client.get(
            "/login/google/callback",
            params={"code": "4/0Ab-code", "state": state},
            follow_redirects=False,
        )

        assert response.headers["location"] == "/"
        assert "ya29" not in response.text

        me = client.get("/me").json()
        assert me["authenticated"] is True
        assert me["user"]["email"] == "ada@example.com"
        assert me["user"]["provider"] == "google"
        assert client.get("/login").json()["messages"] == []

    def test_state_mismatch_shows_message(self, client, google):
        begin_login(client)

        response = client.get(
            "/login/google/callback",
            params={"code": "4/0Ab-code", "state": "forged"},
            follow_redirects=False,
        )

        assert response.headers["location"] == "/login"
        assert google.requests == []

        messages = client.get("/login").json()["messages"]
        assert [m["text"] for m in messages] == ["Google login failed. Invalid OAuth2 state."]
        # messages are shown once
        assert client.get("/login").json()["messages"] == []
        assert client.get("/me").json() == {"authenticated": False}

    def test_access_denied(self, client, google):
        state = begin_login(client)

        response = client.get(
            "/login/google/callback",
            params={"error": "access_denied", "state": state},
            follow_redirects=False,
        )

        assert response.headers["location"] == "/login"
        assert google.requests == []
        texts = [m["text"] for m in client.get("/login").json()["messages"]]
        assert texts == ["You could not be authenticated."]

    def test_callback_without_session(self, client, google):
        response = client.get(
            "/login/google/callback",
            params={"code": "4/0Ab-code", "state": "abc"},
            follow_redirects=False,
        )

        assert response.headers["location"] == "/login"
        assert google.requests == []

    def test_token_failure_hides_detail(self, client, google):
        google.token_status = 400
        google.token_body = {"error": "invalid_grant", "error_description": "Bad Request"}
        state = begin_login(client)

        client.get(
            "/login/google/callback",
            params={"code": "bad", "state": state},
            follow_redirects=False,
        )

        texts = [m["text"] for m in client.get("/login").json()["messages"]]
        assert texts == ["Google login failed. Please try again."]


class TestSessionEndpoints:

    def test_logout(self, client):
        state = begin_login(client)
        client.get(
            "/login/google/callback",
            params={"code": "4/0Ab-code", "state": state},
            follow_redirects=False,
        )
        assert client.get("/me").json()["authenticated"] is True

        response = client.post("/logout")

        assert response.json()["status"] == "success"
        assert client.get("/me").json() == {"authenticated": False}

    @pytest.mark.parametrize("path", ["/", "/health"])
    def test_health(self, client, path):
        assert client.get(path).status_code == 200

    def test_health_reports_configuration(self, client):
        assert client.get("/health").json()["google_configured"] is True
