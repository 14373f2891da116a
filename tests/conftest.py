"""
Shared fixtures: settings, a fake Google provider and a test app.
"""
from functools import partial
from urllib.parse import parse_qs

import httpx
import pytest
from fastapi.testclient import TestClient

from google_login.config import Settings
from google_login.dependencies.flow import get_client_factory
from google_login.main import create_app
from google_login.oauth import OAuthClient

ACCESS_TOKEN_VALUE = "ya29.test-access-token"

PROFILE = {
    "sub": "110248495921238986420",
    "name": "Ada Lovelace",
    "given_name": "Ada",
    "family_name": "Lovelace",
    "picture": "https://lh3.googleusercontent.com/a/ada.png",
    "email": "ada@example.com",
    "email_verified": True,
    "locale": "en",
}


class FakeGoogle:
    """
    Stand-in for Google's token and user-info endpoints.

    Every request is recorded; responses can be changed per test.
    """

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.token_status = 200
        self.token_body = {
            "access_token": ACCESS_TOKEN_VALUE,
            "expires_in": 3599,
            "token_type": "Bearer",
            "scope": "openid email profile",
        }
        self.profile_status = 200
        self.profile_body = dict(PROFILE)
        self.extra = {}
        self.network_error = None
        self.transport = httpx.MockTransport(self.handle)

    @property
    def client_factory(self):
        return partial(OAuthClient, transport=self.transport)

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.network_error is not None:
            raise self.network_error(f"cannot reach {request.url.host}", request=request)

        if request.url.host == "oauth2.googleapis.com" and request.url.path == "/token":
            return httpx.Response(self.token_status, json=self.token_body)
        if request.url.host == "openidconnect.googleapis.com":
            return httpx.Response(self.profile_status, json=self.profile_body)

        url = str(request.url)
        if url in self.extra:
            status, body = self.extra[url]
            return httpx.Response(status, json=body)
        return httpx.Response(404, json={"error": "not_found"})

    def token_form(self) -> dict:
        token_requests = [r for r in self.requests if r.url.path == "/token"]
        assert token_requests, "no token request was made"
        return {k: v[0] for k, v in parse_qs(token_requests[-1].content.decode()).items()}


def make_settings(**overrides) -> Settings:
    values = {
        "GOOGLE_CLIENT_ID": "client-123.apps.googleusercontent.com",
        "GOOGLE_CLIENT_SECRET": "secret-456",
        "GOOGLE_REDIRECT_URI": "http://testserver/login/google/callback",
        "GOOGLE_SCOPES": "",
        "GOOGLE_DATA_POINTS": "id,name,email,avatar",
        "GOOGLE_API_CALLS": "",
        "SESSION_SECRET_KEY": "test-session-secret",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def google():
    return FakeGoogle()


@pytest.fixture
def app(settings, google):
    app = create_app(settings)
    app.dependency_overrides[get_client_factory] = lambda: google.client_factory
    return app


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def settings_factory():
    return make_settings
