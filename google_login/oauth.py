"""
Google OAuth 2.0 client.

SECURITY: This module handles OAuth authentication. Token values,
authorization codes and the client secret must never be logged.
"""
from typing import Any, Iterable, Optional

import httpx
from authlib.common.security import generate_token
from authlib.integrations.base_client import OAuthError
from authlib.integrations.httpx_client import AsyncOAuth2Client

from google_login.config import OAuthConfig
from google_login.errors import (
    ConfigurationError,
    ExtraFetchError,
    ProfileFetchError,
    TokenExchangeError,
)
from google_login.logging_config import get_logger
from google_login.models.identity import AccessToken

AUTHORIZATION_URL = "https://accounts.google.com/o/oauth2/v2/auth"
TOKEN_URL = "https://oauth2.googleapis.com/token"
USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"

# Always requested, whatever the settings say
BASELINE_SCOPES = ("email", "openid", "profile")

# 48 chars from a system CSPRNG, well over 128 bits
STATE_LENGTH = 48

# Errors the provider round trips can raise
PROVIDER_ERRORS = (httpx.HTTPError, httpx.InvalidURL, OAuthError, KeyError, ValueError)

log = get_logger(component="oauth_client")


def merge_scopes(extra: Iterable[str] = ()) -> list[str]:
    """
    Combine the baseline scopes with configured ones.

    Args:
        extra: Configured scopes

    Returns:
        Baseline scopes followed by the extra ones, without duplicates
    """
    scopes: list[str] = []
    for scope in (*BASELINE_SCOPES, *extra):
        scope = scope.strip()
        if scope and scope not in scopes:
            scopes.append(scope)
    return scopes


class OAuthClient:
    """
    Thin wrapper around Authlib's AsyncOAuth2Client for Google.

    One instance serves one flow invocation:

        async with OAuthClient(config) as client:
            token = await client.exchange_code_for_token(code)
    """

    def __init__(
        self,
        config: OAuthConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not config.is_complete:
            log.error("oauth_config_incomplete", detail="Define Client ID and Client Secret in settings")
            raise ConfigurationError("client_id or client_secret missing")

        self.config = config

        if transport is None and config.proxy_url:
            transport = httpx.AsyncHTTPTransport(proxy=config.proxy_url)

        client_kwargs: dict[str, Any] = {"timeout": config.timeout}
        if transport is not None:
            client_kwargs["transport"] = transport

        self._client = AsyncOAuth2Client(
            client_id=config.client_id,
            client_secret=config.client_secret,
            redirect_uri=config.redirect_uri,
            token_endpoint_auth_method="client_secret_post",
            **client_kwargs,
        )

    async def __aenter__(self) -> "OAuthClient":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.aclose()

    async def aclose(self):
        await self._client.aclose()

    def build_authorization_url(self, scopes: Optional[Iterable[str]] = None) -> tuple[str, str]:
        """
        Build the Google consent URL.

        Args:
            scopes: Extra scopes (defaults to the configured ones)

        Returns:
            (authorization URL, freshly generated state token)
        """
        requested = merge_scopes(self.config.scopes if scopes is None else scopes)
        url, state = self._client.create_authorization_url(
            AUTHORIZATION_URL,
            state=generate_token(STATE_LENGTH),
            scope=requested,
            access_type="offline",
        )
        log.info("oauth_authorization_url_built", scopes=requested)
        return url, state

    async def exchange_code_for_token(self, code: Optional[str]) -> AccessToken:
        """
        Exchange an authorization code for an access token.

        Raises:
            TokenExchangeError: On empty code, network failure or provider error
        """
        if not code:
            raise TokenExchangeError("callback carried no authorization code")

        try:
            token = await self._client.fetch_token(TOKEN_URL, code=code)
            access_token = AccessToken.from_token_response(token)
        except PROVIDER_ERRORS as e:
            raise TokenExchangeError(f"{type(e).__name__}: {e}") from e

        log.info("oauth_token_exchanged", expires_at=str(access_token.expires_at))
        return access_token

    async def fetch_profile(self, token: AccessToken) -> dict:
        """
        Fetch the resource owner profile from the user-info endpoint.

        Raises:
            ProfileFetchError: On network/auth failure or an empty profile
        """
        try:
            profile = await self._get_json(USERINFO_URL, token)
        except PROVIDER_ERRORS as e:
            raise ProfileFetchError(f"{type(e).__name__}: {e}") from e

        if not profile or not isinstance(profile, dict):
            raise ProfileFetchError("user-info endpoint returned an empty profile")
        return profile

    async def fetch_extra(self, token: AccessToken, url: str) -> Any:
        """
        Make an additional authenticated GET call.

        Raises:
            ExtraFetchError: On any failure
        """
        try:
            return await self._get_json(url, token)
        except PROVIDER_ERRORS as e:
            raise ExtraFetchError(f"{url}: {type(e).__name__}: {e}") from e

    async def _get_json(self, url: str, token: AccessToken) -> Any:
        response = await self._client.request(
            "GET",
            url,
            headers={"Authorization": f"Bearer {token.value}"},
            withhold_token=True,
        )
        response.raise_for_status()
        return response.json()
