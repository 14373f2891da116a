"""
Configuration management for Google Login.

Uses pydantic-settings for environment variable management.
"""
from typing import Optional, Protocol, runtime_checkable

from pydantic import BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict


def split_csv(value: Optional[str]) -> list[str]:
    """
    Split a comma-separated setting into a clean list.

    Whitespace is trimmed, empty entries are dropped and duplicates
    are removed keeping the first occurrence.
    """
    if not value:
        return []

    items: list[str] = []
    for part in value.split(","):
        part = part.strip()
        if part and part not in items:
            items.append(part)
    return items


class OAuthConfig(BaseModel):
    """Credentials and endpoints needed for one OAuth2 flow."""

    client_id: str = ""
    client_secret: str = ""
    redirect_uri: Optional[str] = None
    scopes: list[str] = []
    proxy_url: Optional[str] = None
    timeout: float = 10.0

    @property
    def is_complete(self) -> bool:
        return bool(self.client_id) and bool(self.client_secret)


@runtime_checkable
class ProvidesOAuthCredentials(Protocol):
    """Anything that can hand out Google OAuth settings."""

    def get_oauth_config(self, redirect_uri: Optional[str] = None) -> OAuthConfig: ...

    def get_data_points(self) -> list[str]: ...

    def get_api_calls(self) -> list[str]: ...


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # App
    APP_NAME: str = "Google Login"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"

    # Sessions
    SESSION_SECRET_KEY: str = "change-me-in-production-use-strong-secret"
    SESSION_COOKIE: str = "google_login_session"

    # Google OAuth
    GOOGLE_CLIENT_ID: str = ""
    GOOGLE_CLIENT_SECRET: str = ""
    GOOGLE_REDIRECT_URI: Optional[str] = None
    GOOGLE_SCOPES: str = ""
    GOOGLE_DATA_POINTS: str = "id,name,email,avatar"
    GOOGLE_API_CALLS: str = ""

    # Outbound calls to Google
    HTTP_PROXY_URL: Optional[str] = None
    OAUTH_TIMEOUT_SECONDS: float = 10.0
    OAUTH_STATE_MAX_AGE_SECONDS: int = 600

    # Landing pages
    LOGIN_URL: str = "/login"
    SUCCESS_URL: str = "/"

    # Error tracking
    SENTRY_DSN: Optional[str] = None

    def get_oauth_config(self, redirect_uri: Optional[str] = None) -> OAuthConfig:
        """
        Build the OAuth config for one flow invocation.

        Args:
            redirect_uri: Callback URI derived from the request, used when
                GOOGLE_REDIRECT_URI is not set

        Returns:
            OAuthConfig (possibly incomplete; the client validates it)
        """
        return OAuthConfig(
            client_id=self.GOOGLE_CLIENT_ID.strip(),
            client_secret=self.GOOGLE_CLIENT_SECRET.strip(),
            redirect_uri=self.GOOGLE_REDIRECT_URI or redirect_uri,
            scopes=split_csv(self.GOOGLE_SCOPES),
            proxy_url=self.HTTP_PROXY_URL or None,
            timeout=self.OAUTH_TIMEOUT_SECONDS,
        )

    def get_data_points(self) -> list[str]:
        return split_csv(self.GOOGLE_DATA_POINTS)

    def get_api_calls(self) -> list[str]:
        return split_csv(self.GOOGLE_API_CALLS)


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """FastAPI dependency returning the global settings."""
    return settings
