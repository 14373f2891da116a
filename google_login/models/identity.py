"""
Identity models.

Records exchanged between the OAuth client, the flow controller and the
user repository. None of these are persisted beyond the session.
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from pydantic import BaseModel, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuthorizationState(BaseModel):
    """Anti-forgery token saved at redirect-out, consumed at callback."""
    token: str
    created_at: datetime = Field(default_factory=utcnow)

    def is_expired(self, max_age_seconds: int, now: Optional[datetime] = None) -> bool:
        """
        Check whether the state is older than the allowed age.

        Args:
            max_age_seconds: Allowed age, 0 or less disables the check
            now: Reference time (defaults to current UTC time)

        Returns:
            True if the state must be rejected
        """
        if max_age_seconds <= 0:
            return False
        now = now or utcnow()
        return (now - self.created_at).total_seconds() > max_age_seconds


class AccessToken(BaseModel):
    """Google access token for the duration of one authentication."""
    value: str
    expires_at: Optional[datetime] = None
    token_type: str = "Bearer"
    refresh_token: Optional[str] = None
    scope: Optional[str] = None

    @classmethod
    def from_token_response(cls, token: dict) -> "AccessToken":
        """
        Build from an Authlib token dict.

        Args:
            token: Token endpoint response (access_token, expires_at, ...)

        Returns:
            AccessToken

        Raises:
            KeyError: If the response holds no access_token
        """
        expires_at = None
        if token.get("expires_at"):
            expires_at = datetime.fromtimestamp(int(token["expires_at"]), tz=timezone.utc)
        elif token.get("expires_in"):
            expires_at = utcnow() + timedelta(seconds=int(token["expires_in"]))

        return cls(
            value=token["access_token"],
            expires_at=expires_at,
            token_type=token.get("token_type") or "Bearer",
            refresh_token=token.get("refresh_token"),
            scope=token.get("scope"),
        )

    def __repr__(self):
        return f"<AccessToken(type={self.token_type}, expires_at={self.expires_at})>"

    __str__ = __repr__


class ProfileRecord(BaseModel):
    """Normalized Google identity handed to the user repository."""
    id: str = ""
    name: str = ""
    email: str = ""
    avatar_url: str = ""
    # Requested data point -> value
    extra: dict[str, Any] = {}
    # Extra API call URL -> decoded response
    api_data: dict[str, Any] = {}


class CallbackParams(BaseModel):
    """Query parameters Google sends back to the callback endpoint."""
    code: Optional[str] = None
    state: Optional[str] = None
    error: Optional[str] = None
