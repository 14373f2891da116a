"""
User repository collaborator.

The login flow hands every resolved identity to a UserRepository.
Account linking and durable storage belong to the host application;
the default implementation only records the identity in the session.
"""
import json
from typing import Any, MutableMapping, Optional, Protocol

from google_login.models.identity import ProfileRecord

PROVIDER = "google"
SESSION_USER_KEY = "user"


class UserRepository(Protocol):
    """Resolves or creates the local account for a Google identity."""

    async def authenticate_user(self, profile: ProfileRecord) -> None: ...


class SessionUserRepository:
    """Keeps the authenticated identity in the user's session."""

    def __init__(self, session: MutableMapping[str, Any]):
        self.session = session

    async def authenticate_user(self, profile: ProfileRecord) -> None:
        """
        Record the identity as the logged-in user.

        Args:
            profile: Normalized Google identity
        """
        self.session[SESSION_USER_KEY] = {
            "provider": PROVIDER,
            "provider_user_id": profile.id,
            "name": profile.name,
            "email": profile.email,
            "avatar_url": profile.avatar_url,
            "data": json.dumps(profile.extra),
        }

    def get_current_user(self) -> Optional[dict]:
        return self.session.get(SESSION_USER_KEY)

    def logout(self) -> None:
        self.session.pop(SESSION_USER_KEY, None)
