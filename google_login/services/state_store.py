"""
Session-scoped key/value store.

Holds the anti-forgery state and the access token between the
redirect-out and callback requests. It only ever sees the session
mapping of the current request, so nothing leaks across sessions.
"""
from typing import Any, MutableMapping, Optional

STATE_KEY = "oAuth2State"
ACCESS_TOKEN_KEY = "access_token"


class SessionStateStore:
    """Prefixed view over one user's session data."""

    def __init__(self, session: MutableMapping[str, Any], prefix: str = "google_login"):
        self.session = session
        self.prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self.prefix}_{key}"

    def save(self, key: str, value: Any) -> None:
        """Store a JSON-serializable value, overwriting any previous one."""
        self.session[self._key(key)] = value

    def load(self, key: str) -> Optional[Any]:
        return self.session.get(self._key(key))

    def clear(self, *keys: str) -> None:
        for key in keys:
            self.session.pop(self._key(key), None)
