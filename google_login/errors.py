"""
Error kinds raised during the Google login flow.

Each error carries a fixed, user-safe message. The exception text itself
is internal detail: it is logged, never shown.
"""


class GoogleAuthError(Exception):
    """Base class for every login flow failure."""

    kind = "google_auth_error"
    user_message = "Google login failed. Contact the site administrator."
    fatal = True


class ConfigurationError(GoogleAuthError):
    """Client id or client secret is missing."""

    kind = "configuration_error"
    user_message = "Google login is not configured properly. Contact the site administrator."


class UserDeclined(GoogleAuthError):
    """The user refused the consent screen (error=access_denied)."""

    kind = "user_declined"
    user_message = "You could not be authenticated."


class InvalidState(GoogleAuthError):
    """Anti-forgery state is missing, expired or does not match."""

    kind = "invalid_state"
    user_message = "Google login failed. Invalid OAuth2 state."


class TokenExchangeError(GoogleAuthError):
    kind = "token_exchange_error"
    user_message = "Google login failed. Please try again."


class ProfileFetchError(GoogleAuthError):
    kind = "profile_fetch_error"
    user_message = "Google login failed, could not load your Google profile."


class ExtraFetchError(GoogleAuthError):
    """An extra API call failed. Logged, the flow continues."""

    kind = "extra_fetch_error"
    user_message = ""
    fatal = False


class UnknownDataPoint(GoogleAuthError):
    """A configured data point is not present in the profile."""

    kind = "unknown_data_point"
    user_message = ""
    fatal = False
