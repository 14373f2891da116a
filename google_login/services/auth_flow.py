"""
Google login flow controller.

Drives the authorization-code flow as a small state machine:

    Idle -> Redirecting -> AwaitingCallback -> Validating -> Exchanging
         -> FetchingProfile -> Mapping -> Completed

Any step can end in Failed. Failures never raise to the caller: they
come back as a FlowOutcome carrying one user-safe message and the login
URL, while the internal detail goes to the logs.

SECURITY: The state check on the callback must never be skipped.
"""
import enum
import hmac
from typing import Callable, Optional

from pydantic import BaseModel, ValidationError

from google_login.config import OAuthConfig, ProvidesOAuthCredentials
from google_login.errors import (
    ExtraFetchError,
    GoogleAuthError,
    InvalidState,
    ProfileFetchError,
    TokenExchangeError,
    UserDeclined,
)
from google_login.logging_config import get_logger
from google_login.models.identity import (
    AccessToken,
    AuthorizationState,
    CallbackParams,
    ProfileRecord,
)
from google_login.oauth import OAuthClient
from google_login.sentry_config import capture_exception
from google_login.services.identity_mapper import IdentityMapper
from google_login.services.state_store import (
    ACCESS_TOKEN_KEY,
    STATE_KEY,
    SessionStateStore,
)
from google_login.services.user_service import UserRepository

logger = get_logger(component="auth_flow")

ClientFactory = Callable[[OAuthConfig], OAuthClient]

# Provider failures worth an error-tracking event
REPORTED_ERRORS = (TokenExchangeError, ProfileFetchError)


class FlowState(str, enum.Enum):
    """States of one login attempt."""
    IDLE = "idle"
    REDIRECTING = "redirecting"
    AWAITING_CALLBACK = "awaiting_callback"
    VALIDATING = "validating"
    EXCHANGING = "exchanging"
    FETCHING_PROFILE = "fetching_profile"
    MAPPING = "mapping"
    COMPLETED = "completed"
    FAILED = "failed"


class FlowOutcome(BaseModel):
    """Result of one controller step."""
    state: FlowState
    redirect_url: str
    message: Optional[str] = None
    failure: Optional[str] = None
    profile: Optional[ProfileRecord] = None
    transitions: list[FlowState] = []

    @property
    def failed(self) -> bool:
        return self.state == FlowState.FAILED


def states_match(stored: str, received: str) -> bool:
    """Exact, constant-time comparison of two state tokens."""
    return hmac.compare_digest(stored.encode("utf-8"), received.encode("utf-8"))


class AuthFlowController:
    """
    Orchestrates the redirect-out and callback-in requests.

    One instance serves one request; session-scoped data goes through
    the given state store.
    """

    def __init__(
        self,
        credentials: ProvidesOAuthCredentials,
        state_store: SessionStateStore,
        user_repository: UserRepository,
        client_factory: ClientFactory = OAuthClient,
        redirect_uri: Optional[str] = None,
        login_url: str = "/login",
        success_url: str = "/",
        state_max_age: int = 600,
    ):
        self.credentials = credentials
        self.state_store = state_store
        self.user_repository = user_repository
        self.client_factory = client_factory
        self.redirect_uri = redirect_uri
        self.login_url = login_url
        self.success_url = success_url
        self.state_max_age = state_max_age

        self.state = FlowState.IDLE
        self.transitions: list[FlowState] = [FlowState.IDLE]

    def _advance(self, state: FlowState):
        logger.debug("oauth_flow_transition", from_state=self.state.value, to_state=state.value)
        self.state = state
        self.transitions.append(state)

    def _outcome(self, redirect_url: str, **fields) -> FlowOutcome:
        return FlowOutcome(
            state=self.state,
            redirect_url=redirect_url,
            transitions=list(self.transitions),
            **fields
        )

    def _fail(self, error: GoogleAuthError) -> FlowOutcome:
        failed_in = self.state
        self._advance(FlowState.FAILED)

        logger.error(
            "oauth_flow_failed",
            error_kind=error.kind,
            failed_in=failed_in.value,
            detail=str(error),
        )
        if isinstance(error, REPORTED_ERRORS):
            capture_exception(error)

        self.state_store.clear(ACCESS_TOKEN_KEY)
        return self._outcome(
            self.login_url,
            message=error.user_message,
            failure=error.kind,
        )

    def _load_config(self) -> OAuthConfig:
        return self.credentials.get_oauth_config(self.redirect_uri)

    async def start(self) -> FlowOutcome:
        """
        Begin a login: build the consent URL and remember the state.

        Returns:
            AwaitingCallback outcome redirecting to Google, or a Failed one
        """
        self._advance(FlowState.REDIRECTING)
        try:
            async with self.client_factory(self._load_config()) as client:
                url, state = client.build_authorization_url()
        except GoogleAuthError as e:
            return self._fail(e)

        authorization_state = AuthorizationState(token=state)
        self.state_store.save(STATE_KEY, authorization_state.model_dump(mode="json"))

        self._advance(FlowState.AWAITING_CALLBACK)
        logger.info("oauth_redirect_created")
        return self._outcome(url)

    async def handle_callback(self, params: CallbackParams) -> FlowOutcome:
        """
        Finish a login from Google's callback parameters.

        Args:
            params: code, state and error query parameters

        Returns:
            Completed outcome with the mapped profile, or a Failed one
        """
        self._advance(FlowState.AWAITING_CALLBACK)

        if params.error == "access_denied":
            self.state_store.clear(STATE_KEY)
            return self._fail(UserDeclined("user denied access on the consent screen"))

        self._advance(FlowState.VALIDATING)
        try:
            self._validate_state(params.state)
        except InvalidState as e:
            return self._fail(e)

        try:
            async with self.client_factory(self._load_config()) as client:
                self._advance(FlowState.EXCHANGING)
                if params.error:
                    raise TokenExchangeError(f"provider returned error: {params.error}")
                token = await client.exchange_code_for_token(params.code)

                self._advance(FlowState.FETCHING_PROFILE)
                raw_profile = await client.fetch_profile(token)

                self._advance(FlowState.MAPPING)
                profile = IdentityMapper(self.credentials.get_data_points()).map(raw_profile)
                profile.api_data = await self._fetch_api_calls(client, token)
        except GoogleAuthError as e:
            return self._fail(e)

        self.state_store.save(ACCESS_TOKEN_KEY, token.value)
        await self.user_repository.authenticate_user(profile)

        self._advance(FlowState.COMPLETED)
        logger.info("oauth_login_completed", provider_user_id=profile.id)
        return self._outcome(self.success_url, profile=profile)

    def _validate_state(self, received: Optional[str]):
        """
        Consume the stored state and compare it with the callback's.

        The stored value is cleared whatever the result, so a state can
        be used only once.

        Raises:
            InvalidState: If missing, expired or not an exact match
        """
        stored = self.state_store.load(STATE_KEY)
        self.state_store.clear(STATE_KEY)

        if not stored:
            raise InvalidState("no state stored for this session")
        if not received:
            raise InvalidState("callback carried no state")

        try:
            authorization_state = AuthorizationState.model_validate(stored)
        except ValidationError as e:
            raise InvalidState("stored state is malformed") from e

        if not states_match(authorization_state.token, received):
            raise InvalidState("state mismatch")
        if authorization_state.is_expired(self.state_max_age):
            raise InvalidState("state expired")

    async def _fetch_api_calls(self, client: OAuthClient, token: AccessToken) -> dict:
        results = {}
        for url in self.credentials.get_api_calls():
            try:
                results[url] = await client.fetch_extra(token, url)
            except ExtraFetchError as e:
                logger.warning("extra_api_call_failed", error_kind=e.kind, detail=str(e))
        return results
