"""
Login flow dependencies for FastAPI.

Everything session-scoped is built per request from ``request.session``;
nothing is shared between users. Override any of these through
``app.dependency_overrides`` (tests swap in a fake Google).
"""
from fastapi import Depends, Request

from google_login.config import Settings, get_settings
from google_login.oauth import OAuthClient
from google_login.services.auth_flow import AuthFlowController, ClientFactory
from google_login.services.state_store import SessionStateStore
from google_login.services.user_service import SessionUserRepository

CALLBACK_ROUTE = "google_callback"


def get_state_store(request: Request) -> SessionStateStore:
    return SessionStateStore(request.session)


def get_user_repository(request: Request) -> SessionUserRepository:
    return SessionUserRepository(request.session)


def get_client_factory() -> ClientFactory:
    """Factory building one OAuthClient per flow invocation."""
    return OAuthClient


def get_flow_controller(
    request: Request,
    settings: Settings = Depends(get_settings),
    state_store: SessionStateStore = Depends(get_state_store),
    user_repository: SessionUserRepository = Depends(get_user_repository),
    client_factory: ClientFactory = Depends(get_client_factory),
) -> AuthFlowController:
    """
    Build the flow controller for the current request.

    The callback URI falls back to this app's callback route when
    GOOGLE_REDIRECT_URI is not configured.
    """
    return AuthFlowController(
        credentials=settings,
        state_store=state_store,
        user_repository=user_repository,
        client_factory=client_factory,
        redirect_uri=str(request.url_for(CALLBACK_ROUTE)),
        login_url=settings.LOGIN_URL,
        success_url=settings.SUCCESS_URL,
        state_max_age=settings.OAUTH_STATE_MAX_AGE_SECONDS,
    )
