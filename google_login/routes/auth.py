"""
Authentication routes for Google OAuth.

SECURITY: Responses never carry internal error detail, tokens or
secrets. Failures show one flash message on the login page.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Request
from starlette.responses import RedirectResponse

from google_login.dependencies.flow import (
    CALLBACK_ROUTE,
    get_flow_controller,
    get_state_store,
    get_user_repository,
)
from google_login.models.identity import CallbackParams
from google_login.services.auth_flow import AuthFlowController, FlowOutcome
from google_login.services.state_store import (
    ACCESS_TOKEN_KEY,
    STATE_KEY,
    SessionStateStore,
)
from google_login.services.user_service import SessionUserRepository

router = APIRouter(tags=["Authentication"])

MESSAGES_KEY = "messages"


def flash(request: Request, message: str, level: str = "error"):
    """Queue a message for the next login page render."""
    messages = list(request.session.get(MESSAGES_KEY, []))
    messages.append({"level": level, "text": message})
    request.session[MESSAGES_KEY] = messages


def outcome_response(request: Request, outcome: FlowOutcome) -> RedirectResponse:
    if outcome.message:
        flash(request, outcome.message)
    return RedirectResponse(url=outcome.redirect_url)


@router.get("/login")
async def login_page(request: Request):
    """
    Login entry point.

    Returns (and clears) the messages queued for this session.
    """
    messages = request.session.pop(MESSAGES_KEY, [])
    return {
        "login_url": str(request.url_for("redirect_to_google")),
        "messages": messages,
    }


@router.get("/login/google")
async def redirect_to_google(
    request: Request,
    controller: AuthFlowController = Depends(get_flow_controller),
):
    """
    Redirect user to Google OAuth login page.
    """
    outcome = await controller.start()
    return outcome_response(request, outcome)


@router.get("/login/google/callback", name=CALLBACK_ROUTE)
async def google_callback(
    request: Request,
    code: Optional[str] = None,
    state: Optional[str] = None,
    error: Optional[str] = None,
    controller: AuthFlowController = Depends(get_flow_controller),
):
    """
    Handle Google OAuth callback (server-side flow).
    """
    outcome = await controller.handle_callback(
        CallbackParams(code=code, state=state, error=error)
    )
    return outcome_response(request, outcome)


@router.post("/logout")
async def logout(
    state_store: SessionStateStore = Depends(get_state_store),
    users: SessionUserRepository = Depends(get_user_repository),
):
    """
    Logout endpoint.

    Drops the identity, access token and any pending state.
    """
    users.logout()
    state_store.clear(ACCESS_TOKEN_KEY, STATE_KEY)
    return {"status": "success", "message": "Logged out"}


@router.get("/me")
async def get_current_user(users: SessionUserRepository = Depends(get_user_repository)):
    """
    Get current user info.
    """
    user = users.get_current_user()
    if user is None:
        return {"authenticated": False}
    return {"authenticated": True, "user": user}
