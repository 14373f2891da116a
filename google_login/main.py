"""
Google Login - sign in with Google over OAuth2

FastAPI application entry point.
"""
from typing import Optional

from fastapi import FastAPI
from starlette.middleware.sessions import SessionMiddleware

# Import observability modules
from google_login.config import Settings, get_settings, settings as default_settings
from google_login.logging_config import configure_logging
from google_login.sentry_config import configure_sentry
from google_login.middleware.logging import LoggingMiddleware

# Import route modules
from google_login.routes.auth import router as auth_router


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Settings to use instead of the environment-loaded ones

    Returns:
        Configured FastAPI app
    """
    settings = settings or default_settings

    # Initialize logging first
    configure_logging(settings.DEBUG)

    # Initialize Sentry (if SENTRY_DSN is set)
    configure_sentry(settings)

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Sign in with Google using the OAuth2 authorization-code flow",
    )
    app.dependency_overrides[get_settings] = lambda: settings

    # Session cookie holds the OAuth state, access token and identity
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.SESSION_SECRET_KEY,
        session_cookie=settings.SESSION_COOKIE,
        same_site="lax",
        https_only=not settings.DEBUG and settings.ENVIRONMENT == "production",
    )

    # Add logging middleware LAST so it wraps everything else
    app.add_middleware(LoggingMiddleware)

    app.include_router(auth_router)

    @app.get("/")
    async def root():
        """Health check endpoint."""
        return {
            "name": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "status": "running"
        }

    @app.get("/health")
    async def health():
        """Detailed health check."""
        return {
            "status": "healthy",
            "google_configured": settings.get_oauth_config().is_complete,
        }

    return app


app = create_app()
