"""
Sentry configuration for error tracking.

Captures unhandled exceptions and failed provider calls. OAuth secrets
are scrubbed from every event before it leaves the process.
"""
from urllib.parse import parse_qsl, urlencode

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration

from google_login.config import settings
from google_login.logging_config import get_logger

logger = get_logger(component="sentry")

# Query parameters that must never be sent to Sentry
SENSITIVE_PARAMS = {"code", "state", "access_token", "id_token", "refresh_token"}
FILTERED = "[Filtered]"


def configure_sentry(app_settings=None):
    """
    Initialize Sentry with the FastAPI integration.

    Requires SENTRY_DSN environment variable to be set.
    """
    app_settings = app_settings or settings
    dsn = app_settings.SENTRY_DSN

    if not dsn:
        logger.warning("sentry_disabled", reason="SENTRY_DSN not set")
        return

    sentry_sdk.init(
        dsn=dsn,
        integrations=[
            FastApiIntegration(),
        ],
        before_send=scrub_event,
        send_default_pii=False,
        # Sample rate: capture 10% of transactions for performance monitoring
        traces_sample_rate=0.1,
        environment=app_settings.ENVIRONMENT,
        release=app_settings.APP_VERSION,
    )

    logger.info("sentry_initialized", environment=app_settings.ENVIRONMENT)


def _scrub_query(query_string: str) -> str:
    pairs = parse_qsl(query_string, keep_blank_values=True)
    return urlencode([(k, FILTERED if k in SENSITIVE_PARAMS else v) for k, v in pairs])


def scrub_event(event, hint):
    """
    Remove OAuth codes, state tokens, access tokens and cookies
    from the request data attached to an event.
    """
    request = event.get("request")
    if not request:
        return event

    query_string = request.get("query_string")
    if isinstance(query_string, str) and query_string:
        request["query_string"] = _scrub_query(query_string)

    if "cookies" in request:
        request["cookies"] = FILTERED

    headers = request.get("headers")
    if isinstance(headers, dict):
        for name in list(headers):
            if name.lower() in ("cookie", "authorization"):
                headers[name] = FILTERED

    return event


def capture_exception(error=None):
    """
    Capture an exception to Sentry.

    No-op when Sentry is not initialized.
    """
    if sentry_sdk.get_client().is_active():
        sentry_sdk.capture_exception(error)
