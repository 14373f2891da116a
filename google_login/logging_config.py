"""
Structured logging configuration using structlog.

All logs are output as JSON with consistent context fields. OAuth
secrets are redacted before rendering, whatever the caller passes.
"""
import logging
import sys

import structlog

from google_login.config import settings

# Event keys whose values must never reach a log line
REDACTED_KEYS = frozenset({
    "access_token",
    "refresh_token",
    "id_token",
    "token",
    "code",
    "state",
    "client_secret",
    "authorization",
})
REDACTED = "[Filtered]"


def redact_secrets(logger, method_name, event_dict):
    """Replace values of OAuth secret keys in the event."""
    for key in REDACTED_KEYS.intersection(event_dict):
        event_dict[key] = REDACTED
    return event_dict


def configure_logging(debug: bool = False):
    """
    Configure structlog for JSON output with context.

    Safe to call again: module loggers are lazy proxies, so a later call
    (e.g. from create_app with DEBUG on) changes the level everywhere.
    """
    level = logging.DEBUG if debug else logging.INFO

    # Configure standard library logging (httpx, uvicorn)
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=level,
        force=True,
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            redact_secrets,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer()
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )


configure_logging(settings.DEBUG)


def get_logger(**context):
    """
    Get a logger with additional context bound.

    Returns a lazy proxy that resolves the current configuration on
    every call.

    Usage:
        log = get_logger(component="auth_flow")
        log.info("message", extra_field=value)
    """
    return structlog.get_logger(**context)
