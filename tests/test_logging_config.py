"""
Tests for structlog configuration.
"""
import pytest
import structlog
from structlog.testing import capture_logs

from google_login.logging_config import REDACTED, configure_logging, redact_secrets
from google_login.main import create_app
from google_login.services.identity_mapper import IdentityMapper


@pytest.fixture
def restore_logging():
    yield
    configure_logging(False)


def passthrough_events(logs):
    return [e for e in logs if e["event"] == "data_point_passthrough"]


def test_debug_setting_reaches_module_loggers(settings_factory, restore_logging):
    create_app(settings_factory(DEBUG=True))

    with capture_logs() as logs:
        IdentityMapper(["custom_point"])

    events = passthrough_events(logs)
    assert len(events) == 1
    assert events[0]["log_level"] == "debug"
    assert events[0]["component"] == "identity_mapper"
    assert events[0]["data_point"] == "custom_point"


def test_debug_events_filtered_by_default(settings_factory, restore_logging):
    create_app(settings_factory(DEBUG=False))

    with capture_logs() as logs:
        IdentityMapper(["custom_point"])

    assert passthrough_events(logs) == []


def test_redact_secrets():
    event = {
        "event": "oauth_token_exchanged",
        "access_token": "ya29.secret",
        "code": "4/0Ab",
        "state": "abc",
        "client_secret": "shh",
        "expires_at": "2030-01-01",
    }

    redacted = redact_secrets(None, "info", event)

    assert redacted["access_token"] == REDACTED
    assert redacted["code"] == REDACTED
    assert redacted["state"] == REDACTED
    assert redacted["client_secret"] == REDACTED
    assert redacted["expires_at"] == "2030-01-01"
    assert redacted["event"] == "oauth_token_exchanged"


def test_redaction_is_wired_into_output(restore_logging, capsys):
    configure_logging(False)

    structlog.get_logger().info("leaky_event", access_token="ya29.secret")

    out = capsys.readouterr().out
    assert "leaky_event" in out
    assert "ya29.secret" not in out
