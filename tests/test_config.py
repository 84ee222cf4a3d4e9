import pytest
from pydantic import ValidationError

from app.core.config import validate_settings
from conftest import make_settings


def test_defaults_match_reference_policy():
    config = make_settings()

    assert config.PORT == 3000
    assert config.COOLDOWN_SECONDS == 10
    assert config.COOLDOWN_RETENTION_SECONDS == 3600
    assert config.COOLDOWN_SWEEP_INTERVAL_SECONDS == 600
    assert config.RATE_LIMIT_WINDOW_SECONDS == 900
    assert config.MAX_MESSAGE_LENGTH == 160
    assert config.MAX_SENDER_LENGTH == 11


def test_production_requires_twilio_credentials():
    config = make_settings(ENVIRONMENT="production", TWILIO_ACCOUNT_SID=None, TWILIO_AUTH_TOKEN=None)

    with pytest.raises(ValueError, match="TWILIO_ACCOUNT_SID"):
        validate_settings(config)


def test_development_runs_without_credentials():
    assert validate_settings(make_settings(TWILIO_ACCOUNT_SID=None)) is True


def test_retention_must_exceed_cooldown():
    with pytest.raises(ValidationError):
        make_settings(COOLDOWN_SECONDS=60, COOLDOWN_RETENTION_SECONDS=30)


def test_twilio_configured_flag():
    assert make_settings(TWILIO_ACCOUNT_SID="AC123", TWILIO_AUTH_TOKEN="secret").twilio_configured
    assert not make_settings(TWILIO_ACCOUNT_SID="your_twilio_sid", TWILIO_AUTH_TOKEN="secret").twilio_configured
