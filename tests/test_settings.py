import pytest

from app.config import settings


@pytest.mark.parametrize(
    "value, expected",
    [("true", True), ("1", True), (" YES ", True), ("on", True), ("false", False), ("0", False), ("", False)],
)
def test_env_flag_values(monkeypatch, value, expected):
    monkeypatch.setenv("RELAY_TEST_FLAG", value)
    assert settings._env_flag("RELAY_TEST_FLAG", not expected) is expected


def test_env_flag_default(monkeypatch):
    monkeypatch.delenv("RELAY_TEST_FLAG", raising=False)
    assert settings._env_flag("RELAY_TEST_FLAG", True) is True
    assert settings._env_flag("RELAY_TEST_FLAG", False) is False


def test_missing_credentials(monkeypatch):
    monkeypatch.setattr(settings, "OPENAI_API_KEY", "sk-test")
    monkeypatch.setattr(settings, "TWILIO_ACCOUNT_SID", "AC123")
    monkeypatch.setattr(settings, "TWILIO_AUTH_TOKEN", None)
    monkeypatch.setattr(settings, "TWILIO_PHONE_NUMBER", "")

    assert settings.missing_credentials() == ["TWILIO_AUTH_TOKEN", "TWILIO_PHONE_NUMBER"]


def test_no_missing_credentials(monkeypatch):
    for name in ("OPENAI_API_KEY", "TWILIO_ACCOUNT_SID", "TWILIO_AUTH_TOKEN", "TWILIO_PHONE_NUMBER"):
        monkeypatch.setattr(settings, name, "configured")

    assert settings.missing_credentials() == []


def test_defaults_are_typed():
    assert isinstance(settings.PORT, int)
    assert isinstance(settings.SESSION_SETTLE_DELAY, float)
    assert isinstance(settings.ENABLE_APPOINTMENT_TOOL, bool)
    assert isinstance(settings.AI_SPEAKS_FIRST, bool)
