"""
Unit Tests for Configuration
============================

Tests for fresco_proxy/config.py
"""

import pytest
from pydantic import ValidationError

from fresco_proxy.config import Settings, validate_configuration


def make_settings(**overrides):
    values = {
        "_env_file": None,
        "API_URL": "https://api.fresco.test",
        "API_CLIENT_ID": "test-client",
        "API_CLIENT_SECRET": "test-secret",
        "SESSION_SECRET": "test-session-secret-1234567890123456",
    }
    values.update(overrides)
    return Settings(**values)


def test_api_base_url_is_normalized():
    settings = make_settings(API_URL="https://api.fresco.test/", API_VERSION="/v2/")

    assert settings.api_base_url == "https://api.fresco.test/v2"


def test_defaults():
    settings = make_settings()

    assert settings.API_VERSION == "v2"
    assert settings.DEV is False
    assert settings.PROXY_PREFIX == "/api"
    assert settings.API_TOKEN_PATH == "/auth/token"
    assert settings.allowed_origins_list == []


def test_settings_are_read_from_environment(monkeypatch):
    monkeypatch.setenv("API_URL", "http://localhost:4040")
    monkeypatch.setenv("API_VERSION", "v1")
    monkeypatch.setenv("API_CLIENT_ID", "env-client")
    monkeypatch.setenv("API_CLIENT_SECRET", "env-secret")
    monkeypatch.setenv("SESSION_SECRET", "x" * 32)
    monkeypatch.setenv("DEV", "true")

    settings = Settings(_env_file=None)

    assert settings.api_base_url == "http://localhost:4040/v1"
    assert settings.DEV is True


def test_settings_are_frozen():
    settings = make_settings()

    with pytest.raises(ValidationError):
        settings.DEV = True


@pytest.mark.parametrize("overrides", [
    {"API_URL": "ftp://api.fresco.test"},
    {"SESSION_SECRET": "too-short"},
    {"LOG_LEVEL": "LOUD"},
])
def test_invalid_settings_are_rejected(overrides):
    with pytest.raises(ValidationError):
        make_settings(**overrides)


def test_allowed_origins_list():
    settings = make_settings(ALLOWED_ORIGINS="https://fresconews.com, http://localhost:3000,")

    assert settings.allowed_origins_list == ["https://fresconews.com", "http://localhost:3000"]


def test_validate_configuration_reports_dev_and_localhost():
    report = validate_configuration(make_settings(API_URL="http://localhost:4040", DEV=True))

    assert report["valid"] is True
    assert any("DEV" in warning for warning in report["warnings"])
    assert any("localhost" in warning for warning in report["warnings"])


def test_validate_configuration_rejects_identical_credentials():
    report = validate_configuration(make_settings(API_CLIENT_ID="same", API_CLIENT_SECRET="same"))

    assert report["valid"] is False
