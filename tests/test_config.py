"""Tests for environment-driven settings."""

import pytest

from rulebridge.config import Settings, get_settings


@pytest.fixture(autouse=True)
def clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_defaults(monkeypatch):
    for name in ("RUN_DEFAULT_VALIDATION", "AUTO_REJECT_INVALID_MODELS", "INVALID_MODEL_STATUS_CODE", "DEBUG"):
        monkeypatch.delenv(f"RULEBRIDGE_{name}", raising=False)

    settings = Settings(_env_file=None)

    assert settings.RUN_DEFAULT_VALIDATION is True
    assert settings.AUTO_REJECT_INVALID_MODELS is True
    assert settings.INVALID_MODEL_STATUS_CODE == 422
    assert settings.DEBUG is False


def test_environment_prefix(monkeypatch):
    monkeypatch.setenv("RULEBRIDGE_RUN_DEFAULT_VALIDATION", "false")
    monkeypatch.setenv("RULEBRIDGE_INVALID_MODEL_STATUS_CODE", "400")

    settings = get_settings()

    assert settings.RUN_DEFAULT_VALIDATION is False
    assert settings.INVALID_MODEL_STATUS_CODE == 400


def test_unprefixed_variables_ignored(monkeypatch):
    monkeypatch.setenv("RUN_DEFAULT_VALIDATION", "false")
    assert Settings(_env_file=None).RUN_DEFAULT_VALIDATION is True


def test_settings_cached():
    assert get_settings() is get_settings()
