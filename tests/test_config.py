"""Tests for settings loading."""

import pytest
from pydantic import ValidationError

from interview_studio.config.settings import Settings


def test_placeholder_secret_rejected_in_production(monkeypatch):
    monkeypatch.delenv("SECRET_KEY", raising=False)
    monkeypatch.setenv("ENVIRONMENT", "production")

    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_placeholder_secret_allowed_in_development(monkeypatch):
    monkeypatch.delenv("SECRET_KEY", raising=False)
    monkeypatch.setenv("ENVIRONMENT", "development")

    assert Settings(_env_file=None).SECRET_KEY == "change-me-in-production"


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("SES_ENABLED", "true")
    monkeypatch.setenv("CORS_ORIGINS", '["https://studio.acme.com"]')

    config = Settings(_env_file=None)
    assert config.SES_ENABLED is True
    assert config.CORS_ORIGINS == ["https://studio.acme.com"]
