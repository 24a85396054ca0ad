"""Tests for the startup settings checks."""
from __future__ import annotations

import pytest

from jobboard.core.config import settings, validate_settings


def test_testing_settings_are_accepted() -> None:
    validate_settings()


@pytest.mark.parametrize("environment", ["prod", "dev", ""])
def test_unknown_environment_is_refused(monkeypatch, environment) -> None:
    monkeypatch.setattr(settings, "ENVIRONMENT", environment)

    with pytest.raises(ValueError, match="Unknown ENVIRONMENT"):
        validate_settings()


def test_environment_name_ignores_case(monkeypatch) -> None:
    monkeypatch.setattr(settings, "ENVIRONMENT", "Staging")

    validate_settings()


def test_production_refuses_default_secret(monkeypatch) -> None:
    monkeypatch.setattr(settings, "ENVIRONMENT", "production")
    monkeypatch.setattr(settings, "DEBUG", False)
    monkeypatch.setattr(settings, "SECRET_KEY", "your-super-secret-key-change-this-in-production-please")

    with pytest.raises(ValueError, match="SECRET_KEY"):
        validate_settings()


def test_unsupported_database_is_refused(monkeypatch) -> None:
    monkeypatch.setattr(settings, "DATABASE_URL", "mysql+aiomysql://localhost/jobboard")

    with pytest.raises(ValueError, match="Unsupported DATABASE_URL"):
        validate_settings()
