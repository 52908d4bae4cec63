"""Tests for settings parsing."""

import pytest
from pydantic import ValidationError

from energy_balance.config import Settings, parse_timezone


def test_defaults(settings: Settings) -> None:
    assert settings.default_timezone == "UTC"
    assert settings.trend_window_days == 7
    assert settings.default_target_calories == 2000
    assert settings.water_glass_ml == 250
    assert settings.expose_error_details is False


def test_settings_read_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SUPABASE_URL", "https://env.supabase.co")
    monkeypatch.setenv("SUPABASE_SERVICE_KEY", "env-key")
    monkeypatch.setenv("DEFAULT_TIMEZONE", "Europe/Paris")
    monkeypatch.setenv("TREND_WINDOW_DAYS", "14")

    settings = Settings()

    assert settings.supabase_url == "https://env.supabase.co"
    assert settings.default_timezone == "Europe/Paris"
    assert settings.trend_window_days == 14


def test_invalid_settings_are_rejected() -> None:
    with pytest.raises(ValidationError):
        Settings(
            supabase_url="https://example.supabase.co",
            supabase_service_key="key",
            default_timezone="Atlantis/Capital",
        )
    with pytest.raises(ValidationError):
        Settings(
            supabase_url="https://example.supabase.co",
            supabase_service_key="key",
            trend_window_days=0,
        )


def test_parse_timezone() -> None:
    assert parse_timezone(None) == "UTC"
    assert parse_timezone("  ") == "UTC"
    assert parse_timezone(" Asia/Tokyo ") == "Asia/Tokyo"
    with pytest.raises(ValueError):
        parse_timezone("Not/AZone")
