"""Application configuration."""

import os
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    environment: str = _ENVIRONMENT
    default_timezone: str = "UTC"
    trend_window_days: int = 7
    default_target_calories: float = 2000.0
    water_glass_ml: int = 250
    expose_error_details: bool = False

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    @field_validator("default_timezone")
    @classmethod
    def _check_timezone(cls, value: str) -> str:
        return parse_timezone(value)

    @field_validator("trend_window_days", "water_glass_ml")
    @classmethod
    def _check_positive(cls, value: int) -> int:
        if value < 1:
            raise ValueError("must be at least 1")
        return value


def parse_timezone(raw: str | None) -> str:
    """Return a valid IANA timezone name, defaulting to UTC when blank."""
    if raw is None or not raw.strip():
        return "UTC"
    cleaned = raw.strip()
    try:
        ZoneInfo(cleaned)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"unknown timezone: {cleaned}") from exc
    return cleaned
