"""Tests for container wiring."""

from energy_balance.adapters.supabase_profile_repository import (
    SupabaseProfileRepository,
)
from energy_balance.containers import build_container


def test_build_container_creates_services(settings) -> None:
    container = build_container(settings)

    assert isinstance(
        container.profile_service.repository, SupabaseProfileRepository
    )
    assert container.dashboard_service.window_days == settings.trend_window_days
    assert container.dashboard_service.notifier is container.notifier
    assert container.log_service.profile_service is container.profile_service
