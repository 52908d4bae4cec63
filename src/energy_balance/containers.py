"""Dependency container wiring for the application."""

from dataclasses import dataclass

from supabase import create_client

from energy_balance.adapters.supabase_energy_repository import (
    SupabaseEnergyRepository,
)
from energy_balance.adapters.supabase_food_repository import (
    SupabaseFoodRepository,
    SupabaseMealRepository,
)
from energy_balance.adapters.supabase_profile_repository import (
    SupabaseProfileRepository,
)
from energy_balance.adapters.supabase_sleep_repository import SupabaseSleepRepository
from energy_balance.adapters.supabase_water_repository import SupabaseWaterRepository
from energy_balance.config import Settings
from energy_balance.services.changes import ChangeNotifier
from energy_balance.services.dashboard import DashboardService
from energy_balance.services.energy import EnergyService
from energy_balance.services.favorites import FavoritesService, InMemoryFavoriteStore
from energy_balance.services.logs import LogService
from energy_balance.services.profiles import ProfileService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    notifier: ChangeNotifier
    profile_service: ProfileService
    energy_service: EnergyService
    log_service: LogService
    favorites_service: FavoritesService
    dashboard_service: DashboardService


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    profile_repository = SupabaseProfileRepository(supabase_client)
    energy_repository = SupabaseEnergyRepository(supabase_client)
    food_repository = SupabaseFoodRepository(supabase_client)
    meal_repository = SupabaseMealRepository(supabase_client)
    water_repository = SupabaseWaterRepository(supabase_client)
    sleep_repository = SupabaseSleepRepository(supabase_client)
    notifier = ChangeNotifier()
    favorite_store = InMemoryFavoriteStore()
    profile_service = ProfileService(
        repository=profile_repository,
        notifier=notifier,
        favorites=favorite_store,
        dependents=[
            energy_repository,
            meal_repository,
            water_repository,
            sleep_repository,
        ],
        default_timezone=resolved_settings.default_timezone,
    )
    return AppContainer(
        settings=resolved_settings,
        notifier=notifier,
        profile_service=profile_service,
        energy_service=EnergyService(
            repository=energy_repository,
            profile_service=profile_service,
            notifier=notifier,
        ),
        log_service=LogService(
            profile_service=profile_service,
            foods=food_repository,
            meals=meal_repository,
            water=water_repository,
            sleep=sleep_repository,
            notifier=notifier,
        ),
        favorites_service=FavoritesService(store=favorite_store, notifier=notifier),
        dashboard_service=DashboardService(
            profile_service=profile_service,
            energy_records=energy_repository,
            meals=meal_repository,
            water=water_repository,
            sleep=sleep_repository,
            favorites=favorite_store,
            notifier=notifier,
            window_days=resolved_settings.trend_window_days,
            default_target_calories=resolved_settings.default_target_calories,
        ),
    )
