"""Shared test fixtures."""

from dataclasses import dataclass, field, replace
from datetime import UTC, date, datetime, timedelta
from uuid import UUID

import pytest

from energy_balance.config import Settings
from energy_balance.containers import AppContainer
from energy_balance.domain.energy import EnergyRecord
from energy_balance.domain.logs import FoodItem, MealEntry, SleepRecord, WaterIntake
from energy_balance.domain.profiles import Profile, Sex
from energy_balance.services.changes import ChangeNotifier
from energy_balance.services.dashboard import DashboardService
from energy_balance.services.energy import EnergyRecordRepository, EnergyService
from energy_balance.services.favorites import FavoritesService, InMemoryFavoriteStore
from energy_balance.services.logs import (
    FoodRepository,
    LogService,
    MealRepository,
    SleepRepository,
    WaterRepository,
)
from energy_balance.services.profiles import ProfileRepository, ProfileService

NOW = datetime(2026, 10, 17, 12, 0, tzinfo=UTC)


@dataclass
class FixedClock:
    """Clock returning a settable instant."""

    now: datetime = NOW

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


@dataclass
class InMemoryProfileRepository(ProfileRepository):
    """In-memory profile repository for tests."""

    profiles: dict[UUID, Profile] = field(default_factory=dict)

    def create_profile(self, profile: Profile) -> None:
        self.profiles[profile.id] = profile

    def get_profile(self, profile_id: UUID) -> Profile | None:
        return self.profiles.get(profile_id)

    def list_profiles(self) -> list[Profile]:
        return list(self.profiles.values())

    def update_profile(self, profile: Profile) -> None:
        self.profiles[profile.id] = profile

    def delete_profile(self, profile_id: UUID) -> None:
        self.profiles.pop(profile_id, None)

    def set_current(self, profile_id: UUID | None) -> None:
        for key, profile in self.profiles.items():
            self.profiles[key] = replace(profile, is_current=key == profile_id)


@dataclass
class InMemoryEnergyRepository(EnergyRecordRepository):
    """In-memory energy record repository for tests."""

    records: list[EnergyRecord] = field(default_factory=list)
    fail_reads: bool = False
    fail_writes: bool = False

    def create_record(self, record: EnergyRecord) -> None:
        if self.fail_writes:
            raise RuntimeError("energy store unavailable")
        self.records.append(record)

    def list_records(self, profile_id: UUID) -> list[EnergyRecord]:
        if self.fail_reads:
            raise RuntimeError("energy store unavailable")
        return [record for record in self.records if record.profile_id == profile_id]

    def delete_for_profile(self, profile_id: UUID) -> None:
        self.records = [
            record for record in self.records if record.profile_id != profile_id
        ]


@dataclass
class InMemoryFoodRepository(FoodRepository):
    """In-memory food repository for tests."""

    foods: dict[UUID, FoodItem] = field(default_factory=dict)

    def create_food(self, food: FoodItem) -> None:
        self.foods[food.id] = food

    def get_food(self, food_id: UUID) -> FoodItem | None:
        return self.foods.get(food_id)


@dataclass
class InMemoryMealRepository(MealRepository):
    """In-memory meal repository for tests."""

    meals: dict[UUID, MealEntry] = field(default_factory=dict)
    fail_reads: bool = False

    def create_meal(self, entry: MealEntry) -> None:
        self.meals[entry.id] = entry

    def get_meal(self, meal_id: UUID) -> MealEntry | None:
        return self.meals.get(meal_id)

    def delete_meal(self, meal_id: UUID) -> None:
        self.meals.pop(meal_id, None)

    def list_meals(
        self, profile_id: UUID, start: datetime, end: datetime
    ) -> list[MealEntry]:
        if self.fail_reads:
            raise RuntimeError("meal store unavailable")
        return sorted(
            (
                meal
                for meal in self.meals.values()
                if meal.profile_id == profile_id and start <= meal.day_key <= end
            ),
            key=lambda meal: meal.logged_at,
        )

    def delete_for_profile(self, profile_id: UUID) -> None:
        self.meals = {
            key: meal
            for key, meal in self.meals.items()
            if meal.profile_id != profile_id
        }


@dataclass
class InMemoryWaterRepository(WaterRepository):
    """In-memory water repository for tests."""

    records: dict[tuple[UUID, datetime], WaterIntake] = field(default_factory=dict)
    fail_reads: bool = False

    def get_water(self, profile_id: UUID, day: datetime) -> WaterIntake | None:
        return self.records.get((profile_id, day))

    def save_water(self, record: WaterIntake) -> None:
        self.records[(record.profile_id, record.day_key)] = record

    def delete_water(self, profile_id: UUID, day: datetime) -> None:
        self.records.pop((profile_id, day), None)

    def list_water(
        self, profile_id: UUID, start: datetime, end: datetime
    ) -> list[WaterIntake]:
        if self.fail_reads:
            raise RuntimeError("water store unavailable")
        return [
            record
            for (owner, day), record in self.records.items()
            if owner == profile_id and start <= day <= end
        ]

    def delete_for_profile(self, profile_id: UUID) -> None:
        self.records = {
            key: record for key, record in self.records.items() if key[0] != profile_id
        }


@dataclass
class InMemorySleepRepository(SleepRepository):
    """In-memory sleep repository for tests."""

    records: dict[tuple[UUID, datetime], SleepRecord] = field(default_factory=dict)

    def get_sleep(self, profile_id: UUID, day: datetime) -> SleepRecord | None:
        return self.records.get((profile_id, day))

    def save_sleep(self, record: SleepRecord) -> None:
        self.records[(record.profile_id, record.day_key)] = record

    def delete_sleep(self, profile_id: UUID, day: datetime) -> None:
        self.records.pop((profile_id, day), None)

    def list_sleep(
        self, profile_id: UUID, start: datetime, end: datetime
    ) -> list[SleepRecord]:
        return [
            record
            for (owner, day), record in self.records.items()
            if owner == profile_id and start <= day <= end
        ]

    def delete_for_profile(self, profile_id: UUID) -> None:
        self.records = {
            key: record for key, record in self.records.items() if key[0] != profile_id
        }


@dataclass
class InMemoryStore:
    """Every in-memory repository used by a test container."""

    profiles: InMemoryProfileRepository = field(
        default_factory=InMemoryProfileRepository
    )
    energy: InMemoryEnergyRepository = field(default_factory=InMemoryEnergyRepository)
    foods: InMemoryFoodRepository = field(default_factory=InMemoryFoodRepository)
    meals: InMemoryMealRepository = field(default_factory=InMemoryMealRepository)
    water: InMemoryWaterRepository = field(default_factory=InMemoryWaterRepository)
    sleep: InMemorySleepRepository = field(default_factory=InMemorySleepRepository)
    favorites: InMemoryFavoriteStore = field(default_factory=InMemoryFavoriteStore)


def make_settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="service-key",
    )


def make_container(
    settings: Settings | None = None,
    clock: FixedClock | None = None,
    store: InMemoryStore | None = None,
) -> AppContainer:
    """Wire every service against in-memory repositories."""
    settings = settings or make_settings()
    clock = clock or FixedClock()
    store = store or InMemoryStore()
    notifier = ChangeNotifier()
    profile_service = ProfileService(
        repository=store.profiles,
        notifier=notifier,
        favorites=store.favorites,
        dependents=[store.energy, store.meals, store.water, store.sleep],
        default_timezone=settings.default_timezone,
        clock=clock,
    )
    return AppContainer(
        settings=settings,
        notifier=notifier,
        profile_service=profile_service,
        energy_service=EnergyService(
            repository=store.energy,
            profile_service=profile_service,
            notifier=notifier,
            clock=clock,
        ),
        log_service=LogService(
            profile_service=profile_service,
            foods=store.foods,
            meals=store.meals,
            water=store.water,
            sleep=store.sleep,
            notifier=notifier,
            clock=clock,
        ),
        favorites_service=FavoritesService(store=store.favorites, notifier=notifier),
        dashboard_service=DashboardService(
            profile_service=profile_service,
            energy_records=store.energy,
            meals=store.meals,
            water=store.water,
            sleep=store.sleep,
            favorites=store.favorites,
            notifier=notifier,
            window_days=settings.trend_window_days,
            default_target_calories=settings.default_target_calories,
            clock=clock,
        ),
    )


async def create_profile(
    container: AppContainer, name: str = "Alex", **overrides: object
) -> Profile:
    """Create a 30-year-old male profile unless overridden."""
    values: dict[str, object] = {
        "birth_date": date(1996, 1, 15),
        "sex": Sex.MALE,
        "height_cm": 180.0,
        "weight_kg": 80.0,
    }
    values.update(overrides)
    return await container.profile_service.create_profile(name=name, **values)


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def container(
    settings: Settings, clock: FixedClock, store: InMemoryStore
) -> AppContainer:
    return make_container(settings, clock, store)
