"""Derived, non-persisted view models."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from uuid import UUID

from energy_balance.domain.energy import EnergyRecord
from energy_balance.domain.profiles import Profile


@dataclass(frozen=True)
class DailyAggregate:
    """Summed metrics for a single day."""

    day_key: datetime
    label: str
    calories: float = 0.0
    protein_g: float = 0.0
    carbs_g: float = 0.0
    fat_g: float = 0.0
    meal_count: int = 0
    water_ml: int = 0
    water_glasses: int = 0
    sleep_hours: float = 0.0
    sleep_quality: int = 0
    has_sleep: bool = False


@dataclass(frozen=True)
class CalorieProgress:
    """Consumption against a calorie target."""

    consumed: float
    target: float
    remaining: float
    progress_ratio: float
    deficit: float


@dataclass(frozen=True)
class MacroProgress:
    """Consumed macros against the active record's targets, if any."""

    protein_g: float
    carbs_g: float
    fat_g: float
    protein_target_g: float | None
    carbs_target_g: float | None
    fat_target_g: float | None


@dataclass(frozen=True)
class TrendWindow:
    """Gap-free, oldest-first sequence of daily aggregates."""

    window_size: int
    days: tuple[DailyAggregate, ...]
    stale_sources: frozenset[str] = frozenset()

    @property
    def is_stale(self) -> bool:
        """True when a source failed to load for this window."""
        return bool(self.stale_sources)


class Period(StrEnum):
    """Trailing window used for progress summaries."""

    WEEK = "week"
    MONTH = "month"
    YEAR = "year"

    @property
    def days(self) -> int:
        """Number of days in the period."""
        return {"week": 7, "month": 30, "year": 365}[self.value]


@dataclass(frozen=True)
class PeriodSummary:
    """Averages and streak over a trailing period."""

    period_days: int
    avg_calories: float
    avg_protein_g: float
    avg_carbs_g: float
    avg_fat_g: float
    avg_water_ml: float
    avg_sleep_hours: float
    calories: CalorieProgress
    streak_days: int
    stale_sources: frozenset[str] = frozenset()

    @property
    def is_stale(self) -> bool:
        """True when a source failed to load for this summary."""
        return bool(self.stale_sources)


@dataclass(frozen=True)
class MealView:
    """A meal entry projected for display with its favorite flag."""

    id: UUID
    food_name: str
    meal_type: str
    logged_at: datetime
    calories: float
    protein_g: float
    carbs_g: float
    fat_g: float
    source: str
    is_favorite: bool


@dataclass(frozen=True)
class FavoriteFood:
    """A favorited meal, distinct by food name."""

    entry_id: UUID
    food_item_id: UUID
    name: str
    calories: float
    protein_g: float
    carbs_g: float
    fat_g: float


@dataclass(frozen=True)
class DashboardState:
    """One atomic snapshot of every derived view for a profile."""

    profile: Profile
    active_record: EnergyRecord | None
    today: DailyAggregate
    calories: CalorieProgress
    macros: MacroProgress
    today_meals: tuple[MealView, ...]
    favorite_foods: tuple[FavoriteFood, ...]
    trend: TrendWindow
    stale_sources: frozenset[str]
    version: int
    computed_at: datetime

    @property
    def is_stale(self) -> bool:
        """True when any source failed to refresh for this snapshot."""
        return bool(self.stale_sources)
