"""Domain models for date-stamped log entries."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from uuid import UUID


class MealType(StrEnum):
    """Meal slot within a day."""

    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    SNACK = "snack"


@dataclass(frozen=True)
class FoodItem:
    """Food with per-serving nutrition values."""

    id: UUID
    name: str
    calories: float
    protein_g: float
    carbs_g: float
    fat_g: float
    serving_size: str = "1"
    serving_unit: str = "serving"
    is_custom: bool = False


@dataclass(frozen=True)
class MealEntry:
    """A food logged for a day with macros for the logged quantity."""

    id: UUID
    profile_id: UUID
    food_item_id: UUID
    food_name: str
    day_key: datetime
    logged_at: datetime
    meal_type: MealType
    quantity: float
    calories: float
    protein_g: float
    carbs_g: float
    fat_g: float
    source: str = "manual"


@dataclass(frozen=True)
class WaterIntake:
    """Running water total for one profile and day."""

    id: UUID
    profile_id: UUID
    day_key: datetime
    total_ml: int
    glasses: int
    last_updated: datetime


@dataclass(frozen=True)
class SleepRecord:
    """The single sleep record for one profile and day."""

    id: UUID
    profile_id: UUID
    day_key: datetime
    hours: float
    bedtime: datetime
    wake_time: datetime
    quality: int
    notes: str | None
    created_at: datetime
