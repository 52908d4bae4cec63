"""Single-day aggregation of meal, water and sleep logs."""

from collections.abc import Iterable
from datetime import datetime, timedelta
from uuid import UUID, uuid4

from energy_balance.domain.aggregates import (
    CalorieProgress,
    DailyAggregate,
    MacroProgress,
)
from energy_balance.domain.energy import EnergyRecord
from energy_balance.domain.errors import InconsistentStateError, ProfileValidationError
from energy_balance.domain.logs import MealEntry, SleepRecord, WaterIntake

MAX_SLEEP = timedelta(hours=24)
MIN_SLEEP_QUALITY = 0
MAX_SLEEP_QUALITY = 4


def aggregate_day(
    day_key: datetime,
    label: str,
    meals: Iterable[MealEntry] = (),
    water: WaterIntake | None = None,
    sleep: SleepRecord | None = None,
) -> DailyAggregate:
    """Sum one day's logs into a DailyAggregate."""
    calories = protein_g = carbs_g = fat_g = 0.0
    meal_count = 0
    for meal in meals:
        _check_day(day_key, meal.day_key, "meal", meal.id)
        calories += meal.calories
        protein_g += meal.protein_g
        carbs_g += meal.carbs_g
        fat_g += meal.fat_g
        meal_count += 1
    if water is not None:
        _check_day(day_key, water.day_key, "water", water.id)
    if sleep is not None:
        _check_day(day_key, sleep.day_key, "sleep", sleep.id)
    return DailyAggregate(
        day_key=day_key,
        label=label,
        calories=calories,
        protein_g=protein_g,
        carbs_g=carbs_g,
        fat_g=fat_g,
        meal_count=meal_count,
        water_ml=water.total_ml if water else 0,
        water_glasses=water.glasses if water else 0,
        sleep_hours=sleep.hours if sleep else 0.0,
        sleep_quality=sleep.quality if sleep else 0,
        has_sleep=sleep is not None,
    )


def calorie_progress(consumed: float, target: float) -> CalorieProgress:
    """Remaining calories and progress, clamped for display."""
    ratio = min(max(consumed / target, 0.0), 1.0) if target > 0 else 0.0
    return CalorieProgress(
        consumed=consumed,
        target=target,
        remaining=max(0.0, target - consumed),
        progress_ratio=ratio,
        deficit=target - consumed,
    )


def macro_progress(day: DailyAggregate, record: EnergyRecord | None) -> MacroProgress:
    """Consumed macros with targets from the active record."""
    return MacroProgress(
        protein_g=day.protein_g,
        carbs_g=day.carbs_g,
        fat_g=day.fat_g,
        protein_target_g=record.protein_g if record else None,
        carbs_target_g=record.carbs_g if record else None,
        fat_target_g=record.fat_g if record else None,
    )


def add_water(
    existing: WaterIntake | None,
    ml: int,
    profile_id: UUID,
    day_key: datetime,
    now: datetime,
) -> WaterIntake:
    """Return the day's water record after one add event."""
    if ml <= 0:
        raise ProfileValidationError("ml", "Water amount must be greater than zero.")
    if existing is None:
        return WaterIntake(
            id=uuid4(),
            profile_id=profile_id,
            day_key=day_key,
            total_ml=ml,
            glasses=1,
            last_updated=now,
        )
    return WaterIntake(
        id=existing.id,
        profile_id=existing.profile_id,
        day_key=existing.day_key,
        total_ml=existing.total_ml + ml,
        glasses=existing.glasses + 1,
        last_updated=now,
    )


def remove_water(
    existing: WaterIntake, ml: int, now: datetime
) -> WaterIntake | None:
    """Return the record after one remove event, or None to delete it."""
    if ml <= 0:
        raise ProfileValidationError("ml", "Water amount must be greater than zero.")
    total_ml = max(existing.total_ml - ml, 0)
    glasses = max(existing.glasses - 1, 0)
    if total_ml == 0 and glasses == 0:
        return None
    return WaterIntake(
        id=existing.id,
        profile_id=existing.profile_id,
        day_key=existing.day_key,
        total_ml=total_ml,
        glasses=glasses,
        last_updated=now,
    )


def sleep_hours(bedtime: datetime, wake_time: datetime) -> float:
    """Hours between bed and wake time, clamped to [0, 24]."""
    duration = min(max(wake_time - bedtime, timedelta(0)), MAX_SLEEP)
    return duration.total_seconds() / 3600


def validate_sleep_quality(quality: int) -> int:
    """Return quality if it is a valid 0-4 ordinal score."""
    if not MIN_SLEEP_QUALITY <= quality <= MAX_SLEEP_QUALITY:
        raise ProfileValidationError(
            "quality",
            f"Quality must be between {MIN_SLEEP_QUALITY} and {MAX_SLEEP_QUALITY}.",
        )
    return quality


def _check_day(expected: datetime, actual: datetime, kind: str, entry_id: UUID) -> None:
    if actual != expected:
        raise InconsistentStateError(
            f"{kind} {entry_id} has day key {actual.isoformat()}, "
            f"expected {expected.isoformat()}"
        )
