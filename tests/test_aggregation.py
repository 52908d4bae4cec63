"""Tests for single-day aggregation."""

from datetime import UTC, date, datetime, timedelta
from uuid import uuid4

import pytest

from energy_balance.domain.days import day_key_for_date, shift_days
from energy_balance.domain.errors import InconsistentStateError, ProfileValidationError
from energy_balance.domain.logs import MealEntry, MealType, SleepRecord, WaterIntake
from energy_balance.services.aggregation import (
    add_water,
    aggregate_day,
    calorie_progress,
    macro_progress,
    remove_water,
    sleep_hours,
    validate_sleep_quality,
)
from tests.conftest import NOW

TODAY = day_key_for_date(date(2026, 10, 17), UTC)
PROFILE_ID = uuid4()


def _meal(
    calories: float, day: datetime = TODAY, protein_g: float = 10.0
) -> MealEntry:
    return MealEntry(
        id=uuid4(),
        profile_id=PROFILE_ID,
        food_item_id=uuid4(),
        food_name="Oats",
        day_key=day,
        logged_at=NOW,
        meal_type=MealType.BREAKFAST,
        quantity=1.0,
        calories=calories,
        protein_g=protein_g,
        carbs_g=20.0,
        fat_g=5.0,
    )


def test_aggregate_day_sums_meals_water_and_sleep() -> None:
    water = WaterIntake(uuid4(), PROFILE_ID, TODAY, 750, 3, NOW)
    sleep = SleepRecord(
        uuid4(), PROFILE_ID, TODAY, 7.5, NOW - timedelta(hours=8), NOW, 3, None, NOW
    )

    day = aggregate_day(TODAY, "Today", [_meal(300), _meal(450)], water, sleep)

    assert day.calories == 750
    assert day.protein_g == 20
    assert day.meal_count == 2
    assert day.water_ml == 750
    assert day.water_glasses == 3
    assert day.sleep_hours == 7.5
    assert day.has_sleep


def test_aggregate_empty_day_is_zero() -> None:
    day = aggregate_day(TODAY, "Today")

    assert day.calories == 0
    assert day.meal_count == 0
    assert day.water_ml == 0
    assert not day.has_sleep


def test_aggregate_day_rejects_entries_from_other_days() -> None:
    with pytest.raises(InconsistentStateError):
        aggregate_day(TODAY, "Today", [_meal(100, day=shift_days(TODAY, -1, UTC))])


@pytest.mark.parametrize(
    ("consumed", "target"),
    [(0, 2000), (500, 2000), (2000, 2000), (3500, 2000), (100, 0), (0, 0)],
)
def test_calorie_progress_bounds(consumed: float, target: float) -> None:
    progress = calorie_progress(consumed, target)

    assert progress.remaining >= 0
    assert 0 <= progress.progress_ratio <= 1
    if target == 0:
        assert progress.progress_ratio == 0


def test_calorie_progress_keeps_signed_deficit() -> None:
    progress = calorie_progress(2500, 2000)

    assert progress.remaining == 0
    assert progress.progress_ratio == 1
    assert progress.deficit == -500


def test_macro_progress_without_record_has_no_targets() -> None:
    day = aggregate_day(TODAY, "Today", [_meal(300)])

    macros = macro_progress(day, None)

    assert macros.protein_g == 10
    assert macros.protein_target_g is None


def test_water_add_and_remove() -> None:
    first = add_water(None, 250, PROFILE_ID, TODAY, NOW)
    second = add_water(first, 150, PROFILE_ID, TODAY, NOW)

    assert (second.total_ml, second.glasses) == (400, 2)
    assert second.id == first.id

    after_remove = remove_water(second, 250, NOW)
    assert after_remove is not None
    assert (after_remove.total_ml, after_remove.glasses) == (150, 1)
    assert remove_water(after_remove, 250, NOW) is None


def test_water_amount_must_be_positive() -> None:
    with pytest.raises(ProfileValidationError):
        add_water(None, 0, PROFILE_ID, TODAY, NOW)


def test_sleep_hours_are_clamped() -> None:
    assert sleep_hours(NOW, NOW + timedelta(hours=7, minutes=30)) == 7.5
    assert sleep_hours(NOW, NOW - timedelta(hours=1)) == 0
    assert sleep_hours(NOW, NOW + timedelta(hours=30)) == 24


def test_sleep_quality_range() -> None:
    assert validate_sleep_quality(0) == 0
    assert validate_sleep_quality(4) == 4
    with pytest.raises(ProfileValidationError):
        validate_sleep_quality(5)
