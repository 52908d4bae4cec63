"""Domain models for body profiles."""

from dataclasses import dataclass
from datetime import date, datetime
from enum import StrEnum
from uuid import UUID

from energy_balance.domain.units import UnitSystem


class Sex(StrEnum):
    """Biological sex used by the BMR formulas."""

    MALE = "male"
    FEMALE = "female"


class ActivityLevel(StrEnum):
    """Activity level driving the TDEE multiplier."""

    SEDENTARY = "sedentary"
    LIGHT = "light"
    MODERATE = "moderate"
    ACTIVE = "active"
    VERY_ACTIVE = "very_active"


class Goal(StrEnum):
    """Body weight goal."""

    LOSE = "lose"
    MAINTAIN = "maintain"
    GAIN = "gain"


@dataclass(frozen=True)
class Profile:
    """A person whose metrics are tracked."""

    id: UUID
    name: str
    birth_date: date
    sex: Sex
    height_cm: float
    weight_kg: float
    activity_level: ActivityLevel
    goal: Goal
    timezone: str
    unit_system: UnitSystem
    is_current: bool
    created_at: datetime
    updated_at: datetime


def age_on(birth_date: date, today: date) -> int:
    """Return whole years between ``birth_date`` and ``today``."""
    years = today.year - birth_date.year
    if (today.month, today.day) < (birth_date.month, birth_date.day):
        years -= 1
    return years


def birth_date_for_age(age: int, today: date) -> date:
    """Return a birth date that makes someone ``age`` years old today."""
    try:
        return today.replace(year=today.year - age)
    except ValueError:
        # Feb 29 in a non-leap target year.
        return today.replace(year=today.year - age, day=28)
