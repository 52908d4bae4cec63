"""Domain models for energy expenditure calculations."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from uuid import UUID

from energy_balance.domain.profiles import ActivityLevel, Goal, Sex
from energy_balance.domain.units import UnitSystem


class Formula(StrEnum):
    """BMR equation."""

    MIFFLIN_ST_JEOR = "mifflin"
    HARRIS_BENEDICT = "harris"


@dataclass(frozen=True)
class ProfileInputs:
    """Raw calculation inputs as entered by the user."""

    age: int | None
    sex: Sex
    height: float | None
    weight: float | None
    activity_level: ActivityLevel = ActivityLevel.MODERATE
    goal: Goal = Goal.MAINTAIN
    formula: Formula = Formula.MIFFLIN_ST_JEOR
    unit_system: UnitSystem = UnitSystem.METRIC


@dataclass(frozen=True)
class MacroTargets:
    """Daily macro gram targets."""

    protein_g: float
    carbs_g: float
    fat_g: float


@dataclass(frozen=True)
class EnergyCalculation:
    """Result of running the formula engine on validated inputs."""

    formula: Formula
    age: int
    height_cm: float
    weight_kg: float
    bmr: float
    activity_multiplier: float
    tdee: float
    target_calories: float
    macros: MacroTargets


@dataclass(frozen=True)
class EnergyRecord:
    """Immutable, persisted calculation result for a profile."""

    id: UUID
    profile_id: UUID
    created_at: datetime
    formula: Formula
    bmr: float
    tdee: float
    activity_multiplier: float
    target_calories: float
    protein_g: float
    carbs_g: float
    fat_g: float
