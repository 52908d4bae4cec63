"""Pydantic request models for the HTTP API."""

from datetime import date
from uuid import UUID

from pydantic import AwareDatetime, BaseModel, Field

from energy_balance.domain.energy import Formula, ProfileInputs
from energy_balance.domain.logs import MealType
from energy_balance.domain.profiles import ActivityLevel, Goal, Sex
from energy_balance.domain.units import UnitSystem


class ProfileCreate(BaseModel):
    """Payload for creating a profile."""

    name: str = Field(min_length=1)
    birth_date: date
    sex: Sex
    height_cm: float
    weight_kg: float
    activity_level: ActivityLevel = ActivityLevel.MODERATE
    goal: Goal = Goal.MAINTAIN
    timezone: str | None = None
    unit_system: UnitSystem = UnitSystem.METRIC
    make_current: bool = True


class ProfileUpdate(BaseModel):
    """Partial profile update; omitted fields are left unchanged."""

    name: str | None = Field(default=None, min_length=1)
    birth_date: date | None = None
    sex: Sex | None = None
    height_cm: float | None = None
    weight_kg: float | None = None
    activity_level: ActivityLevel | None = None
    goal: Goal | None = None
    timezone: str | None = None
    unit_system: UnitSystem | None = None


class EnergyInputs(BaseModel):
    """Raw body inputs for an energy calculation.

    Height and weight are read in the given unit system.
    """

    age: int | None = None
    sex: Sex
    height: float | None = None
    weight: float | None = None
    activity_level: ActivityLevel = ActivityLevel.MODERATE
    goal: Goal = Goal.MAINTAIN
    formula: Formula = Formula.MIFFLIN_ST_JEOR
    unit_system: UnitSystem = UnitSystem.METRIC

    def to_domain(self) -> ProfileInputs:
        """Convert to the domain input type."""
        return ProfileInputs(
            age=self.age,
            sex=self.sex,
            height=self.height,
            weight=self.weight,
            activity_level=self.activity_level,
            goal=self.goal,
            formula=self.formula,
            unit_system=self.unit_system,
        )


class RecalculateRequest(EnergyInputs):
    """Energy inputs plus the profile the new record belongs to."""

    profile_id: UUID | None = None


class FoodCreate(BaseModel):
    """Payload for a custom food item with per-serving values."""

    name: str = Field(min_length=1)
    calories: float
    protein_g: float = 0.0
    carbs_g: float = 0.0
    fat_g: float = 0.0
    serving_size: str = "1"
    serving_unit: str = "serving"


class MealCreate(BaseModel):
    """Payload for logging a meal."""

    food_item_id: UUID
    quantity: float = 1.0
    meal_type: MealType | None = None
    source: str = "manual"
    logged_at: AwareDatetime | None = None


class WaterChange(BaseModel):
    """Water amount for one add or remove event."""

    ml: int | None = None


class SleepLog(BaseModel):
    """Payload for recording a night of sleep."""

    bedtime: AwareDatetime
    wake_time: AwareDatetime
    quality: int = 3
    notes: str | None = None


class SleepUpdate(BaseModel):
    """Partial sleep update."""

    bedtime: AwareDatetime | None = None
    wake_time: AwareDatetime | None = None
    quality: int | None = None
    notes: str | None = None
