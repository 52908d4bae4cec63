"""Energy formula engine and calculation history."""

import asyncio
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol
from uuid import UUID, uuid4

from energy_balance.domain.energy import (
    EnergyCalculation,
    EnergyRecord,
    Formula,
    MacroTargets,
    ProfileInputs,
)
from energy_balance.domain.errors import ProfileValidationError
from energy_balance.domain.profiles import (
    ActivityLevel,
    Goal,
    Profile,
    Sex,
    birth_date_for_age,
)
from energy_balance.domain.units import height_to_cm, weight_to_kg
from energy_balance.services.changes import ChangeNotifier, Topic
from energy_balance.services.profiles import ProfileService

_logger = logging.getLogger(__name__)

ACTIVITY_MULTIPLIERS = {
    ActivityLevel.SEDENTARY: 1.2,
    ActivityLevel.LIGHT: 1.375,
    ActivityLevel.MODERATE: 1.55,
    ActivityLevel.ACTIVE: 1.725,
    ActivityLevel.VERY_ACTIVE: 1.9,
}

GOAL_ADJUSTMENTS = {
    Goal.LOSE: -500.0,
    Goal.MAINTAIN: 0.0,
    Goal.GAIN: 500.0,
}

PROTEIN_SHARE = 0.30
CARBS_SHARE = 0.40
FAT_SHARE = 0.30
KCAL_PER_G_PROTEIN = 4.0
KCAL_PER_G_CARBS = 4.0
KCAL_PER_G_FAT = 9.0

_GOAL_TEXT = {
    Goal.LOSE: "weight loss",
    Goal.MAINTAIN: "weight maintenance",
    Goal.GAIN: "muscle gain",
}


class EnergyRecordRepository(Protocol):
    """Persistence interface for energy records."""

    def create_record(self, record: EnergyRecord) -> None:
        """Insert an energy record."""

    def list_records(self, profile_id: UUID) -> list[EnergyRecord]:
        """Return every record for a profile in any order."""

    def delete_for_profile(self, profile_id: UUID) -> None:
        """Delete every record for a profile."""


def mifflin_st_jeor_bmr(
    age: int, sex: Sex, height_cm: float, weight_kg: float
) -> float:
    """BMR from the Mifflin-St Jeor equation."""
    offset = 5.0 if sex == Sex.MALE else -161.0
    return 10 * weight_kg + 6.25 * height_cm - 5 * age + offset


def harris_benedict_bmr(
    age: int, sex: Sex, height_cm: float, weight_kg: float
) -> float:
    """BMR from the revised Harris-Benedict equation."""
    if sex == Sex.MALE:
        return 13.397 * weight_kg + 4.799 * height_cm - 5.677 * age + 88.362
    return 9.247 * weight_kg + 3.098 * height_cm - 4.330 * age + 447.593


def calculate_bmr(
    formula: Formula, age: int, sex: Sex, height_cm: float, weight_kg: float
) -> float:
    """BMR using the chosen formula."""
    if formula == Formula.HARRIS_BENEDICT:
        return harris_benedict_bmr(age, sex, height_cm, weight_kg)
    return mifflin_st_jeor_bmr(age, sex, height_cm, weight_kg)


def activity_multiplier(level: ActivityLevel) -> float:
    """TDEE multiplier for an activity level."""
    return ACTIVITY_MULTIPLIERS[level]


def goal_adjusted_target(tdee: float, goal: Goal) -> float:
    """Daily calorie target for a goal."""
    return tdee + GOAL_ADJUSTMENTS[goal]


def macro_targets(target_calories: float) -> MacroTargets:
    """Split a calorie target 30/40/30 into protein, carb and fat grams."""
    return MacroTargets(
        protein_g=target_calories * PROTEIN_SHARE / KCAL_PER_G_PROTEIN,
        carbs_g=target_calories * CARBS_SHARE / KCAL_PER_G_CARBS,
        fat_g=target_calories * FAT_SHARE / KCAL_PER_G_FAT,
    )


def validate_inputs(inputs: ProfileInputs) -> tuple[int, float, float]:
    """Return (age, height_cm, weight_kg) or raise ProfileValidationError."""
    if inputs.age is None:
        raise ProfileValidationError("age", "Age is required.")
    if inputs.age <= 0:
        raise ProfileValidationError("age", "Age must be greater than zero.")
    if inputs.height is None:
        raise ProfileValidationError("height", "Height is required.")
    if inputs.height <= 0:
        raise ProfileValidationError("height", "Height must be greater than zero.")
    if inputs.weight is None:
        raise ProfileValidationError("weight", "Weight is required.")
    if inputs.weight <= 0:
        raise ProfileValidationError("weight", "Weight must be greater than zero.")
    return (
        inputs.age,
        height_to_cm(inputs.height, inputs.unit_system),
        weight_to_kg(inputs.weight, inputs.unit_system),
    )


def calculate_energy(inputs: ProfileInputs) -> EnergyCalculation:
    """Run the full formula chain on raw inputs."""
    age, height_cm, weight_kg = validate_inputs(inputs)
    bmr = calculate_bmr(inputs.formula, age, inputs.sex, height_cm, weight_kg)
    multiplier = activity_multiplier(inputs.activity_level)
    tdee = bmr * multiplier
    target = goal_adjusted_target(tdee, inputs.goal)
    return EnergyCalculation(
        formula=inputs.formula,
        age=age,
        height_cm=height_cm,
        weight_kg=weight_kg,
        bmr=bmr,
        activity_multiplier=multiplier,
        tdee=tdee,
        target_calories=target,
        macros=macro_targets(target),
    )


def select_active_record(records: Sequence[EnergyRecord]) -> EnergyRecord | None:
    """Return the record with the latest creation time.

    Ties go to the record listed last.
    """
    active: EnergyRecord | None = None
    for record in records:
        if active is None or record.created_at >= active.created_at:
            active = record
    return active


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class EnergyService:
    """Runs calculations and keeps the append-only record history."""

    repository: EnergyRecordRepository
    profile_service: ProfileService
    notifier: ChangeNotifier
    clock: Callable[[], datetime] = _utcnow

    def preview(self, inputs: ProfileInputs) -> EnergyCalculation:
        """Compute figures without persisting anything."""
        return calculate_energy(inputs)

    async def recalculate(
        self, inputs: ProfileInputs, profile_id: UUID | None = None
    ) -> EnergyRecord:
        """Compute, persist a new record and sync the profile's body data.

        Without a profile id the current profile is used, or a new one is
        created when none exists. The record is written before the profile,
        and PROFILE and ENERGY are published together once both are saved.
        """
        calculation = calculate_energy(inputs)
        profile = await self._resolve_profile(inputs, calculation, profile_id)
        record = EnergyRecord(
            id=uuid4(),
            profile_id=profile.id,
            created_at=self.clock(),
            formula=calculation.formula,
            bmr=calculation.bmr,
            tdee=calculation.tdee,
            activity_multiplier=calculation.activity_multiplier,
            target_calories=calculation.target_calories,
            protein_g=calculation.macros.protein_g,
            carbs_g=calculation.macros.carbs_g,
            fat_g=calculation.macros.fat_g,
        )
        await asyncio.to_thread(self.repository.create_record, record)
        await self.profile_service.update_profile(
            profile.id,
            notify=False,
            height_cm=calculation.height_cm,
            weight_kg=calculation.weight_kg,
            activity_level=inputs.activity_level,
            goal=inputs.goal,
        )
        self.notifier.publish(profile.id, Topic.PROFILE, Topic.ENERGY)
        _logger.info(
            "Saved energy record: bmr=%.0f tdee=%.0f target=%.0f",
            record.bmr,
            record.tdee,
            record.target_calories,
            extra={"profile_id": str(profile.id)},
        )
        return record

    async def active_record(self, profile_id: UUID) -> EnergyRecord | None:
        """Return the active record for a profile."""
        records = await asyncio.to_thread(self.repository.list_records, profile_id)
        return select_active_record(records)

    async def history(self, profile_id: UUID) -> list[EnergyRecord]:
        """Return every record for a profile, newest first.

        Ties keep the order of ``select_active_record``, so the head is the
        active record.
        """
        records = await asyncio.to_thread(self.repository.list_records, profile_id)
        ordered = sorted(records, key=lambda record: record.created_at)
        return list(reversed(ordered))

    async def _resolve_profile(
        self,
        inputs: ProfileInputs,
        calculation: EnergyCalculation,
        profile_id: UUID | None,
    ) -> Profile:
        if profile_id is not None:
            return await self.profile_service.get_profile(profile_id)
        current = await self.profile_service.current_profile()
        if current is not None:
            return current
        return await self.profile_service.create_profile(
            name="User",
            birth_date=birth_date_for_age(calculation.age, self.clock().date()),
            sex=inputs.sex,
            height_cm=calculation.height_cm,
            weight_kg=calculation.weight_kg,
            activity_level=inputs.activity_level,
            goal=inputs.goal,
            unit_system=inputs.unit_system,
        )


def advice_context(record: EnergyRecord, goal: Goal) -> dict[str, object]:
    """Plain numeric context handed to an external advice generator."""
    return {
        "bmr": round(record.bmr),
        "tdee": round(record.tdee),
        "target_calories": round(record.target_calories),
        "protein_g": round(record.protein_g),
        "carbs_g": round(record.carbs_g),
        "fat_g": round(record.fat_g),
        "goal": goal.value,
        "goal_text": _GOAL_TEXT[goal],
        "formula": record.formula.value,
    }
