"""Write operations for meal, water and sleep logs."""

import asyncio
import logging
import weakref
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Protocol
from uuid import UUID, uuid4

from energy_balance.domain.days import day_key
from energy_balance.domain.errors import NotFoundError, ProfileValidationError
from energy_balance.domain.logs import (
    FoodItem,
    MealEntry,
    MealType,
    SleepRecord,
    WaterIntake,
)
from energy_balance.domain.profiles import Profile
from energy_balance.services.aggregation import (
    add_water,
    remove_water,
    sleep_hours,
    validate_sleep_quality,
)
from energy_balance.services.changes import ChangeNotifier, Topic
from energy_balance.services.profiles import ProfileService, profile_zone

_logger = logging.getLogger(__name__)

DEFAULT_SLEEP_QUALITY = 3


class FoodRepository(Protocol):
    """Persistence interface for food items."""

    def create_food(self, food: FoodItem) -> None:
        """Insert a food item."""

    def get_food(self, food_id: UUID) -> FoodItem | None:
        """Return a food item by id."""


class MealRepository(Protocol):
    """Persistence interface for meal entries."""

    def create_meal(self, entry: MealEntry) -> None:
        """Insert a meal entry."""

    def get_meal(self, meal_id: UUID) -> MealEntry | None:
        """Return a meal entry by id."""

    def delete_meal(self, meal_id: UUID) -> None:
        """Delete a meal entry."""

    def list_meals(
        self, profile_id: UUID, start: datetime, end: datetime
    ) -> list[MealEntry]:
        """Return meals whose day key is within [start, end], by log time."""

    def delete_for_profile(self, profile_id: UUID) -> None:
        """Delete every meal for a profile."""


class WaterRepository(Protocol):
    """Persistence interface for daily water totals."""

    def get_water(self, profile_id: UUID, day: datetime) -> WaterIntake | None:
        """Return the water record for a day."""

    def save_water(self, record: WaterIntake) -> None:
        """Insert or replace the water record for its day."""

    def delete_water(self, profile_id: UUID, day: datetime) -> None:
        """Delete the water record for a day."""

    def list_water(
        self, profile_id: UUID, start: datetime, end: datetime
    ) -> list[WaterIntake]:
        """Return water records whose day key is within [start, end]."""

    def delete_for_profile(self, profile_id: UUID) -> None:
        """Delete every water record for a profile."""


class SleepRepository(Protocol):
    """Persistence interface for sleep records."""

    def get_sleep(self, profile_id: UUID, day: datetime) -> SleepRecord | None:
        """Return the sleep record for a day."""

    def save_sleep(self, record: SleepRecord) -> None:
        """Insert or replace the sleep record for its day."""

    def delete_sleep(self, profile_id: UUID, day: datetime) -> None:
        """Delete the sleep record for a day."""

    def list_sleep(
        self, profile_id: UUID, start: datetime, end: datetime
    ) -> list[SleepRecord]:
        """Return sleep records whose day key is within [start, end]."""

    def delete_for_profile(self, profile_id: UUID) -> None:
        """Delete every sleep record for a profile."""


def meal_type_for_hour(hour: int) -> MealType:
    """Guess the meal slot from the local hour."""
    if 5 <= hour <= 10:  # noqa: PLR2004
        return MealType.BREAKFAST
    if 11 <= hour <= 14:  # noqa: PLR2004
        return MealType.LUNCH
    if 15 <= hour <= 17:  # noqa: PLR2004
        return MealType.SNACK
    if 18 <= hour <= 22:  # noqa: PLR2004
        return MealType.DINNER
    return MealType.SNACK


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class LogService:
    """Service that stamps, validates and persists log entries."""

    profile_service: ProfileService
    foods: FoodRepository
    meals: MealRepository
    water: WaterRepository
    sleep: SleepRepository
    notifier: ChangeNotifier
    clock: Callable[[], datetime] = _utcnow
    _water_locks: weakref.WeakValueDictionary[UUID, asyncio.Lock] = field(
        default_factory=weakref.WeakValueDictionary, repr=False
    )

    async def create_food(  # noqa: PLR0913
        self,
        name: str,
        calories: float,
        protein_g: float,
        carbs_g: float,
        fat_g: float,
        serving_size: str = "1",
        serving_unit: str = "serving",
    ) -> FoodItem:
        """Create a custom food item."""
        for field_name, value in (
            ("calories", calories),
            ("protein_g", protein_g),
            ("carbs_g", carbs_g),
            ("fat_g", fat_g),
        ):
            if value < 0:
                raise ProfileValidationError(field_name, "Value cannot be negative.")
        food = FoodItem(
            id=uuid4(),
            name=name,
            calories=calories,
            protein_g=protein_g,
            carbs_g=carbs_g,
            fat_g=fat_g,
            serving_size=serving_size,
            serving_unit=serving_unit,
            is_custom=True,
        )
        await asyncio.to_thread(self.foods.create_food, food)
        return food

    async def log_meal(  # noqa: PLR0913
        self,
        profile_id: UUID,
        food_item_id: UUID,
        quantity: float,
        meal_type: MealType | None = None,
        source: str = "manual",
        at: datetime | None = None,
    ) -> MealEntry:
        """Log a quantity of a food, scaling its per-serving macros."""
        if quantity <= 0:
            raise ProfileValidationError(
                "quantity", "Quantity must be greater than zero."
            )
        profile = await self.profile_service.get_profile(profile_id)
        food = await asyncio.to_thread(self.foods.get_food, food_item_id)
        if food is None:
            raise NotFoundError("food", food_item_id)
        moment = at or self.clock()
        tz = profile_zone(profile)
        entry = MealEntry(
            id=uuid4(),
            profile_id=profile.id,
            food_item_id=food.id,
            food_name=food.name,
            day_key=day_key(moment, tz),
            logged_at=moment,
            meal_type=meal_type or meal_type_for_hour(moment.astimezone(tz).hour),
            quantity=quantity,
            calories=food.calories * quantity,
            protein_g=food.protein_g * quantity,
            carbs_g=food.carbs_g * quantity,
            fat_g=food.fat_g * quantity,
            source=source,
        )
        await asyncio.to_thread(self.meals.create_meal, entry)
        self.notifier.publish(profile.id, Topic.MEALS)
        _logger.info(
            "Logged meal: %s %.0f kcal",
            entry.food_name,
            entry.calories,
            extra={"profile_id": str(profile.id)},
        )
        return entry

    async def log_favorite_food(
        self, profile_id: UUID, food_item_id: UUID, at: datetime | None = None
    ) -> MealEntry:
        """Log one serving of a favorite food."""
        return await self.log_meal(
            profile_id, food_item_id, quantity=1.0, source="favorite", at=at
        )

    async def delete_meal(self, profile_id: UUID, meal_id: UUID) -> None:
        """Delete one of a profile's meal entries."""
        entry = await asyncio.to_thread(self.meals.get_meal, meal_id)
        if entry is None or entry.profile_id != profile_id:
            raise NotFoundError("meal", meal_id)
        await asyncio.to_thread(self.meals.delete_meal, meal_id)
        self.notifier.publish(profile_id, Topic.MEALS)

    async def add_water(
        self, profile_id: UUID, ml: int, at: datetime | None = None
    ) -> WaterIntake:
        """Add one glass of ``ml`` to the day's total."""
        profile = await self.profile_service.get_profile(profile_id)
        moment = at or self.clock()
        key = day_key(moment, profile_zone(profile))
        async with self._water_lock(profile.id):
            existing = await asyncio.to_thread(self.water.get_water, profile.id, key)
            record = add_water(existing, ml, profile.id, key, moment)
            await asyncio.to_thread(self.water.save_water, record)
        self.notifier.publish(profile.id, Topic.WATER)
        return record

    async def remove_water(
        self, profile_id: UUID, ml: int, at: datetime | None = None
    ) -> WaterIntake | None:
        """Remove one glass of ``ml``; the record is deleted once empty."""
        profile = await self.profile_service.get_profile(profile_id)
        moment = at or self.clock()
        key = day_key(moment, profile_zone(profile))
        async with self._water_lock(profile.id):
            existing = await asyncio.to_thread(self.water.get_water, profile.id, key)
            if existing is None:
                return None
            record = remove_water(existing, ml, moment)
            if record is None:
                await asyncio.to_thread(self.water.delete_water, profile.id, key)
            else:
                await asyncio.to_thread(self.water.save_water, record)
        self.notifier.publish(profile.id, Topic.WATER)
        return record

    async def reset_water(self, profile_id: UUID, at: datetime | None = None) -> None:
        """Delete the day's water record."""
        profile = await self.profile_service.get_profile(profile_id)
        key = day_key(at or self.clock(), profile_zone(profile))
        async with self._water_lock(profile.id):
            await asyncio.to_thread(self.water.delete_water, profile.id, key)
        self.notifier.publish(profile.id, Topic.WATER)

    async def log_sleep(  # noqa: PLR0913
        self,
        profile_id: UUID,
        bedtime: datetime,
        wake_time: datetime,
        quality: int,
        notes: str | None = None,
        at: datetime | None = None,
    ) -> SleepRecord:
        """Record the day's sleep, replacing any existing record."""
        validate_sleep_quality(quality)
        profile = await self.profile_service.get_profile(profile_id)
        key = self._day(profile, at)
        existing = await asyncio.to_thread(self.sleep.get_sleep, profile.id, key)
        record = SleepRecord(
            id=existing.id if existing else uuid4(),
            profile_id=profile.id,
            day_key=key,
            hours=sleep_hours(bedtime, wake_time),
            bedtime=bedtime,
            wake_time=wake_time,
            quality=quality,
            notes=notes,
            created_at=self.clock(),
        )
        await asyncio.to_thread(self.sleep.save_sleep, record)
        self.notifier.publish(profile.id, Topic.SLEEP)
        return record

    async def update_sleep(  # noqa: PLR0913
        self,
        profile_id: UUID,
        bedtime: datetime | None = None,
        wake_time: datetime | None = None,
        quality: int | None = None,
        notes: str | None = None,
        at: datetime | None = None,
    ) -> SleepRecord | None:
        """Partially update the day's sleep record.

        Hours are recomputed only when both times are given. Without an
        existing record one is created if both times are present.
        """
        if quality is not None:
            validate_sleep_quality(quality)
        profile = await self.profile_service.get_profile(profile_id)
        key = self._day(profile, at)
        existing = await asyncio.to_thread(self.sleep.get_sleep, profile.id, key)
        if existing is None:
            if bedtime is None or wake_time is None:
                return None
            return await self.log_sleep(
                profile.id,
                bedtime,
                wake_time,
                DEFAULT_SLEEP_QUALITY if quality is None else quality,
                notes,
                at=at,
            )
        hours = existing.hours
        if bedtime is not None and wake_time is not None:
            hours = sleep_hours(bedtime, wake_time)
        record = SleepRecord(
            id=existing.id,
            profile_id=existing.profile_id,
            day_key=existing.day_key,
            hours=hours,
            bedtime=bedtime or existing.bedtime,
            wake_time=wake_time or existing.wake_time,
            quality=existing.quality if quality is None else quality,
            notes=notes if notes is not None else existing.notes,
            created_at=existing.created_at,
        )
        await asyncio.to_thread(self.sleep.save_sleep, record)
        self.notifier.publish(profile.id, Topic.SLEEP)
        return record

    async def delete_sleep(self, profile_id: UUID, at: datetime | None = None) -> None:
        """Delete the day's sleep record."""
        profile = await self.profile_service.get_profile(profile_id)
        key = self._day(profile, at)
        await asyncio.to_thread(self.sleep.delete_sleep, profile.id, key)
        self.notifier.publish(profile.id, Topic.SLEEP)

    def _day(self, profile: Profile, at: datetime | None) -> datetime:
        return day_key(at or self.clock(), profile_zone(profile))

    def _water_lock(self, profile_id: UUID) -> asyncio.Lock:
        """Return the profile's water lock; it lives while someone holds it."""
        lock = self._water_locks.get(profile_id)
        if lock is None:
            lock = asyncio.Lock()
            self._water_locks[profile_id] = lock
        return lock
