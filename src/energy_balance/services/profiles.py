"""Profile lifecycle: creation, selection, edits and cascading deletes."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import UTC, date, datetime
from typing import Protocol
from uuid import UUID, uuid4
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from energy_balance.domain.errors import NotFoundError, ProfileValidationError
from energy_balance.domain.profiles import ActivityLevel, Goal, Profile, Sex
from energy_balance.domain.units import UnitSystem
from energy_balance.services.changes import ChangeNotifier, Topic
from energy_balance.services.favorites import FavoriteStore

_logger = logging.getLogger(__name__)

_EDITABLE_FIELDS = {
    "name",
    "birth_date",
    "sex",
    "height_cm",
    "weight_kg",
    "activity_level",
    "goal",
    "timezone",
    "unit_system",
}


class ProfileRepository(Protocol):
    """Persistence interface for profiles."""

    def create_profile(self, profile: Profile) -> None:
        """Insert a profile row."""

    def get_profile(self, profile_id: UUID) -> Profile | None:
        """Return a profile by id, if present."""

    def list_profiles(self) -> list[Profile]:
        """Return every profile."""

    def update_profile(self, profile: Profile) -> None:
        """Overwrite a profile row."""

    def delete_profile(self, profile_id: UUID) -> None:
        """Delete a profile row."""

    def set_current(self, profile_id: UUID | None) -> None:
        """Flag one profile as current and clear the flag on the others."""


class ProfileScopedRepository(Protocol):
    """Repository holding rows owned by a profile."""

    def delete_for_profile(self, profile_id: UUID) -> None:
        """Delete every row owned by the profile."""


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


def profile_zone(profile: Profile) -> ZoneInfo:
    """Return the profile's timezone."""
    return ZoneInfo(profile.timezone)


def validate_timezone(name: str) -> str:
    """Return ``name`` if it is a known IANA timezone."""
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ProfileValidationError(
            "timezone", f"Unknown timezone: {name!r}."
        ) from exc
    return name


def _validate_body(
    height_cm: float, weight_kg: float, birth_date: date, today: date
) -> None:
    if height_cm <= 0:
        raise ProfileValidationError("height", "Height must be greater than zero.")
    if weight_kg <= 0:
        raise ProfileValidationError("weight", "Weight must be greater than zero.")
    if birth_date > today:
        raise ProfileValidationError("birth_date", "Birth date is in the future.")


@dataclass
class ProfileService:
    """Application service for profile lifecycle actions."""

    repository: ProfileRepository
    notifier: ChangeNotifier
    favorites: FavoriteStore
    dependents: list[ProfileScopedRepository] = field(default_factory=list)
    default_timezone: str = "UTC"
    clock: Callable[[], datetime] = _utcnow

    async def create_profile(  # noqa: PLR0913
        self,
        name: str,
        birth_date: date,
        sex: Sex,
        height_cm: float,
        weight_kg: float,
        activity_level: ActivityLevel = ActivityLevel.MODERATE,
        goal: Goal = Goal.MAINTAIN,
        timezone: str | None = None,
        unit_system: UnitSystem = UnitSystem.METRIC,
        make_current: bool = True,
    ) -> Profile:
        """Create a profile; it becomes current if asked or if none is."""
        now = self.clock()
        _validate_body(height_cm, weight_kg, birth_date, now.date())
        profile = Profile(
            id=uuid4(),
            name=name,
            birth_date=birth_date,
            sex=sex,
            height_cm=height_cm,
            weight_kg=weight_kg,
            activity_level=activity_level,
            goal=goal,
            timezone=validate_timezone(timezone or self.default_timezone),
            unit_system=unit_system,
            is_current=False,
            created_at=now,
            updated_at=now,
        )
        await asyncio.to_thread(self.repository.create_profile, profile)
        if make_current or await self.current_profile() is None:
            await asyncio.to_thread(self.repository.set_current, profile.id)
            profile = replace(profile, is_current=True)
            self.notifier.publish(profile.id, Topic.PROFILE, Topic.SELECTION)
        else:
            self.notifier.publish(profile.id, Topic.PROFILE)
        _logger.info("Created profile", extra={"profile_id": str(profile.id)})
        return profile

    async def get_profile(self, profile_id: UUID) -> Profile:
        """Return a profile or raise NotFoundError."""
        profile = await asyncio.to_thread(self.repository.get_profile, profile_id)
        if profile is None:
            raise NotFoundError("profile", profile_id)
        return profile

    async def list_profiles(self) -> list[Profile]:
        """Return every profile, oldest first."""
        profiles = await asyncio.to_thread(self.repository.list_profiles)
        return sorted(profiles, key=lambda profile: profile.created_at)

    async def current_profile(self) -> Profile | None:
        """Return the current profile.

        Falls back to the most recently updated profile when none is flagged.
        """
        profiles = await asyncio.to_thread(self.repository.list_profiles)
        return _pick_current(profiles)

    async def switch_profile(self, profile_id: UUID) -> Profile:
        """Make a profile current."""
        profile = await self.get_profile(profile_id)
        await asyncio.to_thread(self.repository.set_current, profile.id)
        self.notifier.publish(profile.id, Topic.SELECTION)
        return replace(profile, is_current=True)

    async def update_profile(
        self, profile_id: UUID, *, notify: bool = True, **changes: object
    ) -> Profile:
        """Apply field changes to a profile.

        With ``notify`` off the caller publishes PROFILE itself.
        """
        unknown = set(changes) - _EDITABLE_FIELDS
        if unknown:
            raise ProfileValidationError(
                sorted(unknown)[0], "Field cannot be edited."
            )
        profile = await self.get_profile(profile_id)
        updated = replace(profile, **changes, updated_at=self.clock())
        _validate_body(
            updated.height_cm,
            updated.weight_kg,
            updated.birth_date,
            updated.updated_at.date(),
        )
        validate_timezone(updated.timezone)
        await asyncio.to_thread(self.repository.update_profile, updated)
        if notify:
            self.notifier.publish(updated.id, Topic.PROFILE)
        return updated

    async def delete_profile(self, profile_id: UUID) -> None:
        """Delete a profile together with every record it owns."""
        profile = await self.get_profile(profile_id)
        for dependent in self.dependents:
            await asyncio.to_thread(dependent.delete_for_profile, profile_id)
        self.favorites.clear(profile_id)
        await asyncio.to_thread(self.repository.delete_profile, profile_id)
        self.notifier.publish(
            profile_id,
            Topic.ENERGY,
            Topic.MEALS,
            Topic.WATER,
            Topic.SLEEP,
            Topic.FAVORITES,
            Topic.PROFILE,
        )
        if profile.is_current:
            remaining = await asyncio.to_thread(self.repository.list_profiles)
            successor = _pick_current(remaining)
            await asyncio.to_thread(
                self.repository.set_current, successor.id if successor else None
            )
            self.notifier.publish(
                successor.id if successor else None, Topic.SELECTION
            )
        _logger.info("Deleted profile", extra={"profile_id": str(profile_id)})


def _pick_current(profiles: list[Profile]) -> Profile | None:
    for profile in profiles:
        if profile.is_current:
            return profile
    if not profiles:
        return None
    return max(profiles, key=lambda profile: profile.updated_at)
