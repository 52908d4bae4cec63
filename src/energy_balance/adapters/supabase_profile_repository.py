"""Supabase-backed profile repository."""

from dataclasses import dataclass
from datetime import date, datetime
from uuid import UUID

from supabase import Client

from energy_balance.domain.profiles import ActivityLevel, Goal, Profile, Sex
from energy_balance.domain.units import UnitSystem
from energy_balance.services.profiles import ProfileRepository

_COLUMNS = (
    "id, name, birth_date, sex, height_cm, weight_kg, activity_level, goal, "
    "timezone, unit_system, is_current, created_at, updated_at"
)


@dataclass
class SupabaseProfileRepository(ProfileRepository):
    """Supabase implementation for profile persistence."""

    client: Client

    def create_profile(self, profile: Profile) -> None:
        """Insert a profile row."""
        response = self.client.table("profiles").insert(_to_row(profile)).execute()
        if not response.data:
            raise RuntimeError("Failed to create profile in Supabase")

    def get_profile(self, profile_id: UUID) -> Profile | None:
        """Return a profile by id, if present."""
        response = (
            self.client.table("profiles")
            .select(_COLUMNS)
            .eq("id", str(profile_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_profile(response.data[0])

    def list_profiles(self) -> list[Profile]:
        """Return every profile."""
        response = (
            self.client.table("profiles")
            .select(_COLUMNS)
            .order("created_at", desc=False)
            .execute()
        )
        return [_parse_profile(row) for row in response.data or []]

    def update_profile(self, profile: Profile) -> None:
        """Overwrite a profile row."""
        row = _to_row(profile)
        row.pop("id")
        row.pop("created_at")
        self.client.table("profiles").update(row).eq("id", str(profile.id)).execute()

    def delete_profile(self, profile_id: UUID) -> None:
        """Delete a profile row."""
        self.client.table("profiles").delete().eq("id", str(profile_id)).execute()

    def set_current(self, profile_id: UUID | None) -> None:
        """Flag one profile as current and clear the flag on the others."""
        self.client.table("profiles").update({"is_current": False}).eq(
            "is_current", True
        ).execute()
        if profile_id is None:
            return
        self.client.table("profiles").update({"is_current": True}).eq(
            "id", str(profile_id)
        ).execute()


def _to_row(profile: Profile) -> dict[str, object]:
    return {
        "id": str(profile.id),
        "name": profile.name,
        "birth_date": profile.birth_date.isoformat(),
        "sex": profile.sex.value,
        "height_cm": profile.height_cm,
        "weight_kg": profile.weight_kg,
        "activity_level": profile.activity_level.value,
        "goal": profile.goal.value,
        "timezone": profile.timezone,
        "unit_system": profile.unit_system.value,
        "is_current": profile.is_current,
        "created_at": profile.created_at.isoformat(),
        "updated_at": profile.updated_at.isoformat(),
    }


def _parse_profile(row: dict) -> Profile:
    return Profile(
        id=UUID(row["id"]),
        name=row["name"],
        birth_date=date.fromisoformat(row["birth_date"]),
        sex=Sex(row["sex"]),
        height_cm=float(row["height_cm"]),
        weight_kg=float(row["weight_kg"]),
        activity_level=ActivityLevel(row["activity_level"]),
        goal=Goal(row["goal"]),
        timezone=row.get("timezone") or "UTC",
        unit_system=UnitSystem(row.get("unit_system") or UnitSystem.METRIC),
        is_current=bool(row.get("is_current", False)),
        created_at=datetime.fromisoformat(row["created_at"]),
        updated_at=datetime.fromisoformat(row["updated_at"]),
    )
