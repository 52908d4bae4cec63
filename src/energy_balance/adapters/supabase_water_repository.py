"""Supabase repository for daily water totals."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from energy_balance.domain.logs import WaterIntake
from energy_balance.services.logs import WaterRepository

_COLUMNS = "id, profile_id, day_key, total_ml, glasses, last_updated"


@dataclass
class SupabaseWaterRepository(WaterRepository):
    """Supabase implementation keyed by (profile_id, day_key)."""

    client: Client

    def get_water(self, profile_id: UUID, day: datetime) -> WaterIntake | None:
        """Return the water record for a day."""
        response = (
            self.client.table("water_intake")
            .select(_COLUMNS)
            .eq("profile_id", str(profile_id))
            .eq("day_key", day.isoformat())
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_water(response.data[0])

    def save_water(self, record: WaterIntake) -> None:
        """Upsert the record for its day."""
        self.client.table("water_intake").upsert(
            {
                "id": str(record.id),
                "profile_id": str(record.profile_id),
                "day_key": record.day_key.isoformat(),
                "total_ml": record.total_ml,
                "glasses": record.glasses,
                "last_updated": record.last_updated.isoformat(),
            },
            on_conflict="profile_id,day_key",
        ).execute()

    def delete_water(self, profile_id: UUID, day: datetime) -> None:
        """Delete the record for a day."""
        self.client.table("water_intake").delete().eq(
            "profile_id", str(profile_id)
        ).eq("day_key", day.isoformat()).execute()

    def list_water(
        self, profile_id: UUID, start: datetime, end: datetime
    ) -> list[WaterIntake]:
        """Return records whose day key is within [start, end]."""
        response = (
            self.client.table("water_intake")
            .select(_COLUMNS)
            .eq("profile_id", str(profile_id))
            .gte("day_key", start.isoformat())
            .lte("day_key", end.isoformat())
            .order("day_key", desc=False)
            .execute()
        )
        return [_parse_water(row) for row in response.data or []]

    def delete_for_profile(self, profile_id: UUID) -> None:
        """Delete every water record for a profile."""
        self.client.table("water_intake").delete().eq(
            "profile_id", str(profile_id)
        ).execute()


def _parse_water(row: dict) -> WaterIntake:
    return WaterIntake(
        id=UUID(row["id"]),
        profile_id=UUID(row["profile_id"]),
        day_key=datetime.fromisoformat(row["day_key"]),
        total_ml=int(row.get("total_ml", 0)),
        glasses=int(row.get("glasses", 0)),
        last_updated=datetime.fromisoformat(row["last_updated"]),
    )
