"""Supabase repository for sleep records."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from energy_balance.domain.logs import SleepRecord
from energy_balance.services.logs import SleepRepository

_COLUMNS = (
    "id, profile_id, day_key, hours, bedtime, wake_time, quality, notes, created_at"
)


@dataclass
class SupabaseSleepRepository(SleepRepository):
    """Supabase implementation keyed by (profile_id, day_key)."""

    client: Client

    def get_sleep(self, profile_id: UUID, day: datetime) -> SleepRecord | None:
        """Return the sleep record for a day."""
        response = (
            self.client.table("sleep_records")
            .select(_COLUMNS)
            .eq("profile_id", str(profile_id))
            .eq("day_key", day.isoformat())
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_sleep(response.data[0])

    def save_sleep(self, record: SleepRecord) -> None:
        """Upsert the record for its day."""
        self.client.table("sleep_records").upsert(
            {
                "id": str(record.id),
                "profile_id": str(record.profile_id),
                "day_key": record.day_key.isoformat(),
                "hours": record.hours,
                "bedtime": record.bedtime.isoformat(),
                "wake_time": record.wake_time.isoformat(),
                "quality": record.quality,
                "notes": record.notes,
                "created_at": record.created_at.isoformat(),
            },
            on_conflict="profile_id,day_key",
        ).execute()

    def delete_sleep(self, profile_id: UUID, day: datetime) -> None:
        """Delete the record for a day."""
        self.client.table("sleep_records").delete().eq(
            "profile_id", str(profile_id)
        ).eq("day_key", day.isoformat()).execute()

    def list_sleep(
        self, profile_id: UUID, start: datetime, end: datetime
    ) -> list[SleepRecord]:
        """Return records whose day key is within [start, end]."""
        response = (
            self.client.table("sleep_records")
            .select(_COLUMNS)
            .eq("profile_id", str(profile_id))
            .gte("day_key", start.isoformat())
            .lte("day_key", end.isoformat())
            .order("day_key", desc=False)
            .execute()
        )
        return [_parse_sleep(row) for row in response.data or []]

    def delete_for_profile(self, profile_id: UUID) -> None:
        """Delete every sleep record for a profile."""
        self.client.table("sleep_records").delete().eq(
            "profile_id", str(profile_id)
        ).execute()


def _parse_sleep(row: dict) -> SleepRecord:
    return SleepRecord(
        id=UUID(row["id"]),
        profile_id=UUID(row["profile_id"]),
        day_key=datetime.fromisoformat(row["day_key"]),
        hours=float(row.get("hours", 0.0)),
        bedtime=datetime.fromisoformat(row["bedtime"]),
        wake_time=datetime.fromisoformat(row["wake_time"]),
        quality=int(row.get("quality", 0)),
        notes=row.get("notes"),
        created_at=datetime.fromisoformat(row["created_at"]),
    )
