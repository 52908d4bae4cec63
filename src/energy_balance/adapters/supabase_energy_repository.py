"""Supabase repository for energy calculation records."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from energy_balance.domain.energy import EnergyRecord, Formula
from energy_balance.services.energy import EnergyRecordRepository


@dataclass
class SupabaseEnergyRepository(EnergyRecordRepository):
    """Supabase implementation for the append-only energy history."""

    client: Client

    def create_record(self, record: EnergyRecord) -> None:
        """Insert an energy record."""
        response = (
            self.client.table("energy_records")
            .insert(
                {
                    "id": str(record.id),
                    "profile_id": str(record.profile_id),
                    "created_at": record.created_at.isoformat(),
                    "formula": record.formula.value,
                    "bmr": record.bmr,
                    "tdee": record.tdee,
                    "activity_multiplier": record.activity_multiplier,
                    "target_calories": record.target_calories,
                    "protein_g": record.protein_g,
                    "carbs_g": record.carbs_g,
                    "fat_g": record.fat_g,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create energy record")

    def list_records(self, profile_id: UUID) -> list[EnergyRecord]:
        """Return every record for a profile."""
        response = (
            self.client.table("energy_records")
            .select(
                "id, profile_id, created_at, formula, bmr, tdee, "
                "activity_multiplier, target_calories, protein_g, carbs_g, fat_g"
            )
            .eq("profile_id", str(profile_id))
            .execute()
        )
        return [_parse_record(row) for row in response.data or []]

    def delete_for_profile(self, profile_id: UUID) -> None:
        """Delete every record for a profile."""
        self.client.table("energy_records").delete().eq(
            "profile_id", str(profile_id)
        ).execute()


def _parse_record(row: dict) -> EnergyRecord:
    return EnergyRecord(
        id=UUID(row["id"]),
        profile_id=UUID(row["profile_id"]),
        created_at=datetime.fromisoformat(row["created_at"]),
        formula=Formula(row.get("formula") or Formula.MIFFLIN_ST_JEOR),
        bmr=float(row.get("bmr", 0.0)),
        tdee=float(row.get("tdee", 0.0)),
        activity_multiplier=float(row.get("activity_multiplier", 0.0)),
        target_calories=float(row.get("target_calories", 0.0)),
        protein_g=float(row.get("protein_g", 0.0)),
        carbs_g=float(row.get("carbs_g", 0.0)),
        fat_g=float(row.get("fat_g", 0.0)),
    )
