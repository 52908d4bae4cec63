"""Supabase repositories for food items and meal entries."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from energy_balance.domain.logs import FoodItem, MealEntry, MealType
from energy_balance.services.logs import FoodRepository, MealRepository

_MEAL_COLUMNS = (
    "id, profile_id, food_item_id, food_name, day_key, logged_at, meal_type, "
    "quantity, calories, protein_g, carbs_g, fat_g, source"
)


@dataclass
class SupabaseFoodRepository(FoodRepository):
    """Supabase implementation for the food catalogue."""

    client: Client

    def create_food(self, food: FoodItem) -> None:
        """Insert a food item."""
        response = (
            self.client.table("foods")
            .insert(
                {
                    "id": str(food.id),
                    "name": food.name,
                    "calories": food.calories,
                    "protein_g": food.protein_g,
                    "carbs_g": food.carbs_g,
                    "fat_g": food.fat_g,
                    "serving_size": food.serving_size,
                    "serving_unit": food.serving_unit,
                    "is_custom": food.is_custom,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create food")

    def get_food(self, food_id: UUID) -> FoodItem | None:
        """Return a food item by id."""
        response = (
            self.client.table("foods")
            .select(
                "id, name, calories, protein_g, carbs_g, fat_g, serving_size, "
                "serving_unit, is_custom"
            )
            .eq("id", str(food_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        row = response.data[0]
        return FoodItem(
            id=UUID(row["id"]),
            name=row["name"],
            calories=float(row.get("calories", 0.0)),
            protein_g=float(row.get("protein_g", 0.0)),
            carbs_g=float(row.get("carbs_g", 0.0)),
            fat_g=float(row.get("fat_g", 0.0)),
            serving_size=row.get("serving_size") or "1",
            serving_unit=row.get("serving_unit") or "serving",
            is_custom=bool(row.get("is_custom", False)),
        )


@dataclass
class SupabaseMealRepository(MealRepository):
    """Supabase implementation for meal entries."""

    client: Client

    def create_meal(self, entry: MealEntry) -> None:
        """Insert a meal entry."""
        response = (
            self.client.table("meal_entries")
            .insert(
                {
                    "id": str(entry.id),
                    "profile_id": str(entry.profile_id),
                    "food_item_id": str(entry.food_item_id),
                    "food_name": entry.food_name,
                    "day_key": entry.day_key.isoformat(),
                    "logged_at": entry.logged_at.isoformat(),
                    "meal_type": entry.meal_type.value,
                    "quantity": entry.quantity,
                    "calories": entry.calories,
                    "protein_g": entry.protein_g,
                    "carbs_g": entry.carbs_g,
                    "fat_g": entry.fat_g,
                    "source": entry.source,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create meal entry")

    def get_meal(self, meal_id: UUID) -> MealEntry | None:
        """Return a meal entry by id."""
        response = (
            self.client.table("meal_entries")
            .select(_MEAL_COLUMNS)
            .eq("id", str(meal_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_meal(response.data[0])

    def delete_meal(self, meal_id: UUID) -> None:
        """Delete a meal entry."""
        self.client.table("meal_entries").delete().eq("id", str(meal_id)).execute()

    def list_meals(
        self, profile_id: UUID, start: datetime, end: datetime
    ) -> list[MealEntry]:
        """Return meals whose day key is within [start, end], by log time."""
        response = (
            self.client.table("meal_entries")
            .select(_MEAL_COLUMNS)
            .eq("profile_id", str(profile_id))
            .gte("day_key", start.isoformat())
            .lte("day_key", end.isoformat())
            .order("logged_at", desc=False)
            .execute()
        )
        return [_parse_meal(row) for row in response.data or []]

    def delete_for_profile(self, profile_id: UUID) -> None:
        """Delete every meal for a profile."""
        self.client.table("meal_entries").delete().eq(
            "profile_id", str(profile_id)
        ).execute()


def _parse_meal(row: dict) -> MealEntry:
    return MealEntry(
        id=UUID(row["id"]),
        profile_id=UUID(row["profile_id"]),
        food_item_id=UUID(row["food_item_id"]),
        food_name=row["food_name"],
        day_key=datetime.fromisoformat(row["day_key"]),
        logged_at=datetime.fromisoformat(row["logged_at"]),
        meal_type=MealType(row["meal_type"]),
        quantity=float(row.get("quantity", 1.0)),
        calories=float(row.get("calories", 0.0)),
        protein_g=float(row.get("protein_g", 0.0)),
        carbs_g=float(row.get("carbs_g", 0.0)),
        fat_g=float(row.get("fat_g", 0.0)),
        source=row.get("source") or "manual",
    )
