"""Supabase repository for meal records."""

from dataclasses import dataclass

from supabase import Client

from calories_ai.domain.meals import MealDraft, MealRecord
from calories_ai.services.meals import MealRepository

_COLUMNS = "id, owner_id, description, calories, protein, carbs, fat, created_at"


@dataclass
class SupabaseMealRepository(MealRepository):
    """Supabase implementation for meal records."""

    client: Client
    table: str = "meals"

    def create_meal(self, draft: MealDraft) -> MealRecord:
        """Insert a meal row and return the stored record."""
        response = self.client.table(self.table).insert(draft.model_dump()).execute()
        if not response.data:
            raise RuntimeError("Failed to create meal")
        return _parse_meal(response.data[0])

    def list_meals(self, owner_id: str, limit: int) -> list[MealRecord]:
        """Return meals for an owner, newest first."""
        response = (
            self.client.table(self.table)
            .select(_COLUMNS)
            .eq("owner_id", owner_id)
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        return [_parse_meal(row) for row in response.data or []]


def _parse_meal(row: dict[str, object]) -> MealRecord:
    return MealRecord.model_validate(
        {**row, "id": str(row.get("id", "")), "owner_id": str(row.get("owner_id", ""))}
    )
