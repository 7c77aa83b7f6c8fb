"""Supabase implementation for pantry ingredients."""

from dataclasses import dataclass
from datetime import date, datetime
from uuid import UUID

from supabase import Client

from pantry_pal.domain.pantry import PantryIngredient
from pantry_pal.services.pantry import PantryRepository

_TABLE = "pantry_ingredients"


@dataclass
class SupabasePantryRepository(PantryRepository):
    """Supabase-backed repository for pantry ingredients."""

    client: Client

    def list_ingredients(self, user_id: UUID) -> list[PantryIngredient]:
        """Return all ingredients for a user ordered by name."""
        response = (
            self.client.table(_TABLE)
            .select("*")
            .eq("user_id", str(user_id))
            .order("name")
            .execute()
        )
        return [_parse_ingredient(row) for row in response.data or []]

    def add_ingredient(self, ingredient: PantryIngredient) -> PantryIngredient:
        """Insert an ingredient and return the stored row."""
        response = self.client.table(_TABLE).insert(_to_row(ingredient)).execute()
        if not response.data:
            raise RuntimeError("Failed to create pantry ingredient")
        return _parse_ingredient(response.data[0])

    def update_ingredient(self, ingredient: PantryIngredient) -> PantryIngredient:
        """Overwrite an ingredient row and return it."""
        if ingredient.id is None:
            raise ValueError("Cannot update an ingredient without an id")
        response = (
            self.client.table(_TABLE)
            .update(_to_row(ingredient))
            .eq("id", str(ingredient.id))
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to update pantry ingredient")
        return _parse_ingredient(response.data[0])

    def move_to_trash(self, ingredient_id: UUID, trashed_at: datetime) -> None:
        """Flag an ingredient as trashed."""
        self.client.table(_TABLE).update(
            {
                "in_trash": True,
                "trashed_at": trashed_at.isoformat(),
                "updated_at": trashed_at.isoformat(),
            }
        ).eq("id", str(ingredient_id)).execute()

    def delete_ingredient(self, ingredient_id: UUID) -> None:
        """Permanently delete an ingredient row."""
        self.client.table(_TABLE).delete().eq("id", str(ingredient_id)).execute()


def _to_row(ingredient: PantryIngredient) -> dict[str, object]:
    return {
        "user_id": str(ingredient.user_id),
        "name": ingredient.name,
        "quantity": ingredient.quantity,
        "unit": ingredient.unit,
        "category": ingredient.category,
        "expiration_date": (
            ingredient.expiration_date.isoformat()
            if ingredient.expiration_date
            else None
        ),
        "in_trash": ingredient.in_trash,
        "trashed_at": (
            ingredient.trashed_at.isoformat() if ingredient.trashed_at else None
        ),
        "created_at": ingredient.created_at.isoformat(),
        "updated_at": ingredient.updated_at.isoformat(),
    }


def _parse_datetime(value: object) -> datetime | None:
    if isinstance(value, str) and value:
        return datetime.fromisoformat(value)
    return None


def _parse_ingredient(row: dict[str, object]) -> PantryIngredient:
    """Parse a pantry row into a domain model."""
    expiration_raw = row.get("expiration_date")
    created_at = _parse_datetime(row.get("created_at"))
    updated_at = _parse_datetime(row.get("updated_at")) or created_at
    return PantryIngredient(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        name=str(row.get("name", "")),
        quantity=float(row.get("quantity") or 0.0),
        unit=str(row.get("unit", "")),
        category=str(row.get("category") or "Other"),
        expiration_date=(
            date.fromisoformat(expiration_raw[:10])
            if isinstance(expiration_raw, str) and expiration_raw
            else None
        ),
        in_trash=bool(row.get("in_trash", False)),
        trashed_at=_parse_datetime(row.get("trashed_at")),
        created_at=created_at,
        updated_at=updated_at,
    )
