"""Supabase implementation for saved recipes."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from pantry_pal.domain.recipes import Recipe, RecipeIngredient, RecipeInstruction
from pantry_pal.services.recipes import RecipeRepository

_TABLE = "saved_recipes"


@dataclass
class SupabaseRecipeRepository(RecipeRepository):
    """Supabase-backed repository for saved recipes.

    Ingredients, instructions and tools are stored as JSON columns.
    """

    client: Client

    def list_recipes(self, user_id: UUID) -> list[Recipe]:
        """Return saved recipes for a user, newest first."""
        response = (
            self.client.table(_TABLE)
            .select("*")
            .eq("user_id", str(user_id))
            .order("saved_at", desc=True)
            .execute()
        )
        return [_parse_recipe(row) for row in response.data or []]

    def get_recipe(self, recipe_id: str) -> Recipe | None:
        """Return a saved recipe by id, if present."""
        response = (
            self.client.table(_TABLE)
            .select("*")
            .eq("id", recipe_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_recipe(response.data[0])

    def save_recipe(self, recipe: Recipe) -> Recipe:
        """Insert a recipe and return the stored row."""
        row = _to_row(recipe)
        row["saved_at"] = (recipe.saved_at or datetime.now(tz=UTC)).isoformat()
        response = self.client.table(_TABLE).insert(row).execute()
        if not response.data:
            raise RuntimeError("Failed to save recipe")
        return _parse_recipe(response.data[0])

    def delete_recipe(self, recipe_id: str) -> None:
        """Delete a saved recipe."""
        self.client.table(_TABLE).delete().eq("id", recipe_id).execute()


def _to_row(recipe: Recipe) -> dict[str, object]:
    return {
        "user_id": str(recipe.user_id) if recipe.user_id else None,
        "name": recipe.name,
        "description": recipe.description,
        "prep_time": recipe.prep_time,
        "cook_time": recipe.cook_time,
        "total_time": recipe.total_time,
        "servings": recipe.servings,
        "difficulty": recipe.difficulty,
        "tags": list(recipe.tags),
        "ingredients": [
            {
                "name": item.name,
                "quantity": item.quantity,
                "unit": item.unit,
                "preparation": item.preparation,
            }
            for item in recipe.ingredients
        ],
        "instructions": [
            {
                "step_number": step.step_number,
                "instruction": step.instruction,
                "duration": step.duration,
                "tip": step.tip,
                "ingredients": list(step.ingredients),
                "equipment": list(step.equipment),
            }
            for step in recipe.instructions
        ],
        "cooking_tools": (
            list(recipe.cooking_tools) if recipe.cooking_tools is not None else None
        ),
        "adjusted_for": recipe.adjusted_for,
        "is_scaled": recipe.is_scaled,
        "scaled_from": recipe.scaled_from,
    }


def _parse_recipe(row: dict[str, object]) -> Recipe:
    """Parse a saved recipe row into a domain model."""
    saved_raw = row.get("saved_at")
    user_raw = row.get("user_id")
    tools = row.get("cooking_tools")
    return Recipe(
        id=str(row["id"]),
        user_id=UUID(str(user_raw)) if user_raw else None,
        name=str(row.get("name", "")),
        description=str(row.get("description", "")),
        prep_time=str(row.get("prep_time", "")),
        cook_time=str(row.get("cook_time", "")),
        total_time=str(row.get("total_time", "")),
        servings=int(row.get("servings") or 1),
        difficulty=str(row.get("difficulty", "")),
        tags=tuple(row.get("tags") or ()),
        ingredients=tuple(
            RecipeIngredient(
                name=str(item.get("name", "")),
                quantity=float(item.get("quantity") or 0.0),
                unit=str(item.get("unit", "")),
                preparation=item.get("preparation"),
            )
            for item in row.get("ingredients") or []
        ),
        instructions=tuple(
            RecipeInstruction(
                step_number=int(step.get("step_number", index)),
                instruction=str(step.get("instruction", "")),
                duration=step.get("duration"),
                tip=step.get("tip"),
                ingredients=tuple(step.get("ingredients") or ()),
                equipment=tuple(step.get("equipment") or ()),
            )
            for index, step in enumerate(row.get("instructions") or [], start=1)
        ),
        cooking_tools=tuple(tools) if isinstance(tools, list) else None,
        adjusted_for=row.get("adjusted_for"),
        is_scaled=bool(row.get("is_scaled", False)),
        scaled_from=row.get("scaled_from"),
        saved_at=(
            datetime.fromisoformat(saved_raw)
            if isinstance(saved_raw, str) and saved_raw
            else None
        ),
    )
