"""Domain models for external recipe and food lookups."""

from dataclasses import dataclass


@dataclass(frozen=True)
class RecipeSummary:
    """Summary information about a recipe from the search API."""

    recipe_id: str
    name: str
    description: str
    url: str | None
    image_url: str | None


@dataclass(frozen=True)
class ExternalIngredient:
    """Ingredient line as returned by the search API."""

    description: str
    food_name: str | None
    number_of_units: float | None
    measurement_description: str | None


@dataclass(frozen=True)
class RecipeDetails:
    """Full recipe details from the search API."""

    summary: RecipeSummary
    prep_time_min: int | None
    cook_time_min: int | None
    servings: int | None
    ingredients: list[ExternalIngredient]
    directions: list[str]


@dataclass(frozen=True)
class FoodSummary:
    """Food item resolved from a barcode."""

    food_id: str
    name: str
    brand_name: str | None
    food_type: str
