"""Proportional recipe scaling."""

import logging
from dataclasses import replace

from pantry_pal.domain.recipes import Recipe, RecipeIngredient
from pantry_pal.services.quantities import sanitize_quantity

_logger = logging.getLogger(__name__)


class InvalidServingsError(ValueError):
    """Raised when a recipe or its target has a non-positive serving count."""

    def __init__(self, servings: int, subject: str = "Target servings") -> None:
        super().__init__(f"{subject} must be positive, got {servings}")
        self.servings = servings


def scale_recipe(recipe: Recipe, target_servings: int) -> Recipe:
    """Return a copy of the recipe with ingredient quantities scaled.

    Scaling to the current serving count returns the recipe unchanged.
    Instruction text is copied verbatim, so steps may still mention the
    original quantities.
    """
    if target_servings <= 0:
        raise InvalidServingsError(target_servings)
    if recipe.servings <= 0:
        raise InvalidServingsError(recipe.servings, subject="Recipe servings")
    if target_servings == recipe.servings:
        return recipe

    factor = target_servings / recipe.servings
    _logger.debug(
        "Scaling recipe %s from %s to %s servings",
        recipe.name,
        recipe.servings,
        target_servings,
    )
    ingredients = tuple(
        RecipeIngredient(
            name=ingredient.name,
            quantity=sanitize_quantity(ingredient.quantity * factor),
            unit=ingredient.unit,
            preparation=ingredient.preparation,
        )
        for ingredient in recipe.ingredients
    )
    return replace(
        recipe,
        ingredients=ingredients,
        servings=target_servings,
        adjusted_for=target_servings,
        is_scaled=True,
        scaled_from=(
            recipe.scaled_from
            if recipe.is_scaled and recipe.scaled_from
            else recipe.servings
        ),
    )
