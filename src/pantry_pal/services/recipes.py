"""Saved recipes, recipe generation and the recipe engines."""

import json
import logging
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from pydantic import ValidationError

from pantry_pal.domain.generation import GeneratedRecipe
from pantry_pal.domain.recipes import Recipe, RecipePhase
from pantry_pal.services.assistant import ChatClient
from pantry_pal.services.phases import organize_into_phases
from pantry_pal.services.scaling import scale_recipe

_logger = logging.getLogger(__name__)

GENERATION_PROMPT = """You are a professional chef creating a {meal_type} recipe using ONLY the
following ingredients from my pantry. Do not include any ingredients that are not listed.

Available Ingredients:
{pantry}

Create a {meal_type} recipe for exactly {servings} servings.

Use "preparation" for ingredient preparation notes and "duration" (minutes) for step timing.
List the ingredient names and equipment each step uses.

Return only valid JSON with this structure:
{{
  "name": "Recipe Name",
  "description": "Brief description",
  "prepTime": "15 minutes",
  "cookTime": "30 minutes",
  "totalTime": "45 minutes",
  "servings": {servings},
  "difficulty": "Easy",
  "ingredients": [{{"name": "rice", "quantity": 1.5, "unit": "cups", "preparation": "rinsed"}}],
  "instructions": [{{"stepNumber": 1, "instruction": "Rinse the rice", "duration": 5, "tip": "Until the water runs clear", "ingredients": ["rice"], "equipment": ["strainer"]}}],
  "cookingTools": ["strainer", "saucepan"],
  "tags": ["quick", "easy"]
}}"""


class RecipeRepository(Protocol):
    """Persistence interface for saved recipes."""

    def list_recipes(self, user_id: UUID) -> list[Recipe]:
        """Return a user's saved recipes, newest first."""

    def get_recipe(self, recipe_id: str) -> Recipe | None:
        """Return a saved recipe by id, if present."""

    def save_recipe(self, recipe: Recipe) -> Recipe:
        """Persist a recipe and return it with its id."""

    def delete_recipe(self, recipe_id: str) -> None:
        """Delete a saved recipe."""


class NoIngredientsError(RuntimeError):
    """Raised when a recipe is requested for an empty pantry."""


class RecipeGenerationError(RuntimeError):
    """Raised when the chat model's reply isn't a usable recipe."""


@dataclass
class RecipeService:
    """Application service for recipes."""

    repository: RecipeRepository
    chat_client: ChatClient
    model: str
    temperature: float = 0.7

    def save(self, recipe: Recipe) -> Recipe:
        return self.repository.save_recipe(recipe)

    def list_saved(self, user_id: UUID) -> list[Recipe]:
        return self.repository.list_recipes(user_id)

    def get(self, recipe_id: str) -> Recipe | None:
        return self.repository.get_recipe(recipe_id)

    def delete(self, recipe_id: str) -> bool:
        """Delete a saved recipe, returning whether it existed."""
        if self.repository.get_recipe(recipe_id) is None:
            return False
        self.repository.delete_recipe(recipe_id)
        return True

    @staticmethod
    def scale(recipe: Recipe, servings: int) -> Recipe:
        return scale_recipe(recipe, servings)

    @staticmethod
    def phases(recipe: Recipe) -> tuple[RecipePhase, RecipePhase]:
        return organize_into_phases(recipe)

    async def generate(
        self,
        meal_type: str,
        pantry_summary: str,
        servings: int = 4,
        user_id: UUID | None = None,
    ) -> Recipe:
        """Ask the chat model for a recipe made from the pantry."""
        if not pantry_summary.strip():
            raise NoIngredientsError("No ingredients available in pantry")
        prompt = GENERATION_PROMPT.format(
            meal_type=meal_type, pantry=pantry_summary, servings=servings
        )
        try:
            response = await self.chat_client.complete(
                messages=[{"role": "user", "content": prompt}],
                model=self.model,
                temperature=self.temperature,
            )
        except Exception as exc:
            _logger.exception("Recipe generation request failed")
            raise RecipeGenerationError("Failed to generate recipe") from exc
        generated = parse_generated_recipe(response)
        _logger.info("Generated %s recipe: %s", meal_type, generated.name)
        return generated.to_recipe(user_id=user_id)


def parse_generated_recipe(text: str) -> GeneratedRecipe:
    """Decode a recipe reply, tolerating markdown fences and a ``recipe`` wrapper."""
    cleaned = text.strip().replace("```json", "").replace("```", "").strip()
    try:
        payload = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        _logger.warning("Recipe reply is not JSON")
        raise RecipeGenerationError("Invalid recipe format from AI service") from exc
    if isinstance(payload, dict) and isinstance(payload.get("recipe"), dict):
        payload = payload["recipe"]
    try:
        return GeneratedRecipe.model_validate(payload)
    except ValidationError as exc:
        _logger.warning("Recipe reply could not be decoded: %s", exc.error_count())
        raise RecipeGenerationError("Invalid recipe format from AI service") from exc
