"""Recipe and food lookups against the external search API."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from pantry_pal.domain.recipes import Recipe, RecipeIngredient, RecipeInstruction
from pantry_pal.domain.search import (
    ExternalIngredient,
    FoodSummary,
    RecipeDetails,
    RecipeSummary,
)
from pantry_pal.services.cache import Cache
from pantry_pal.services.quantities import sanitize_quantity

_logger = logging.getLogger(__name__)


class RecipeSearchClient(Protocol):
    """Interface for the recipe/food search API, returning raw payloads."""

    async def search_recipes(
        self, expression: str, max_results: int = 20
    ) -> dict[str, object]:
        """Search recipes matching a search expression."""

    async def get_recipe(self, recipe_id: str) -> dict[str, object]:
        """Fetch full recipe details."""

    async def find_food_id_for_barcode(self, barcode: str) -> dict[str, object]:
        """Resolve a barcode to a food id."""

    async def get_food(self, food_id: str) -> dict[str, object]:
        """Fetch a food by id."""


@dataclass
class RecipeSearchService:
    """Search service with caching and a short retry."""

    client: RecipeSearchClient
    cache: Cache
    search_ttl_seconds: int = 3600
    details_ttl_seconds: int = 86400
    retry_attempts: int = 1
    retry_delay_seconds: float = 0.3

    async def search_by_ingredients(
        self, names: list[str], limit: int = 20
    ) -> list[RecipeSummary]:
        """Search recipes using pantry ingredient names."""
        cleaned = [name.strip() for name in names if name.strip()]
        if not cleaned:
            return []
        expression = ",".join(cleaned)
        cache_key = f"recipes:search:{expression.lower()}:{limit}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, list):
            return cached

        payload = await self._call_with_retry(
            lambda: self.client.search_recipes(expression, max_results=limit),
            action="search_recipes",
        )
        container = payload.get("recipes") or {}
        rows = _as_list(container.get("recipe") if isinstance(container, dict) else None)
        summaries = [_parse_summary(row) for row in rows]
        self.cache.set(cache_key, summaries, ttl_seconds=self.search_ttl_seconds)
        _logger.info("Recipe search: terms=%s results=%s", len(cleaned), len(summaries))
        return summaries

    async def get_details(self, recipe_id: str) -> RecipeDetails:
        """Fetch recipe details."""
        cache_key = f"recipes:details:{recipe_id}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, RecipeDetails):
            return cached

        payload = await self._call_with_retry(
            lambda: self.client.get_recipe(recipe_id),
            action=f"get_recipe:{recipe_id}",
        )
        details = _parse_details(payload.get("recipe") or {})
        self.cache.set(cache_key, details, ttl_seconds=self.details_ttl_seconds)
        return details

    async def search_by_barcode(self, barcode: str) -> FoodSummary | None:
        """Resolve a barcode to a food, or ``None`` when unknown."""
        code = barcode.strip()
        if not code:
            return None
        cache_key = f"foods:barcode:{code}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, FoodSummary):
            return cached

        payload = await self._call_with_retry(
            lambda: self.client.find_food_id_for_barcode(code),
            action="find_food_id_for_barcode",
        )
        food_ref = payload.get("food_id")
        food_id = food_ref.get("value") if isinstance(food_ref, dict) else food_ref
        if not food_id or str(food_id) == "0":
            return None
        food_payload = await self._call_with_retry(
            lambda: self.client.get_food(str(food_id)),
            action=f"get_food:{food_id}",
        )
        food = food_payload.get("food") or {}
        summary = FoodSummary(
            food_id=str(food.get("food_id", food_id)),
            name=str(food.get("food_name", "")),
            brand_name=food.get("brand_name"),
            food_type=str(food.get("food_type", "")),
        )
        self.cache.set(cache_key, summary, ttl_seconds=self.details_ttl_seconds)
        return summary

    @staticmethod
    def to_recipe(details: RecipeDetails, user_id: UUID | None = None) -> Recipe:
        """Adapt search API details into a recipe the engines can work with."""
        servings = details.servings if details.servings and details.servings > 0 else 1
        prep = details.prep_time_min or 0
        cook = details.cook_time_min or 0
        ingredients = tuple(
            RecipeIngredient(
                name=item.food_name or item.description,
                quantity=sanitize_quantity(
                    item.number_of_units if item.number_of_units is not None else 0.0
                ),
                unit=item.measurement_description or "",
                preparation=None,
            )
            for item in details.ingredients
        )
        instructions = tuple(
            RecipeInstruction(step_number=number, instruction=text)
            for number, text in enumerate(details.directions, start=1)
        )
        return Recipe(
            id=details.summary.recipe_id,
            name=details.summary.name,
            description=details.summary.description,
            prep_time=f"{prep} minutes",
            cook_time=f"{cook} minutes",
            total_time=f"{prep + cook} minutes",
            servings=servings,
            difficulty="Unknown",
            ingredients=ingredients,
            instructions=instructions,
            user_id=user_id,
        )

    async def _call_with_retry(
        self, func: Callable[[], Awaitable[dict[str, object]]], *, action: str
    ) -> dict[str, object]:
        attempt = 0
        while True:
            try:
                return await func()
            except Exception as exc:
                attempt += 1
                _logger.warning(
                    "Recipe search %s failed (attempt %s/%s, status=%s): %s",
                    action,
                    attempt,
                    self.retry_attempts + 1,
                    _status_code_from_exception(exc),
                    exc,
                )
                if attempt > self.retry_attempts:
                    raise
                await asyncio.sleep(self.retry_delay_seconds)


def _status_code_from_exception(exc: Exception) -> str:
    response = getattr(exc, "response", None)
    status_code = getattr(response, "status_code", None)
    if isinstance(status_code, int):
        return str(status_code)
    return "n/a"


def _as_list(value: object) -> list[dict[str, object]]:
    """The API returns a bare object instead of a list for single results."""
    if isinstance(value, list):
        return [row for row in value if isinstance(row, dict)]
    if isinstance(value, dict):
        return [value]
    return []


def _to_int(value: object) -> int | None:
    if isinstance(value, int | float):
        return int(value)
    if isinstance(value, str):
        try:
            return int(float(value))
        except ValueError:
            return None
    return None


def _to_float(value: object) -> float | None:
    if isinstance(value, int | float):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _parse_summary(row: dict[str, object]) -> RecipeSummary:
    return RecipeSummary(
        recipe_id=str(row.get("recipe_id", "")),
        name=str(row.get("recipe_name", "")),
        description=str(row.get("recipe_description", "")),
        url=row.get("recipe_url"),
        image_url=row.get("recipe_image"),
    )


def _parse_details(row: dict[str, object]) -> RecipeDetails:
    ingredients_container = row.get("ingredients") or {}
    directions_container = row.get("directions") or {}
    ingredient_rows = _as_list(
        ingredients_container.get("ingredient")
        if isinstance(ingredients_container, dict)
        else None
    )
    direction_rows = _as_list(
        directions_container.get("direction")
        if isinstance(directions_container, dict)
        else None
    )
    direction_rows.sort(key=lambda item: _to_int(item.get("direction_number")) or 0)
    return RecipeDetails(
        summary=_parse_summary(row),
        prep_time_min=_to_int(row.get("preparation_time_min")),
        cook_time_min=_to_int(row.get("cooking_time_min")),
        servings=_to_int(row.get("number_of_servings")),
        ingredients=[
            ExternalIngredient(
                description=str(item.get("ingredient_description", "")),
                food_name=item.get("food_name"),
                number_of_units=_to_float(item.get("number_of_units")),
                measurement_description=item.get("measurement_description"),
            )
            for item in ingredient_rows
        ],
        directions=[str(item.get("direction_description", "")) for item in direction_rows],
    )
