"""Shared test fixtures."""

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from uuid import UUID, uuid4

import pytest

from pantry_pal.config import Settings
from pantry_pal.containers import AppContainer
from pantry_pal.domain.pantry import PantryIngredient
from pantry_pal.domain.recipes import Recipe, RecipeIngredient, RecipeInstruction
from pantry_pal.services.assistant import AssistantService, ChatClient
from pantry_pal.services.cache import InMemoryCache
from pantry_pal.services.pantry import (
    PantryActionExecutor,
    PantryRepository,
    PantryService,
)
from pantry_pal.services.recipe_search import RecipeSearchClient, RecipeSearchService
from pantry_pal.services.recipes import RecipeRepository, RecipeService

FIXED_NOW = datetime(2025, 1, 15, 12, 0, tzinfo=UTC)


def fixed_clock() -> datetime:
    return FIXED_NOW


def make_ingredient(
    user_id: UUID, name: str, quantity: float, unit: str = "cups", **overrides
) -> PantryIngredient:
    return PantryIngredient(
        id=overrides.pop("id", uuid4()),
        user_id=user_id,
        name=name,
        quantity=quantity,
        unit=unit,
        category=overrides.pop("category", "Other"),
        created_at=FIXED_NOW,
        updated_at=FIXED_NOW,
        **overrides,
    )


def make_recipe(**overrides) -> Recipe:
    values: dict[str, object] = {
        "name": "Pancakes",
        "description": "Fluffy pancakes",
        "prep_time": "10 minutes",
        "cook_time": "15 minutes",
        "total_time": "25 minutes",
        "servings": 4,
        "difficulty": "Easy",
        "ingredients": (
            RecipeIngredient(name="Flour", quantity=2.0, unit="cups"),
            RecipeIngredient(name="Milk", quantity=1.5, unit="cups"),
            RecipeIngredient(name="Egg", quantity=2.0, unit="pieces"),
        ),
        "instructions": (
            RecipeInstruction(step_number=1, instruction="Whisk the batter"),
            RecipeInstruction(step_number=2, instruction="Cook on a hot pan"),
        ),
    }
    values.update(overrides)
    return Recipe(**values)


@dataclass
class InMemoryPantryRepository(PantryRepository):
    """In-memory pantry repository that records every mutation."""

    ingredients: dict[UUID, PantryIngredient] = field(default_factory=dict)
    added: list[PantryIngredient] = field(default_factory=list)
    updated: list[PantryIngredient] = field(default_factory=list)
    trashed: list[UUID] = field(default_factory=list)
    deleted: list[UUID] = field(default_factory=list)

    def seed(self, *items: PantryIngredient) -> None:
        for item in items:
            self.ingredients[item.id] = item

    def list_ingredients(self, user_id: UUID) -> list[PantryIngredient]:
        return [item for item in self.ingredients.values() if item.user_id == user_id]

    def add_ingredient(self, ingredient: PantryIngredient) -> PantryIngredient:
        stored = replace(ingredient, id=uuid4())
        self.ingredients[stored.id] = stored
        self.added.append(stored)
        return stored

    def update_ingredient(self, ingredient: PantryIngredient) -> PantryIngredient:
        self.ingredients[ingredient.id] = ingredient
        self.updated.append(ingredient)
        return ingredient

    def move_to_trash(self, ingredient_id: UUID, trashed_at: datetime) -> None:
        current = self.ingredients[ingredient_id]
        self.ingredients[ingredient_id] = replace(
            current, in_trash=True, trashed_at=trashed_at, updated_at=trashed_at
        )
        self.trashed.append(ingredient_id)

    def delete_ingredient(self, ingredient_id: UUID) -> None:
        self.ingredients.pop(ingredient_id, None)
        self.deleted.append(ingredient_id)


@dataclass
class FailingPantryRepository(InMemoryPantryRepository):
    """Repository whose writes always fail."""

    def add_ingredient(self, ingredient: PantryIngredient) -> PantryIngredient:
        raise RuntimeError("store unavailable")

    def update_ingredient(self, ingredient: PantryIngredient) -> PantryIngredient:
        raise RuntimeError("store unavailable")

    def move_to_trash(self, ingredient_id: UUID, trashed_at: datetime) -> None:
        raise RuntimeError("store unavailable")


@dataclass
class InMemoryRecipeRepository(RecipeRepository):
    """In-memory saved recipe repository for tests."""

    recipes: dict[str, Recipe] = field(default_factory=dict)

    def list_recipes(self, user_id: UUID) -> list[Recipe]:
        return [recipe for recipe in self.recipes.values() if recipe.user_id == user_id]

    def get_recipe(self, recipe_id: str) -> Recipe | None:
        return self.recipes.get(recipe_id)

    def save_recipe(self, recipe: Recipe) -> Recipe:
        stored = replace(recipe, id=recipe.id or str(uuid4()), saved_at=FIXED_NOW)
        self.recipes[stored.id] = stored
        return stored

    def delete_recipe(self, recipe_id: str) -> None:
        self.recipes.pop(recipe_id, None)


@dataclass
class FakeChatClient(ChatClient):
    """Chat client returning queued replies and recording requests."""

    replies: list[str] = field(default_factory=list)
    requests: list[list[dict[str, str]]] = field(default_factory=list)
    error: Exception | None = None

    async def complete(
        self, *, messages: list[dict[str, str]], model: str, temperature: float
    ) -> str:
        self.requests.append(messages)
        if self.error is not None:
            raise self.error
        return self.replies.pop(0) if self.replies else "Happy cooking!"


@dataclass
class FakeRecipeSearchClient(RecipeSearchClient):
    """Recipe search client with canned FatSecret-shaped payloads."""

    calls: list[str] = field(default_factory=list)
    search_payload: dict[str, object] = field(
        default_factory=lambda: {
            "recipes": {
                "recipe": [
                    {
                        "recipe_id": "91",
                        "recipe_name": "Rice Pudding",
                        "recipe_description": "Creamy and sweet",
                        "recipe_url": "https://example.com/91",
                        "recipe_image": "https://example.com/91.jpg",
                    }
                ]
            }
        }
    )
    recipe_payload: dict[str, object] = field(
        default_factory=lambda: {
            "recipe": {
                "recipe_id": "91",
                "recipe_name": "Rice Pudding",
                "recipe_description": "Creamy and sweet",
                "preparation_time_min": "10",
                "cooking_time_min": "35",
                "number_of_servings": "4",
                "ingredients": {
                    "ingredient": [
                        {
                            "ingredient_description": "1 cup rice",
                            "food_name": "Rice",
                            "number_of_units": "1.000",
                            "measurement_description": "cup",
                        },
                        {
                            "ingredient_description": "4 cups milk",
                            "food_name": "Milk",
                            "number_of_units": "4",
                            "measurement_description": "cup",
                        },
                    ]
                },
                "directions": {
                    "direction": [
                        {"direction_number": "2", "direction_description": "Simmer"},
                        {"direction_number": "1", "direction_description": "Rinse rice"},
                    ]
                },
            }
        }
    )
    barcode_payload: dict[str, object] = field(
        default_factory=lambda: {"food_id": {"value": "4321"}}
    )
    food_payload: dict[str, object] = field(
        default_factory=lambda: {
            "food": {
                "food_id": "4321",
                "food_name": "Oat Milk",
                "brand_name": "Oatly",
                "food_type": "Brand",
            }
        }
    )

    async def search_recipes(
        self, expression: str, max_results: int = 20
    ) -> dict[str, object]:
        self.calls.append(f"search:{expression}")
        return self.search_payload

    async def get_recipe(self, recipe_id: str) -> dict[str, object]:
        self.calls.append(f"recipe:{recipe_id}")
        return self.recipe_payload

    async def find_food_id_for_barcode(self, barcode: str) -> dict[str, object]:
        self.calls.append(f"barcode:{barcode}")
        return self.barcode_payload

    async def get_food(self, food_id: str) -> dict[str, object]:
        self.calls.append(f"food:{food_id}")
        return self.food_payload


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="service-key",
        api_token="api-token",
        openai_api_key="openai-key",
        fatsecret_client_id="fatsecret-id",
        fatsecret_client_secret="fatsecret-secret",
    )


@pytest.fixture
def user_id() -> UUID:
    return uuid4()


@pytest.fixture
def pantry_repository() -> InMemoryPantryRepository:
    return InMemoryPantryRepository()


@pytest.fixture
def chat_client() -> FakeChatClient:
    return FakeChatClient()


@pytest.fixture
def container(
    settings: Settings,
    pantry_repository: InMemoryPantryRepository,
    chat_client: FakeChatClient,
) -> AppContainer:
    pantry_service = PantryService(pantry_repository, clock=fixed_clock)
    executor = PantryActionExecutor(pantry_repository, clock=fixed_clock)
    assistant_service = AssistantService(
        chat_client=chat_client,
        executor=executor,
        pantry_service=pantry_service,
        model=settings.openai_model,
    )
    recipe_service = RecipeService(
        repository=InMemoryRecipeRepository(),
        chat_client=chat_client,
        model=settings.openai_model,
    )
    recipe_search_service = RecipeSearchService(
        client=FakeRecipeSearchClient(),
        cache=InMemoryCache(),
        retry_delay_seconds=0,
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        pantry_service=pantry_service,
        executor=executor,
        assistant_service=assistant_service,
        recipe_service=recipe_service,
        recipe_search_service=recipe_search_service,
        close_resources=close_resources,
    )
