"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from pantry_pal.adapters.fatsecret_client import HttpxFatSecretClient
from pantry_pal.adapters.openai_chat_client import OpenAIChatClient
from pantry_pal.adapters.supabase_pantry_repository import SupabasePantryRepository
from pantry_pal.adapters.supabase_recipe_repository import SupabaseRecipeRepository
from pantry_pal.config import Settings
from pantry_pal.services.assistant import AssistantService
from pantry_pal.services.cache import InMemoryCache
from pantry_pal.services.pantry import PantryActionExecutor, PantryService
from pantry_pal.services.recipe_search import RecipeSearchService
from pantry_pal.services.recipes import RecipeService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    pantry_service: PantryService
    executor: PantryActionExecutor
    assistant_service: AssistantService
    recipe_service: RecipeService
    recipe_search_service: RecipeSearchService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    pantry_repository = SupabasePantryRepository(supabase_client)
    recipe_repository = SupabaseRecipeRepository(supabase_client)
    pantry_service = PantryService(pantry_repository)
    executor = PantryActionExecutor(pantry_repository)
    chat_client = OpenAIChatClient.create(resolved_settings.openai_api_key)
    assistant_service = AssistantService(
        chat_client=chat_client,
        executor=executor,
        pantry_service=pantry_service,
        model=resolved_settings.openai_model,
        temperature=resolved_settings.openai_temperature,
        history_limit=resolved_settings.conversation_history_limit,
    )
    recipe_service = RecipeService(
        repository=recipe_repository,
        chat_client=chat_client,
        model=resolved_settings.openai_model,
        temperature=resolved_settings.openai_temperature,
    )
    fatsecret_client = HttpxFatSecretClient.create(
        client_id=resolved_settings.fatsecret_client_id,
        client_secret=resolved_settings.fatsecret_client_secret,
        base_url=resolved_settings.fatsecret_base_url,
        token_url=resolved_settings.fatsecret_token_url,
    )
    recipe_search_service = RecipeSearchService(
        client=fatsecret_client,
        cache=InMemoryCache(),
    )

    async def close_resources() -> None:
        await fatsecret_client.close()
        await chat_client.close()

    return AppContainer(
        settings=resolved_settings,
        pantry_service=pantry_service,
        executor=executor,
        assistant_service=assistant_service,
        recipe_service=recipe_service,
        recipe_search_service=recipe_search_service,
        close_resources=close_resources,
    )
