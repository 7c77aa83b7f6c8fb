"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import asdict
from uuid import UUID

from fastapi import Depends, FastAPI, Header, HTTPException, Query, Request, status

from pantry_pal.api.models import (
    ConsumptionResponse,
    GenerateRequest,
    MessageRequest,
    MessageResponse,
    PantryIngredientModel,
    PhaseModel,
    RecipeModel,
    ScaleRequest,
    UserRecipeRequest,
)
from pantry_pal.app_logging import configure_logging
from pantry_pal.config import parse_allowed_user_ids
from pantry_pal.containers import AppContainer
from pantry_pal.services.assistant import ConversationBusyError
from pantry_pal.services.pantry import EXPIRING_WINDOW_DAYS, ActionInProgressError
from pantry_pal.services.recipes import NoIngredientsError, RecipeGenerationError
from pantry_pal.services.scaling import InvalidServingsError


def _get_api_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.api_token


async def require_token(
    x_api_token: str | None = Header(default=None),
    api_token: str = Depends(_get_api_token),
) -> None:
    """Ensure requests include a valid API token."""
    if not x_api_token or x_api_token != api_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)
    allowed_user_ids = parse_allowed_user_ids(container.settings.allowed_user_ids)

    def ensure_allowed(user_id: UUID) -> None:
        if not _is_user_allowed(user_id, allowed_user_ids):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container
    protected = [Depends(require_token)]

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/assistant/messages", dependencies=protected)
    async def send_message(body: MessageRequest, request: Request) -> MessageResponse:
        """Run one assistant turn and apply any pantry action it contains."""
        ensure_allowed(body.user_id)
        state_container: AppContainer = request.app.state.container
        try:
            reply = await state_container.assistant_service.handle_message(
                body.user_id, body.text
            )
        except (ConversationBusyError, ActionInProgressError) as exc:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT, detail=str(exc)
            ) from exc
        if reply is None:
            return MessageResponse(messages=[])
        return MessageResponse(
            messages=reply.messages,
            action_state=reply.outcome.state.value if reply.outcome else None,
        )

    @app.delete("/assistant/conversations/{user_id}", dependencies=protected)
    async def clear_conversation(user_id: UUID, request: Request) -> dict[str, str]:
        """Forget the user's conversation history."""
        ensure_allowed(user_id)
        request.app.state.container.assistant_service.clear_conversation(user_id)
        return {"status": "ok"}

    @app.get("/pantry/{user_id}", dependencies=protected)
    async def list_pantry(
        user_id: UUID, request: Request
    ) -> list[PantryIngredientModel]:
        """Return the user's active pantry ingredients."""
        ensure_allowed(user_id)
        state_container: AppContainer = request.app.state.container
        pantry_service = state_container.pantry_service
        today = pantry_service.clock().date()
        return [
            PantryIngredientModel.from_domain(ingredient, today)
            for ingredient in pantry_service.list_active(user_id)
        ]

    @app.get("/pantry/{user_id}/expiring", dependencies=protected)
    async def list_expiring(
        user_id: UUID,
        request: Request,
        within_days: int = Query(default=EXPIRING_WINDOW_DAYS, ge=0),
    ) -> list[PantryIngredientModel]:
        """Return ingredients expiring soon, including expired ones."""
        ensure_allowed(user_id)
        state_container: AppContainer = request.app.state.container
        pantry_service = state_container.pantry_service
        today = pantry_service.clock().date()
        return [
            PantryIngredientModel.from_domain(ingredient, today)
            for ingredient in pantry_service.expiring(user_id, today, within_days)
        ]

    @app.get("/pantry/{user_id}/trash", dependencies=protected)
    async def list_trash(
        user_id: UUID, request: Request
    ) -> list[PantryIngredientModel]:
        """Return the user's trashed ingredients."""
        ensure_allowed(user_id)
        state_container: AppContainer = request.app.state.container
        return [
            PantryIngredientModel.from_domain(ingredient)
            for ingredient in state_container.pantry_service.list_trashed(user_id)
        ]

    @app.post(
        "/pantry/{user_id}/trash/{ingredient_id}/restore", dependencies=protected
    )
    async def restore_ingredient(
        user_id: UUID, ingredient_id: UUID, request: Request
    ) -> PantryIngredientModel:
        """Move a trashed ingredient back into the pantry."""
        ensure_allowed(user_id)
        state_container: AppContainer = request.app.state.container
        restored = state_container.pantry_service.restore(user_id, ingredient_id)
        if restored is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return PantryIngredientModel.from_domain(restored)

    @app.delete("/pantry/{user_id}/trash/{ingredient_id}", dependencies=protected)
    async def delete_ingredient(
        user_id: UUID, ingredient_id: UUID, request: Request
    ) -> dict[str, str]:
        """Permanently delete a trashed ingredient."""
        ensure_allowed(user_id)
        state_container: AppContainer = request.app.state.container
        if not state_container.pantry_service.delete_permanently(
            user_id, ingredient_id
        ):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return {"status": "ok"}

    @app.post("/recipes/scale", dependencies=protected)
    async def scale(body: ScaleRequest, request: Request) -> RecipeModel:
        """Scale a recipe to a new number of servings."""
        state_container: AppContainer = request.app.state.container
        try:
            scaled = state_container.recipe_service.scale(
                body.recipe.to_domain(), body.servings
            )
        except InvalidServingsError as exc:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)
            ) from exc
        return RecipeModel.from_domain(scaled)

    @app.post("/recipes/phases", dependencies=protected)
    async def phases(body: RecipeModel, request: Request) -> list[PhaseModel]:
        """Split a recipe's ingredients and tools into precook and cook phases."""
        state_container: AppContainer = request.app.state.container
        return [
            PhaseModel.from_domain(phase)
            for phase in state_container.recipe_service.phases(body.to_domain())
        ]

    @app.post("/recipes/consume", dependencies=protected)
    async def consume(body: UserRecipeRequest, request: Request) -> ConsumptionResponse:
        """Subtract a cooked recipe's ingredients from the user's pantry."""
        ensure_allowed(body.user_id)
        state_container: AppContainer = request.app.state.container
        report = state_container.pantry_service.consume_recipe(
            body.user_id, body.recipe.to_domain(body.user_id)
        )
        return ConsumptionResponse(
            updated=report.updated, trashed=report.trashed, missing=report.missing
        )

    @app.post("/recipes/generate", dependencies=protected)
    async def generate(body: GenerateRequest, request: Request) -> RecipeModel:
        """Generate a recipe from the user's pantry."""
        ensure_allowed(body.user_id)
        state_container: AppContainer = request.app.state.container
        summary = state_container.pantry_service.summarize(body.user_id)
        try:
            recipe = await state_container.recipe_service.generate(
                body.meal_type, summary, servings=body.servings, user_id=body.user_id
            )
        except NoIngredientsError as exc:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)
            ) from exc
        except RecipeGenerationError as exc:
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)
            ) from exc
        return RecipeModel.from_domain(recipe)

    @app.get("/recipes/search", dependencies=protected)
    async def search(
        request: Request, ingredients: str = "", limit: int = 20
    ) -> dict[str, object]:
        """Search external recipes by comma-separated ingredient names."""
        state_container: AppContainer = request.app.state.container
        try:
            results = await state_container.recipe_search_service.search_by_ingredients(
                ingredients.split(","), limit=limit
            )
        except Exception as exc:
            logger.exception("Recipe search failed")
            raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY) from exc
        return {"recipes": [asdict(result) for result in results]}

    @app.get("/recipes/search/{recipe_id}", dependencies=protected)
    async def search_detail(recipe_id: str, request: Request) -> RecipeModel:
        """Fetch an external recipe adapted to the local recipe shape."""
        state_container: AppContainer = request.app.state.container
        try:
            details = await state_container.recipe_search_service.get_details(
                recipe_id
            )
        except Exception as exc:
            logger.exception("Recipe detail lookup failed")
            raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY) from exc
        return RecipeModel.from_domain(
            state_container.recipe_search_service.to_recipe(details)
        )

    @app.get("/foods/barcode/{barcode}", dependencies=protected)
    async def barcode(barcode: str, request: Request) -> dict[str, object]:
        """Resolve a product barcode to a food."""
        state_container: AppContainer = request.app.state.container
        try:
            food = await state_container.recipe_search_service.search_by_barcode(
                barcode
            )
        except Exception as exc:
            logger.exception("Barcode lookup failed")
            raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY) from exc
        if food is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return asdict(food)

    @app.get("/recipes/saved/{user_id}", dependencies=protected)
    async def list_saved(user_id: UUID, request: Request) -> list[RecipeModel]:
        """Return the user's saved recipes."""
        ensure_allowed(user_id)
        state_container: AppContainer = request.app.state.container
        return [
            RecipeModel.from_domain(recipe)
            for recipe in state_container.recipe_service.list_saved(user_id)
        ]

    @app.post("/recipes/saved", dependencies=protected)
    async def save(body: UserRecipeRequest, request: Request) -> RecipeModel:
        """Save a recipe for the user."""
        ensure_allowed(body.user_id)
        state_container: AppContainer = request.app.state.container
        saved = state_container.recipe_service.save(
            body.recipe.to_domain(body.user_id)
        )
        return RecipeModel.from_domain(saved)

    @app.delete("/recipes/saved/{recipe_id}", dependencies=protected)
    async def delete_saved(recipe_id: str, request: Request) -> dict[str, str]:
        """Delete a saved recipe."""
        state_container: AppContainer = request.app.state.container
        if not state_container.recipe_service.delete(recipe_id):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return {"status": "ok"}

    return app


def _is_user_allowed(user_id: UUID, allowed: set[UUID] | None) -> bool:
    """Return true when the user may use the API."""
    return allowed is None or user_id in allowed
