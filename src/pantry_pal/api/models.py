"""Pydantic models for the HTTP API payloads."""

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, Field

from pantry_pal.domain.pantry import PantryIngredient
from pantry_pal.domain.recipes import (
    Recipe,
    RecipeIngredient,
    RecipeInstruction,
    RecipePhase,
)


class IngredientModel(BaseModel):
    """Recipe ingredient payload."""

    name: str
    quantity: float = Field(ge=0.0, allow_inf_nan=False)
    unit: str
    preparation: str | None = None


class InstructionModel(BaseModel):
    """Recipe step payload."""

    step_number: int
    instruction: str
    duration: int | None = None
    tip: str | None = None
    ingredients: list[str] = Field(default_factory=list)
    equipment: list[str] = Field(default_factory=list)


class RecipeModel(BaseModel):
    """Recipe payload."""

    id: str | None = None
    name: str
    description: str = ""
    prep_time: str = ""
    cook_time: str = ""
    total_time: str = ""
    servings: int = Field(gt=0)
    difficulty: str = ""
    ingredients: list[IngredientModel]
    instructions: list[InstructionModel] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    cooking_tools: list[str] | None = None
    adjusted_for: int | None = None
    is_scaled: bool = False
    scaled_from: int | None = None

    def to_domain(self, user_id: UUID | None = None) -> Recipe:
        return Recipe(
            id=self.id,
            user_id=user_id,
            name=self.name,
            description=self.description,
            prep_time=self.prep_time,
            cook_time=self.cook_time,
            total_time=self.total_time,
            servings=self.servings,
            difficulty=self.difficulty,
            ingredients=tuple(
                RecipeIngredient(
                    name=item.name,
                    quantity=item.quantity,
                    unit=item.unit,
                    preparation=item.preparation,
                )
                for item in self.ingredients
            ),
            instructions=tuple(
                RecipeInstruction(
                    step_number=step.step_number,
                    instruction=step.instruction,
                    duration=step.duration,
                    tip=step.tip,
                    ingredients=tuple(step.ingredients),
                    equipment=tuple(step.equipment),
                )
                for step in self.instructions
            ),
            tags=tuple(self.tags),
            cooking_tools=(
                tuple(self.cooking_tools) if self.cooking_tools is not None else None
            ),
            adjusted_for=self.adjusted_for,
            is_scaled=self.is_scaled,
            scaled_from=self.scaled_from,
        )

    @classmethod
    def from_domain(cls, recipe: Recipe) -> "RecipeModel":
        return cls(
            id=recipe.id,
            name=recipe.name,
            description=recipe.description,
            prep_time=recipe.prep_time,
            cook_time=recipe.cook_time,
            total_time=recipe.total_time,
            servings=recipe.servings,
            difficulty=recipe.difficulty,
            ingredients=[
                IngredientModel(
                    name=item.name,
                    quantity=item.quantity,
                    unit=item.unit,
                    preparation=item.preparation,
                )
                for item in recipe.ingredients
            ],
            instructions=[
                InstructionModel(
                    step_number=step.step_number,
                    instruction=step.instruction,
                    duration=step.duration,
                    tip=step.tip,
                    ingredients=list(step.ingredients),
                    equipment=list(step.equipment),
                )
                for step in recipe.instructions
            ],
            tags=list(recipe.tags),
            cooking_tools=(
                list(recipe.cooking_tools) if recipe.cooking_tools is not None else None
            ),
            adjusted_for=recipe.adjusted_for,
            is_scaled=recipe.is_scaled,
            scaled_from=recipe.scaled_from,
        )


class PhaseModel(BaseModel):
    """Cooking phase payload."""

    name: str
    description: str
    ingredients: list[IngredientModel]
    cooking_tools: list[str]

    @classmethod
    def from_domain(cls, phase: RecipePhase) -> "PhaseModel":
        return cls(
            name=phase.name,
            description=phase.description,
            ingredients=[
                IngredientModel(
                    name=item.name,
                    quantity=item.quantity,
                    unit=item.unit,
                    preparation=item.preparation,
                )
                for item in phase.ingredients
            ],
            cooking_tools=list(phase.cooking_tools),
        )


class PantryIngredientModel(BaseModel):
    """Pantry ingredient payload."""

    id: UUID | None
    name: str
    quantity: float
    display_quantity: str
    unit: str
    category: str
    expiration_date: date | None = None
    expired: bool = False
    trashed_at: datetime | None = None

    @classmethod
    def from_domain(
        cls, ingredient: PantryIngredient, today: date | None = None
    ) -> "PantryIngredientModel":
        return cls(
            id=ingredient.id,
            name=ingredient.name,
            quantity=ingredient.quantity,
            display_quantity=ingredient.display_quantity,
            unit=ingredient.unit,
            category=ingredient.category,
            expiration_date=ingredient.expiration_date,
            expired=today is not None and ingredient.is_expired(today),
            trashed_at=ingredient.trashed_at,
        )


class MessageRequest(BaseModel):
    """Chat message sent to the assistant."""

    user_id: UUID
    text: str


class MessageResponse(BaseModel):
    """Assistant turn result."""

    messages: list[str]
    action_state: str | None = None


class ScaleRequest(BaseModel):
    """Recipe scaling request."""

    recipe: RecipeModel
    servings: int = Field(gt=0)


class UserRecipeRequest(BaseModel):
    """Recipe submitted on behalf of a user."""

    user_id: UUID
    recipe: RecipeModel


class GenerateRequest(BaseModel):
    """Recipe generation request."""

    user_id: UUID
    meal_type: str = "dinner"
    servings: int = Field(default=4, gt=0)


class ConsumptionResponse(BaseModel):
    """Result of consuming a recipe's ingredients."""

    updated: list[str]
    trashed: list[str]
    missing: list[str]
