"""Models for recipes generated by the chat model."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from pantry_pal.domain.recipes import Recipe, RecipeIngredient, RecipeInstruction


class GeneratedIngredient(BaseModel):
    """Ingredient line of a generated recipe."""

    name: str
    quantity: float = Field(ge=0.0, allow_inf_nan=False)
    unit: str
    preparation: str | None = None


class GeneratedInstruction(BaseModel):
    """Instruction step of a generated recipe."""

    model_config = ConfigDict(populate_by_name=True)

    step_number: int = Field(alias="stepNumber", ge=1)
    instruction: str
    duration: int | None = None
    tip: str | None = None
    ingredients: list[str] = Field(default_factory=list)
    equipment: list[str] = Field(default_factory=list)


class GeneratedRecipe(BaseModel):
    """Structured recipe returned by the chat model."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    description: str
    prep_time: str = Field(alias="prepTime")
    cook_time: str = Field(alias="cookTime")
    total_time: str = Field(alias="totalTime")
    servings: int = Field(gt=0)
    difficulty: str
    ingredients: list[GeneratedIngredient] = Field(min_length=1)
    instructions: list[GeneratedInstruction] = Field(min_length=1)
    tags: list[str] = Field(default_factory=list)
    cooking_tools: list[str] | None = Field(default=None, alias="cookingTools")

    def to_recipe(self, user_id: UUID | None = None) -> Recipe:
        """Convert to an immutable domain recipe, ordering steps by number."""
        steps = sorted(self.instructions, key=lambda step: step.step_number)
        return Recipe(
            name=self.name,
            description=self.description,
            prep_time=self.prep_time,
            cook_time=self.cook_time,
            total_time=self.total_time,
            servings=self.servings,
            difficulty=self.difficulty,
            tags=tuple(self.tags),
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
                for step in steps
            ),
            cooking_tools=(
                tuple(self.cooking_tools) if self.cooking_tools is not None else None
            ),
            user_id=user_id,
        )
