"""Domain models for recipes and their derived cooking phases."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from uuid import UUID

from pantry_pal.services.timing import format_minutes, parse_minutes


class PhaseType(str, Enum):
    """The two phases a recipe is organized into, in display order."""

    PRECOOK = "Precook"
    COOK = "Cook"

    @property
    def description(self) -> str:
        if self is PhaseType.PRECOOK:
            return "Preparation and mise en place"
        return "Active cooking phase"


@dataclass(frozen=True)
class RecipeIngredient:
    """An ingredient line of a recipe."""

    name: str
    quantity: float
    unit: str
    preparation: str | None = None


@dataclass(frozen=True)
class RecipeInstruction:
    """A single numbered step of a recipe."""

    step_number: int
    instruction: str
    duration: int | None = None
    tip: str | None = None
    ingredients: tuple[str, ...] = ()
    equipment: tuple[str, ...] = ()


@dataclass(frozen=True)
class Recipe:
    """A recipe as generated by the assistant or adapted from a search result.

    Recipes are immutable; scaling returns a new value.
    """

    name: str
    description: str
    prep_time: str
    cook_time: str
    total_time: str
    servings: int
    difficulty: str
    ingredients: tuple[RecipeIngredient, ...]
    instructions: tuple[RecipeInstruction, ...]
    tags: tuple[str, ...] = ()
    cooking_tools: tuple[str, ...] | None = None
    id: str | None = None
    adjusted_for: int | None = None
    is_scaled: bool = False
    scaled_from: int | None = None
    saved_at: datetime | None = None
    user_id: UUID | None = None

    @property
    def prep_time_minutes(self) -> int:
        return parse_minutes(self.prep_time)

    @property
    def cook_time_minutes(self) -> int:
        return parse_minutes(self.cook_time)

    @property
    def total_time_minutes(self) -> int:
        return parse_minutes(self.total_time)

    @property
    def formatted_prep_time(self) -> str:
        return format_minutes(self.prep_time_minutes)

    @property
    def formatted_cook_time(self) -> str:
        return format_minutes(self.cook_time_minutes)

    @property
    def formatted_total_time(self) -> str:
        return format_minutes(self.total_time_minutes)

    @property
    def is_valid(self) -> bool:
        """Return whether the recipe has everything needed to be cooked."""
        return (
            bool(self.name)
            and bool(self.description)
            and self.servings > 0
            and bool(self.ingredients)
            and bool(self.instructions)
        )

    @property
    def difficulty_level(self) -> str:
        """Normalize the free-text difficulty label."""
        label = self.difficulty.strip().lower()
        if label == "easy":
            return "easy"
        if label in {"medium", "moderate"}:
            return "medium"
        if label in {"hard", "challenging"}:
            return "hard"
        return "unknown"

    def ordered_instructions(self) -> list[RecipeInstruction]:
        """Return instructions sorted by step number."""
        return sorted(self.instructions, key=lambda step: step.step_number)


@dataclass(frozen=True)
class RecipePhase:
    """Derived grouping of ingredients and tools for step-by-step display."""

    name: str
    ingredients: tuple[RecipeIngredient, ...]
    cooking_tools: tuple[str, ...]
    description: str

    @classmethod
    def of(
        cls,
        phase: PhaseType,
        ingredients: list[RecipeIngredient],
        tools: list[str],
    ) -> "RecipePhase":
        return cls(
            name=phase.value,
            ingredients=tuple(ingredients),
            cooking_tools=tuple(tools),
            description=phase.description,
        )
