"""Pantry state: repository interface, action execution and consumption."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import UTC, date, datetime
from enum import Enum
from typing import Protocol
from uuid import UUID

from pantry_pal.domain.actions import (
    AddIngredient,
    DeleteIngredient,
    EditIngredient,
    PantryAction,
    UpdateQuantity,
)
from pantry_pal.domain.pantry import PantryIngredient
from pantry_pal.domain.recipes import Recipe
from pantry_pal.services.quantities import (
    format_quantity,
    is_finite_quantity,
    sanitize_quantity,
)

DEFAULT_CATEGORY = "Other"
EXPIRING_WINDOW_DAYS = 7

_logger = logging.getLogger(__name__)


class PantryRepository(Protocol):
    """Persistence interface for pantry ingredients."""

    def list_ingredients(self, user_id: UUID) -> list[PantryIngredient]:
        """Return all of a user's ingredients, trashed ones included."""

    def add_ingredient(self, ingredient: PantryIngredient) -> PantryIngredient:
        """Insert an ingredient and return it with its id."""

    def update_ingredient(self, ingredient: PantryIngredient) -> PantryIngredient:
        """Overwrite an existing ingredient and return it."""

    def move_to_trash(self, ingredient_id: UUID, trashed_at: datetime) -> None:
        """Mark an ingredient as trashed."""

    def delete_ingredient(self, ingredient_id: UUID) -> None:
        """Permanently delete an ingredient."""


class ActionInProgressError(RuntimeError):
    """Raised when a second action is executed while one is still running."""


class ExecutionState(str, Enum):
    IDLE = "idle"
    RESOLVING = "resolving"
    MUTATING = "mutating"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class FailureKind(str, Enum):
    RESOLUTION = "resolution"
    VALIDATION = "validation"
    STORE = "store"


@dataclass(frozen=True)
class ActionContext:
    """Who an action is executed for."""

    user_id: UUID


@dataclass(frozen=True)
class ActionOutcome:
    """Result of executing a pantry action, with a user-facing message."""

    state: ExecutionState
    message: str
    failure: FailureKind | None = None
    ingredient: PantryIngredient | None = None

    @property
    def succeeded(self) -> bool:
        return self.state is ExecutionState.SUCCEEDED


STORE_FAILURE_MESSAGE = "I had trouble updating your pantry. Please try again!"


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


class _ResolutionError(Exception):
    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class _ValidationError(Exception):
    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


@dataclass
class PantryActionExecutor:
    """Resolves a parsed action against the pantry and applies it.

    Each call walks ``IDLE -> RESOLVING -> MUTATING -> SUCCEEDED | FAILED``.
    Failures are terminal for the action; nothing is retried.
    """

    repository: PantryRepository
    clock: Callable[[], datetime] = _utcnow
    _states: dict[UUID, ExecutionState] = field(
        default_factory=dict, init=False, repr=False
    )
    _in_flight: set[UUID] = field(default_factory=set, init=False, repr=False)

    def execute(self, action: PantryAction, context: ActionContext) -> ActionOutcome:
        """Execute one action for a user and describe the result."""
        if context.user_id in self._in_flight:
            raise ActionInProgressError(
                f"An action is already running for user {context.user_id}"
            )
        self._in_flight.add(context.user_id)
        self._states[context.user_id] = ExecutionState.IDLE
        try:
            return self._run(action, context)
        finally:
            self._in_flight.discard(context.user_id)

    def state_for(self, user_id: UUID) -> ExecutionState:
        """Return the state of the user's latest action."""
        return self._states.get(user_id, ExecutionState.IDLE)

    def _run(self, action: PantryAction, context: ActionContext) -> ActionOutcome:
        try:
            if isinstance(action, AddIngredient):
                ingredient = self._add(action, context)
                message = (
                    f"Great! I added {format_quantity(ingredient.quantity)} "
                    f"{ingredient.unit} of {ingredient.name} to your pantry! 🎉"
                )
            elif isinstance(action, UpdateQuantity):
                ingredient = self._update_quantity(action, context)
                message = (
                    f"Perfect! I updated your {ingredient.name} to "
                    f"{format_quantity(ingredient.quantity)} {ingredient.unit}! ✅"
                )
            elif isinstance(action, DeleteIngredient):
                ingredient = self._delete(action, context)
                message = f"Done! I removed {ingredient.name} from your pantry! 🗑️"
            elif isinstance(action, EditIngredient):
                ingredient = self._edit(action, context)
                message = f"Great! I updated your {action.current_name} successfully! ✨"
            else:
                raise TypeError(f"Unsupported pantry action: {action!r}")
        except _ResolutionError as exc:
            _logger.info("Pantry action not resolved: %s", exc.message)
            return self._fail(context, exc.message, FailureKind.RESOLUTION)
        except _ValidationError as exc:
            _logger.info("Pantry action rejected: %s", exc.message)
            return self._fail(context, exc.message, FailureKind.VALIDATION)
        except Exception:
            _logger.exception("Pantry store operation failed")
            return self._fail(context, STORE_FAILURE_MESSAGE, FailureKind.STORE)
        self._states[context.user_id] = ExecutionState.SUCCEEDED
        return ActionOutcome(
            state=ExecutionState.SUCCEEDED, message=message, ingredient=ingredient
        )

    def _fail(
        self, context: ActionContext, message: str, failure: FailureKind
    ) -> ActionOutcome:
        self._states[context.user_id] = ExecutionState.FAILED
        return ActionOutcome(
            state=ExecutionState.FAILED, message=message, failure=failure
        )

    def _add(self, action: AddIngredient, context: ActionContext) -> PantryIngredient:
        self._states[context.user_id] = ExecutionState.MUTATING
        name = action.name.strip()
        unit = action.unit.strip()
        if not name:
            raise _ValidationError("I need a name for the ingredient you want to add.")
        if not unit:
            raise _ValidationError(f"What unit should I use for {name}?")
        if not is_finite_quantity(action.quantity) or action.quantity <= 0:
            raise _ValidationError(
                f"I can only add {name} with a quantity greater than zero."
            )
        now = self.clock()
        ingredient = PantryIngredient(
            id=None,
            user_id=context.user_id,
            name=name,
            quantity=action.quantity,
            unit=unit,
            category=action.category.strip() or DEFAULT_CATEGORY,
            expiration_date=action.expiration_date,
            created_at=now,
            updated_at=now,
        )
        return self.repository.add_ingredient(ingredient)

    def _update_quantity(
        self, action: UpdateQuantity, context: ActionContext
    ) -> PantryIngredient:
        current = self._resolve(
            action.name,
            context,
            f"I couldn't find {action.name} in your pantry. "
            "Would you like to add it instead?",
        )
        self._states[context.user_id] = ExecutionState.MUTATING
        if not is_finite_quantity(action.new_quantity) or action.new_quantity < 0:
            raise _ValidationError(
                f"The new quantity for {current.name} can't be negative."
            )
        updated = replace(
            current, quantity=action.new_quantity, updated_at=self.clock()
        )
        return self.repository.update_ingredient(updated)

    def _delete(
        self, action: DeleteIngredient, context: ActionContext
    ) -> PantryIngredient:
        current = self._resolve(
            action.name,
            context,
            f"I couldn't find {action.name} in your pantry to remove.",
        )
        self._states[context.user_id] = ExecutionState.MUTATING
        now = self.clock()
        self.repository.move_to_trash(current.id, now)
        return replace(current, in_trash=True, trashed_at=now, updated_at=now)

    def _edit(self, action: EditIngredient, context: ActionContext) -> PantryIngredient:
        current = self._resolve(
            action.current_name,
            context,
            f"I couldn't find {action.current_name} in your pantry to edit.",
        )
        self._states[context.user_id] = ExecutionState.MUTATING
        if action.new_name is not None and not action.new_name.strip():
            raise _ValidationError("The new name for an ingredient can't be blank.")
        if action.quantity is not None and (
            not is_finite_quantity(action.quantity) or action.quantity < 0
        ):
            raise _ValidationError(
                f"The new quantity for {current.name} can't be negative."
            )
        updated = replace(
            current,
            name=action.new_name.strip() if action.new_name else current.name,
            quantity=action.quantity if action.quantity is not None else current.quantity,
            unit=action.unit.strip() if action.unit else current.unit,
            category=action.category.strip() if action.category else current.category,
            expiration_date=action.expiration_date or current.expiration_date,
            updated_at=self.clock(),
        )
        return self.repository.update_ingredient(updated)

    def _resolve(
        self, name: str, context: ActionContext, not_found_message: str
    ) -> PantryIngredient:
        self._states[context.user_id] = ExecutionState.RESOLVING
        match = find_by_name(self.repository.list_ingredients(context.user_id), name)
        if match is None or match.id is None:
            raise _ResolutionError(not_found_message)
        return match


def find_by_name(
    ingredients: list[PantryIngredient], name: str
) -> PantryIngredient | None:
    """Return the first non-trashed ingredient whose name matches exactly, ignoring case."""
    wanted = name.strip().lower()
    for ingredient in ingredients:
        if ingredient.in_trash:
            continue
        if ingredient.name.strip().lower() == wanted:
            return ingredient
    return None


def apply_consumption(
    ingredient: PantryIngredient, used_quantity: float, now: datetime
) -> PantryIngredient:
    """Return a copy with ``used_quantity`` removed, trashed once it hits zero."""
    remaining = sanitize_quantity(
        sanitize_quantity(ingredient.quantity) - sanitize_quantity(used_quantity)
    )
    if remaining == 0:
        return replace(
            ingredient,
            quantity=0.0,
            in_trash=True,
            trashed_at=now,
            updated_at=now,
        )
    return replace(ingredient, quantity=remaining, updated_at=now)


@dataclass(frozen=True)
class ConsumptionReport:
    """What cooking a recipe did to the pantry."""

    updated: list[str]
    trashed: list[str]
    missing: list[str]


@dataclass
class PantryService:
    """Application service for reading the pantry and consuming recipes."""

    repository: PantryRepository
    clock: Callable[[], datetime] = _utcnow

    def list_active(self, user_id: UUID) -> list[PantryIngredient]:
        """Return non-trashed ingredients sorted by name."""
        return sorted(
            (
                ingredient
                for ingredient in self.repository.list_ingredients(user_id)
                if not ingredient.in_trash
            ),
            key=lambda ingredient: ingredient.name.lower(),
        )

    def summarize(self, user_id: UUID) -> str:
        """Render the pantry as ``Name: qty unit`` lines for prompts."""
        return "\n".join(
            f"{ingredient.name}: {ingredient.display_quantity} {ingredient.unit}"
            for ingredient in self.list_active(user_id)
        )

    def missing_ingredients(self, user_id: UUID, recipe: Recipe) -> list[str]:
        """Return recipe ingredient names the pantry cannot fully cover."""
        active = self.list_active(user_id)
        missing: list[str] = []
        for needed in recipe.ingredients:
            covered = any(
                needed.name.lower() in ingredient.name.lower()
                and sanitize_quantity(ingredient.quantity)
                >= sanitize_quantity(needed.quantity)
                for ingredient in active
            )
            if not covered:
                missing.append(needed.name)
        return missing

    def consume_recipe(self, user_id: UUID, recipe: Recipe) -> ConsumptionReport:
        """Subtract a cooked recipe's ingredients from the pantry."""
        active = self.list_active(user_id)
        now = self.clock()
        updated: list[str] = []
        trashed: list[str] = []
        missing: list[str] = []
        for needed in recipe.ingredients:
            index = next(
                (
                    position
                    for position, ingredient in enumerate(active)
                    if not ingredient.in_trash
                    and needed.name.lower() in ingredient.name.lower()
                ),
                None,
            )
            if index is None:
                missing.append(needed.name)
                continue
            consumed = apply_consumption(active[index], needed.quantity, now)
            if consumed.in_trash:
                self.repository.move_to_trash(consumed.id, now)
                trashed.append(consumed.name)
            else:
                self.repository.update_ingredient(consumed)
                updated.append(consumed.name)
            active[index] = consumed
        _logger.info(
            "Consumed recipe %s: updated=%s trashed=%s missing=%s",
            recipe.name,
            len(updated),
            len(trashed),
            len(missing),
        )
        return ConsumptionReport(updated=updated, trashed=trashed, missing=missing)

    def list_trashed(self, user_id: UUID) -> list[PantryIngredient]:
        """Return trashed ingredients, most recently trashed first."""
        return sorted(
            (
                ingredient
                for ingredient in self.repository.list_ingredients(user_id)
                if ingredient.in_trash
            ),
            key=lambda ingredient: ingredient.trashed_at or ingredient.updated_at,
            reverse=True,
        )

    def restore(self, user_id: UUID, ingredient_id: UUID) -> PantryIngredient | None:
        """Bring a trashed ingredient back into the pantry."""
        current = self._find_trashed(user_id, ingredient_id)
        if current is None:
            return None
        restored = replace(
            current, in_trash=False, trashed_at=None, updated_at=self.clock()
        )
        _logger.info("Restoring ingredient %s from trash", ingredient_id)
        return self.repository.update_ingredient(restored)

    def delete_permanently(self, user_id: UUID, ingredient_id: UUID) -> bool:
        """Remove a trashed ingredient for good, returning whether it existed."""
        if self._find_trashed(user_id, ingredient_id) is None:
            return False
        self.repository.delete_ingredient(ingredient_id)
        return True

    def expiring(
        self,
        user_id: UUID,
        today: date,
        within_days: int = EXPIRING_WINDOW_DAYS,
    ) -> list[PantryIngredient]:
        """Return active ingredients expiring within the window, soonest first.

        Already expired ingredients are included.
        """
        return sorted(
            (
                ingredient
                for ingredient in self.list_active(user_id)
                if ingredient.is_expiring_soon(today, within_days)
            ),
            key=lambda ingredient: ingredient.expiration_date,
        )

    def _find_trashed(
        self, user_id: UUID, ingredient_id: UUID
    ) -> PantryIngredient | None:
        return next(
            (
                ingredient
                for ingredient in self.list_trashed(user_id)
                if ingredient.id == ingredient_id
            ),
            None,
        )
