"""Keyword heuristics splitting a recipe into precook and cook phases.

Two classifiers exist. The primary one walks the instructions and uses the
ingredients and equipment each step references. The fallback one is used
when no step carries explicit ingredient or equipment tags; it looks only
at ingredient attributes and tool names. Both always return the precook
phase first and put every recipe ingredient in exactly one phase.
"""

import logging
from enum import Enum

from pantry_pal.domain.recipes import (
    PhaseType,
    Recipe,
    RecipeIngredient,
    RecipeInstruction,
    RecipePhase,
)

PRECOOK_KEYWORDS: tuple[str, ...] = (
    "prep",
    "chop",
    "dice",
    "mince",
    "slice",
    "wash",
    "rinse",
    "marinate",
    "soak",
    "measure",
    "mix",
    "combine",
    "whisk",
    "beat",
    "cut",
    "peel",
    "trim",
    "season",
    "prepare",
)

COOK_KEYWORDS: tuple[str, ...] = (
    "cook",
    "bake",
    "fry",
    "sauté",
    "simmer",
    "boil",
    "roast",
    "grill",
    "steam",
    "broil",
    "heat",
    "warm",
    "brown",
    "sear",
    "stir",
    "flip",
    "turn",
)

PREP_TOOL_KEYWORDS: tuple[str, ...] = (
    "cutting board",
    "knife",
    "measuring cup",
    "measuring spoon",
    "mixing bowl",
    "whisk",
    "spatula",
    "peeler",
    "grater",
)

COOK_TOOL_KEYWORDS: tuple[str, ...] = (
    "pan",
    "pot",
    "skillet",
    "oven",
    "stove",
    "grill",
    "fryer",
    "steamer",
    "broiler",
    "saucepan",
    "stockpot",
    "baking sheet",
)

FALLBACK_PRECOOK_KEYWORDS: tuple[str, ...] = ("spice", "herb", "salt", "pepper")

_logger = logging.getLogger(__name__)


class StepPhase(str, Enum):
    """Keyword classification of a single instruction."""

    PRECOOK = "precook"
    COOK = "cook"
    BOTH = "both"
    NEITHER = "neither"


def classify_step(text: str) -> StepPhase:
    """Classify instruction text by substring match against both keyword sets."""
    lowered = text.lower()
    is_precook = any(keyword in lowered for keyword in PRECOOK_KEYWORDS)
    is_cook = any(keyword in lowered for keyword in COOK_KEYWORDS)
    if is_precook and is_cook:
        return StepPhase.BOTH
    if is_precook:
        return StepPhase.PRECOOK
    if is_cook:
        return StepPhase.COOK
    return StepPhase.NEITHER


def classify_tool(tool: str) -> PhaseType:
    """Classify a tool name; prep tools win, unknown tools default to precook."""
    lowered = tool.lower()
    if any(keyword in lowered for keyword in PREP_TOOL_KEYWORDS):
        return PhaseType.PRECOOK
    if any(keyword in lowered for keyword in COOK_TOOL_KEYWORDS):
        return PhaseType.COOK
    return PhaseType.PRECOOK


def has_explicit_tags(recipe: Recipe) -> bool:
    """Return whether any step lists the ingredients or equipment it uses."""
    return any(step.ingredients or step.equipment for step in recipe.instructions)


def organize_into_phases(recipe: Recipe) -> tuple[RecipePhase, RecipePhase]:
    """Split a recipe into ``(precook, cook)`` phases."""
    if not has_explicit_tags(recipe):
        _logger.debug("No step tags on %s, using fallback phases", recipe.name)
        return fallback_phases(recipe)
    return primary_phases(recipe)


def primary_phases(recipe: Recipe) -> tuple[RecipePhase, RecipePhase]:
    """Assign ingredients and tools by walking the instructions in order.

    A step matching both keyword sets counts as precook, since prep verbs
    ("combine and sauté") usually lead the sentence. Ingredients of steps
    matching neither stay unassigned and end up in precook; their
    equipment goes through the tool keyword pass.
    """
    assignments: dict[int, PhaseType] = {}
    tools: dict[PhaseType, set[str]] = {PhaseType.PRECOOK: set(), PhaseType.COOK: set()}
    pending_tools: list[str] = []
    recipe_tools = list(recipe.cooking_tools or ())

    for step in recipe.ordered_instructions():
        phase = _phase_for_step(classify_step(step.instruction))
        if step.ingredients or step.equipment:
            ingredient_refs = list(step.ingredients)
            equipment = list(step.equipment)
        else:
            ingredient_refs, equipment = _scan_step(step, recipe, recipe_tools)

        for reference in ingredient_refs:
            index = _match_ingredient(reference, recipe.ingredients)
            if index is None or index in assignments:
                continue
            if phase is not None:
                assignments[index] = phase

        for tool in equipment:
            if phase is None:
                pending_tools.append(tool)
            else:
                tools[phase].add(tool)

    precook, cook = _partition(recipe.ingredients, assignments)

    assigned_tools = tools[PhaseType.PRECOOK] | tools[PhaseType.COOK]
    for tool in [*recipe_tools, *pending_tools]:
        if tool in assigned_tools:
            continue
        tools[classify_tool(tool)].add(tool)
        assigned_tools.add(tool)

    return (
        RecipePhase.of(PhaseType.PRECOOK, precook, _sorted_tools(tools[PhaseType.PRECOOK])),
        RecipePhase.of(PhaseType.COOK, cook, _sorted_tools(tools[PhaseType.COOK])),
    )


def fallback_phases(recipe: Recipe) -> tuple[RecipePhase, RecipePhase]:
    """Split by ingredient attributes, then positionally if one side is empty.

    Seasonings and ingredients with a preparation note are precook,
    everything else is cook. When that leaves either phase without
    ingredients the list is halved in order, the first half (and the odd
    one out) going to precook.
    """
    precook: list[RecipeIngredient] = []
    cook: list[RecipeIngredient] = []
    for ingredient in recipe.ingredients:
        if _is_fallback_precook(ingredient):
            precook.append(ingredient)
        else:
            cook.append(ingredient)

    if not precook or not cook:
        ingredients = list(recipe.ingredients)
        middle = (len(ingredients) + 1) // 2
        precook, cook = ingredients[:middle], ingredients[middle:]

    tools: dict[PhaseType, set[str]] = {PhaseType.PRECOOK: set(), PhaseType.COOK: set()}
    for tool in recipe.cooking_tools or ():
        tools[classify_tool(tool)].add(tool)

    return (
        RecipePhase.of(PhaseType.PRECOOK, precook, _sorted_tools(tools[PhaseType.PRECOOK])),
        RecipePhase.of(PhaseType.COOK, cook, _sorted_tools(tools[PhaseType.COOK])),
    )


def _phase_for_step(step_phase: StepPhase) -> PhaseType | None:
    if step_phase is StepPhase.COOK:
        return PhaseType.COOK
    if step_phase in (StepPhase.PRECOOK, StepPhase.BOTH):
        return PhaseType.PRECOOK
    return None


def _scan_step(
    step: RecipeInstruction,
    recipe: Recipe,
    recipe_tools: list[str],
) -> tuple[list[str], list[str]]:
    """Find ingredient and tool names mentioned literally in an untagged step."""
    lowered = step.instruction.lower()
    ingredient_refs = [
        ingredient.name
        for ingredient in recipe.ingredients
        if ingredient.name.strip() and ingredient.name.lower() in lowered
    ]
    equipment = [tool for tool in recipe_tools if tool.strip() and tool.lower() in lowered]
    return ingredient_refs, equipment


def _match_ingredient(
    reference: str, ingredients: tuple[RecipeIngredient, ...]
) -> int | None:
    """Return the index of the first ingredient matching a step reference."""
    needle = reference.strip().lower()
    if not needle:
        return None
    for index, ingredient in enumerate(ingredients):
        name = ingredient.name.strip().lower()
        if not name:
            continue
        if needle in name or name in needle:
            return index
    return None


def _partition(
    ingredients: tuple[RecipeIngredient, ...], assignments: dict[int, PhaseType]
) -> tuple[list[RecipeIngredient], list[RecipeIngredient]]:
    """Split ingredients by assignment, keeping first-assigned order per phase.

    Unassigned ingredients are appended to precook in recipe order.
    """
    precook = [
        ingredients[index]
        for index, phase in assignments.items()
        if phase is PhaseType.PRECOOK
    ]
    cook = [
        ingredients[index]
        for index, phase in assignments.items()
        if phase is PhaseType.COOK
    ]
    precook.extend(
        ingredient
        for index, ingredient in enumerate(ingredients)
        if index not in assignments
    )
    return precook, cook


def _is_fallback_precook(ingredient: RecipeIngredient) -> bool:
    name = ingredient.name.lower()
    if any(keyword in name for keyword in FALLBACK_PRECOOK_KEYWORDS):
        return True
    return bool(ingredient.preparation and ingredient.preparation.strip())


def _sorted_tools(tools: set[str]) -> list[str]:
    return sorted(tools, key=lambda tool: (tool.lower(), tool))
