"""Guards for quantities coming from model output, user input and arithmetic."""

import math


def is_finite_quantity(value: float) -> bool:
    """Return whether a value is a finite real number."""
    return isinstance(value, int | float) and math.isfinite(value)


def is_safe_quantity(value: float) -> bool:
    """Return whether a value is finite and non-negative."""
    return is_finite_quantity(value) and value >= 0


def sanitize_quantity(value: float) -> float:
    """Coerce a quantity to a safe value.

    Non-finite values become 0.0 and negatives are clamped to 0.0.
    """
    if not is_finite_quantity(value):
        return 0.0
    return max(0.0, float(value))


def format_quantity(value: float) -> str:
    """Render a sanitized quantity: ``2`` for whole numbers, ``1.5`` otherwise."""
    safe = sanitize_quantity(value)
    if safe.is_integer():
        return str(int(safe))
    return f"{safe:.1f}"
