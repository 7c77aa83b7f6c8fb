"""Pantry actions extracted from assistant replies."""

import math
from dataclasses import dataclass
from datetime import date, datetime
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


@dataclass(frozen=True)
class AddIngredient:
    name: str
    quantity: float
    unit: str
    category: str
    expiration_date: date | None = None


@dataclass(frozen=True)
class EditIngredient:
    """Edit of an existing ingredient; ``None`` fields are left unchanged."""

    current_name: str
    new_name: str | None = None
    quantity: float | None = None
    unit: str | None = None
    category: str | None = None
    expiration_date: date | None = None


@dataclass(frozen=True)
class DeleteIngredient:
    name: str


@dataclass(frozen=True)
class UpdateQuantity:
    name: str
    new_quantity: float


PantryAction = AddIngredient | EditIngredient | DeleteIngredient | UpdateQuantity


def _coerce_finite(value: object) -> object:
    """Accept JSON numbers or numeric strings, rejecting non-finite values."""
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError("quantity must be a number")
    if isinstance(value, int | float):
        number = float(value)
    elif isinstance(value, str):
        number = float(value.strip())
    else:
        raise ValueError("quantity must be a number")
    if not math.isfinite(number):
        raise ValueError("quantity must be finite")
    return number


def _coerce_date(value: object) -> date | None:
    """Parse ``yyyy-MM-dd``; anything else is treated as absent."""
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    try:
        return datetime.strptime(value.strip(), "%Y-%m-%d").date()
    except ValueError:
        return None


class _ActionPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    expiration_date: date | None = Field(default=None, alias="expirationDate")

    @field_validator("expiration_date", mode="before")
    @classmethod
    def _parse_expiration(cls, value: object) -> date | None:
        return _coerce_date(value)


class AddIngredientPayload(_ActionPayload):
    """JSON shape of an ``add_ingredient`` action."""

    action: Literal["add_ingredient"]
    name: str
    quantity: float
    unit: str
    category: str

    @field_validator("quantity", mode="before")
    @classmethod
    def _finite_quantity(cls, value: object) -> object:
        return _coerce_finite(value)

    def to_action(self) -> AddIngredient:
        return AddIngredient(
            name=self.name,
            quantity=self.quantity,
            unit=self.unit,
            category=self.category,
            expiration_date=self.expiration_date,
        )


class EditIngredientPayload(_ActionPayload):
    """JSON shape of an ``edit_ingredient`` action."""

    action: Literal["edit_ingredient"]
    name: str
    new_name: str | None = Field(default=None, alias="newName")
    quantity: float | None = None
    unit: str | None = None
    category: str | None = None

    @field_validator("quantity", mode="before")
    @classmethod
    def _finite_quantity(cls, value: object) -> object:
        return _coerce_finite(value)

    def to_action(self) -> EditIngredient:
        return EditIngredient(
            current_name=self.name,
            new_name=self.new_name,
            quantity=self.quantity,
            unit=self.unit,
            category=self.category,
            expiration_date=self.expiration_date,
        )


class DeleteIngredientPayload(_ActionPayload):
    """JSON shape of a ``delete_ingredient`` action."""

    action: Literal["delete_ingredient"]
    name: str

    def to_action(self) -> DeleteIngredient:
        return DeleteIngredient(name=self.name)


class UpdateQuantityPayload(_ActionPayload):
    """JSON shape of an ``update_quantity`` action."""

    action: Literal["update_quantity"]
    name: str
    quantity: float

    @field_validator("quantity", mode="before")
    @classmethod
    def _finite_quantity(cls, value: object) -> object:
        return _coerce_finite(value)

    def to_action(self) -> UpdateQuantity:
        return UpdateQuantity(name=self.name, new_quantity=self.quantity)


ActionPayload = Annotated[
    AddIngredientPayload
    | EditIngredientPayload
    | DeleteIngredientPayload
    | UpdateQuantityPayload,
    Field(discriminator="action"),
]
