"""Domain models for pantry ingredients."""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from uuid import UUID

from pantry_pal.services.quantities import format_quantity

EXPIRING_SOON_DAYS = 3


@dataclass(frozen=True)
class PantryIngredient:
    """An ingredient stored in a user's pantry.

    The store owns the authoritative record; services work on copies.
    """

    id: UUID | None
    user_id: UUID
    name: str
    quantity: float
    unit: str
    category: str
    created_at: datetime
    updated_at: datetime
    expiration_date: date | None = None
    in_trash: bool = False
    trashed_at: datetime | None = None

    @property
    def display_quantity(self) -> str:
        return format_quantity(self.quantity)

    def is_expired(self, today: date) -> bool:
        if self.expiration_date is None:
            return False
        return self.expiration_date < today

    def is_expiring_soon(
        self, today: date, within_days: int = EXPIRING_SOON_DAYS
    ) -> bool:
        if self.expiration_date is None:
            return False
        return self.expiration_date <= today + timedelta(days=within_days)
