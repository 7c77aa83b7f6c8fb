"""Tests for pantry reads and recipe consumption."""

from datetime import date, timedelta
from uuid import UUID, uuid4

from pantry_pal.domain.recipes import RecipeIngredient
from pantry_pal.services.pantry import PantryService, apply_consumption
from tests.conftest import (
    FIXED_NOW,
    InMemoryPantryRepository,
    fixed_clock,
    make_ingredient,
    make_recipe,
)


def test_apply_consumption_reduces_quantity(user_id: UUID) -> None:
    flour = make_ingredient(user_id, "Flour", 5)

    consumed = apply_consumption(flour, 2, FIXED_NOW)

    assert consumed.quantity == 3
    assert not consumed.in_trash
    assert flour.quantity == 5


def test_apply_consumption_trashes_when_used_up(user_id: UUID) -> None:
    flour = make_ingredient(user_id, "Flour", 1)

    consumed = apply_consumption(flour, 4, FIXED_NOW)

    assert consumed.quantity == 0
    assert consumed.in_trash
    assert consumed.trashed_at == FIXED_NOW


def test_list_active_skips_trashed_and_sorts(
    pantry_repository: InMemoryPantryRepository, user_id: UUID
) -> None:
    pantry_repository.seed(
        make_ingredient(user_id, "rice", 1),
        make_ingredient(user_id, "Beans", 1),
        make_ingredient(user_id, "Old milk", 1, in_trash=True),
        make_ingredient(uuid4(), "Apples", 3),
    )
    service = PantryService(pantry_repository, clock=fixed_clock)

    names = [ingredient.name for ingredient in service.list_active(user_id)]

    assert names == ["Beans", "rice"]


def test_summarize_formats_quantities(
    pantry_repository: InMemoryPantryRepository, user_id: UUID
) -> None:
    pantry_repository.seed(
        make_ingredient(user_id, "Rice", 2.0, unit="cups"),
        make_ingredient(user_id, "Milk", 1.5, unit="l"),
    )
    service = PantryService(pantry_repository, clock=fixed_clock)

    assert service.summarize(user_id) == "Milk: 1.5 l\nRice: 2 cups"


def test_missing_ingredients(
    pantry_repository: InMemoryPantryRepository, user_id: UUID
) -> None:
    pantry_repository.seed(
        make_ingredient(user_id, "All-purpose flour", 5),
        make_ingredient(user_id, "Milk", 0.5),
    )
    service = PantryService(pantry_repository, clock=fixed_clock)

    assert service.missing_ingredients(user_id, make_recipe()) == ["Milk", "Egg"]


def test_consume_recipe_updates_trashes_and_reports_missing(
    pantry_repository: InMemoryPantryRepository, user_id: UUID
) -> None:
    flour = make_ingredient(user_id, "Flour", 5)
    milk = make_ingredient(user_id, "Whole milk", 1)
    pantry_repository.seed(flour, milk)
    service = PantryService(pantry_repository, clock=fixed_clock)

    report = service.consume_recipe(user_id, make_recipe())

    assert report.updated == ["Flour"]
    assert report.trashed == ["Whole milk"]
    assert report.missing == ["Egg"]
    assert pantry_repository.ingredients[flour.id].quantity == 3
    assert pantry_repository.trashed == [milk.id]


def test_consume_recipe_handles_repeated_ingredient(
    pantry_repository: InMemoryPantryRepository, user_id: UUID
) -> None:
    sugar = make_ingredient(user_id, "Sugar", 3, expiration_date=date(2026, 1, 1))
    pantry_repository.seed(sugar)
    service = PantryService(pantry_repository, clock=fixed_clock)
    recipe = make_recipe(
        ingredients=(
            RecipeIngredient(name="Sugar", quantity=2, unit="cups"),
            RecipeIngredient(name="Sugar", quantity=2, unit="cups"),
        )
    )

    report = service.consume_recipe(user_id, recipe)

    assert report.updated == ["Sugar"]
    assert report.trashed == ["Sugar"]
    assert pantry_repository.ingredients[sugar.id].in_trash


def test_expiry_flags(user_id: UUID) -> None:
    today = date(2025, 1, 15)
    milk = make_ingredient(user_id, "Milk", 1, expiration_date=date(2025, 1, 14))
    eggs = make_ingredient(user_id, "Eggs", 6, expiration_date=date(2025, 1, 18))
    rice = make_ingredient(user_id, "Rice", 2)

    assert milk.is_expired(today)
    assert not eggs.is_expired(today)
    assert eggs.is_expiring_soon(today)
    assert not eggs.is_expiring_soon(today, within_days=2)
    assert not rice.is_expired(today)
    assert not rice.is_expiring_soon(today)


def test_expiring_lists_soonest_first(
    pantry_repository: InMemoryPantryRepository, user_id: UUID
) -> None:
    today = date(2025, 1, 15)
    pantry_repository.seed(
        make_ingredient(user_id, "Yogurt", 1, expiration_date=date(2025, 1, 21)),
        make_ingredient(user_id, "Milk", 1, expiration_date=date(2025, 1, 14)),
        make_ingredient(user_id, "Cheese", 1, expiration_date=date(2025, 2, 14)),
        make_ingredient(user_id, "Rice", 2),
        make_ingredient(
            user_id,
            "Cream",
            1,
            expiration_date=today,
            in_trash=True,
            trashed_at=FIXED_NOW,
        ),
    )
    service = PantryService(pantry_repository, clock=fixed_clock)

    assert [item.name for item in service.expiring(user_id, today)] == [
        "Milk",
        "Yogurt",
    ]
    assert [item.name for item in service.expiring(user_id, today, 0)] == ["Milk"]


def test_trash_is_listed_newest_first_and_restored(
    pantry_repository: InMemoryPantryRepository, user_id: UUID
) -> None:
    older = make_ingredient(
        user_id, "Basil", 1, in_trash=True, trashed_at=FIXED_NOW - timedelta(days=2)
    )
    newer = make_ingredient(user_id, "Milk", 0, in_trash=True, trashed_at=FIXED_NOW)
    pantry_repository.seed(older, newer, make_ingredient(user_id, "Rice", 2))
    service = PantryService(pantry_repository, clock=fixed_clock)

    assert [item.name for item in service.list_trashed(user_id)] == ["Milk", "Basil"]

    restored = service.restore(user_id, older.id)

    assert restored is not None
    assert not restored.in_trash
    assert restored.trashed_at is None
    assert restored.updated_at == FIXED_NOW
    assert [item.name for item in service.list_active(user_id)] == ["Basil", "Rice"]


def test_restore_ignores_active_and_foreign_ingredients(
    pantry_repository: InMemoryPantryRepository, user_id: UUID
) -> None:
    rice = make_ingredient(user_id, "Rice", 2)
    foreign = make_ingredient(uuid4(), "Milk", 1, in_trash=True, trashed_at=FIXED_NOW)
    pantry_repository.seed(rice, foreign)
    service = PantryService(pantry_repository, clock=fixed_clock)

    assert service.restore(user_id, rice.id) is None
    assert service.restore(user_id, foreign.id) is None
    assert pantry_repository.updated == []


def test_delete_permanently_only_removes_trashed(
    pantry_repository: InMemoryPantryRepository, user_id: UUID
) -> None:
    rice = make_ingredient(user_id, "Rice", 2)
    basil = make_ingredient(user_id, "Basil", 1, in_trash=True, trashed_at=FIXED_NOW)
    pantry_repository.seed(rice, basil)
    service = PantryService(pantry_repository, clock=fixed_clock)

    assert not service.delete_permanently(user_id, rice.id)
    assert service.delete_permanently(user_id, basil.id)
    assert pantry_repository.deleted == [basil.id]
    assert rice.id in pantry_repository.ingredients
