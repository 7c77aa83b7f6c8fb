"""Tests for Supabase adapter implementations."""

from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from uuid import uuid4

import pytest

from pantry_pal.adapters.supabase_pantry_repository import SupabasePantryRepository
from pantry_pal.adapters.supabase_recipe_repository import SupabaseRecipeRepository
from tests.conftest import FIXED_NOW, make_ingredient, make_recipe


@dataclass
class FakeResponse:
    data: list[dict[str, object]] | None


@dataclass
class FakeTable:
    name: str
    response_queue: dict[str, list[list[dict[str, object]]]] = field(
        default_factory=lambda: {"select": [], "insert": [], "update": [], "delete": []}
    )
    last_payload: object | None = None
    last_filters: list[tuple[str, object]] = field(default_factory=list)
    actions: list[str] = field(default_factory=list)
    echo_id: str | None = None

    def queue(self, action: str, data: list[dict[str, object]]) -> None:
        self.response_queue[action].append(data)

    def select(self, *_args) -> "FakeTable":
        self._action = "select"
        return self

    def insert(self, payload) -> "FakeTable":  # type: ignore[no-untyped-def]
        self._action = "insert"
        self.last_payload = payload
        return self

    def update(self, payload) -> "FakeTable":  # type: ignore[no-untyped-def]
        self._action = "update"
        self.last_payload = payload
        return self

    def delete(self) -> "FakeTable":
        self._action = "delete"
        return self

    def eq(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_filters.append((column, value))
        return self

    def limit(self, _count: int) -> "FakeTable":
        return self

    def order(self, _column: str, desc: bool = False) -> "FakeTable":
        return self

    def execute(self) -> FakeResponse:
        action = getattr(self, "_action", "select")
        self.actions.append(action)
        queue = self.response_queue.get(action, [])
        data = queue.pop(0) if queue else []
        if not data and action == "insert" and self.echo_id:
            data = [{**self.last_payload, "id": self.echo_id}]
        return FakeResponse(data=data)


@dataclass
class FakeSupabaseClient:
    tables: dict[str, FakeTable] = field(default_factory=dict)

    def table(self, name: str) -> FakeTable:
        if name not in self.tables:
            self.tables[name] = FakeTable(name=name)
        return self.tables[name]


def _pantry_row(ingredient_id: str, user_id: str, **overrides) -> dict[str, object]:
    row: dict[str, object] = {
        "id": ingredient_id,
        "user_id": user_id,
        "name": "Rice",
        "quantity": 2,
        "unit": "cups",
        "category": "Grains",
        "expiration_date": "2025-02-01",
        "in_trash": False,
        "trashed_at": None,
        "created_at": "2025-01-15T12:00:00+00:00",
        "updated_at": "2025-01-15T12:00:00+00:00",
    }
    row.update(overrides)
    return row


def test_pantry_repository_lists_and_parses_rows() -> None:
    client = FakeSupabaseClient()
    table = client.table("pantry_ingredients")
    user_id = uuid4()
    table.queue("select", [_pantry_row(str(uuid4()), str(user_id), category=None)])

    ingredients = SupabasePantryRepository(client).list_ingredients(user_id)

    assert len(ingredients) == 1
    assert ingredients[0].quantity == 2.0
    assert ingredients[0].category == "Other"
    assert ingredients[0].expiration_date == date(2025, 2, 1)
    assert ingredients[0].created_at == FIXED_NOW
    assert ("user_id", str(user_id)) in table.last_filters


def test_pantry_repository_add_and_update() -> None:
    client = FakeSupabaseClient()
    table = client.table("pantry_ingredients")
    user_id = uuid4()
    ingredient_id = str(uuid4())
    table.queue("insert", [_pantry_row(ingredient_id, str(user_id))])
    table.queue("update", [_pantry_row(ingredient_id, str(user_id), quantity=1.5)])
    repository = SupabasePantryRepository(client)

    created = repository.add_ingredient(make_ingredient(user_id, "Rice", 2, id=None))
    assert isinstance(table.last_payload, dict)
    assert "id" not in table.last_payload
    assert table.last_payload["expiration_date"] is None

    updated = repository.update_ingredient(
        make_ingredient(user_id, "Rice", 1.5, id=created.id)
    )

    assert str(created.id) == ingredient_id
    assert updated.quantity == 1.5
    assert ("id", ingredient_id) in table.last_filters


def test_pantry_repository_add_without_data_raises() -> None:
    repository = SupabasePantryRepository(FakeSupabaseClient())

    with pytest.raises(RuntimeError, match="Failed to create"):
        repository.add_ingredient(make_ingredient(uuid4(), "Rice", 1, id=None))


def test_pantry_repository_trash_and_delete() -> None:
    client = FakeSupabaseClient()
    table = client.table("pantry_ingredients")
    repository = SupabasePantryRepository(client)
    ingredient_id = uuid4()
    trashed_at = datetime(2025, 1, 20, tzinfo=UTC)

    repository.move_to_trash(ingredient_id, trashed_at)
    assert table.last_payload == {
        "in_trash": True,
        "trashed_at": trashed_at.isoformat(),
        "updated_at": trashed_at.isoformat(),
    }

    repository.delete_ingredient(ingredient_id)
    assert table.actions == ["update", "delete"]


def test_recipe_repository_roundtrip() -> None:
    client = FakeSupabaseClient()
    table = client.table("saved_recipes")
    table.echo_id = "recipe-1"
    user_id = uuid4()
    repository = SupabaseRecipeRepository(client)
    recipe = make_recipe(user_id=user_id, cooking_tools=("Pan",))

    saved = repository.save_recipe(recipe)
    table.queue("select", [{**table.last_payload, "id": "recipe-1"}])
    fetched = repository.get_recipe("recipe-1")

    assert saved.id == "recipe-1"
    assert saved.saved_at is not None
    assert fetched is not None
    assert fetched.ingredients == recipe.ingredients
    assert fetched.instructions == recipe.instructions
    assert fetched.cooking_tools == ("Pan",)
    assert fetched.user_id == user_id


def test_recipe_repository_missing_recipe() -> None:
    repository = SupabaseRecipeRepository(FakeSupabaseClient())

    assert repository.get_recipe("missing") is None
    assert repository.list_recipes(uuid4()) == []
