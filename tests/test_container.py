"""Tests for container wiring and settings."""

import asyncio
from uuid import uuid4

from pantry_pal.config import parse_allowed_user_ids
from pantry_pal.containers import build_container


def test_build_container_creates_services(settings) -> None:
    container = build_container(settings)
    assert container.assistant_service is not None
    assert container.recipe_search_service is not None
    assert container.assistant_service.executor is container.executor
    asyncio.run(container.close_resources())


def test_parse_allowed_user_ids() -> None:
    first, second = uuid4(), uuid4()

    assert parse_allowed_user_ids(None) is None
    assert parse_allowed_user_ids(" * ") is None
    assert parse_allowed_user_ids(f"{first}, not-a-uuid,{second},") == {first, second}
    assert parse_allowed_user_ids("not-a-uuid") is None
