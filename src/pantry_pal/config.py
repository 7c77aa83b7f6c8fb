"""Application configuration."""

import os
from uuid import UUID

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    api_token: str
    allowed_user_ids: str | None = None
    openai_api_key: str
    openai_model: str = "gpt-4o-mini"
    openai_temperature: float = 0.7
    conversation_history_limit: int = 20
    fatsecret_client_id: str
    fatsecret_client_secret: str
    fatsecret_base_url: str = "https://platform.fatsecret.com/rest/server.api"
    fatsecret_token_url: str = "https://oauth.fatsecret.com/connect/token"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_allowed_user_ids(raw: str | None) -> set[UUID] | None:
    """Parse the allowed user UUIDs from env; ``None`` allows everyone."""
    if raw is None:
        return None
    cleaned = raw.strip()
    if cleaned in {"", "*"}:
        return None
    ids: set[UUID] = set()
    for chunk in cleaned.split(","):
        value = chunk.strip()
        if not value:
            continue
        try:
            ids.add(UUID(value))
        except ValueError:
            continue
    return ids or None
