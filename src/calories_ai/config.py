"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    openai_api_key: str
    openai_model: str = "gpt-4o-mini"
    openai_max_tokens: int = 1000
    analysis_timeout_seconds: float = 540.0
    max_image_bytes: int = 5 * 1024 * 1024
    session_wait_seconds: float = 10.0
    meals_table: str = "meals"
    password_reset_redirect_url: str | None = None
    allowed_user_ids: str | None = None
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_allowed_user_ids(raw: str | None) -> set[str] | None:
    """Parse the comma-separated list of user ids allowed to run analyses."""
    if raw is None:
        return None
    cleaned = raw.strip()
    if cleaned in {"", "*"}:
        return None
    ids = {chunk.strip() for chunk in cleaned.split(",") if chunk.strip()}
    return ids or None
