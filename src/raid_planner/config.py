"""Application configuration."""

import os

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    telegram_bot_token: str
    telegram_api_base_url: str = "https://api.telegram.org"
    telegram_allowed_user_ids: str | None = None
    tick_period_seconds: int = Field(default=60, gt=0)
    roster_capacity: int = Field(default=3, gt=0)
    display_capacity_label: int = Field(default=6, gt=0)
    max_hours: int = Field(default=23, ge=0)
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_allowed_user_ids(raw: str | None) -> set[int] | None:
    """Parse the comma separated allow-list; empty or "*" lets everyone in."""
    if raw is None or raw.strip() in {"", "*"}:
        return None
    chunks = (chunk.strip() for chunk in raw.split(","))
    ids = {int(chunk) for chunk in chunks if chunk.isdigit()}
    return ids or None
