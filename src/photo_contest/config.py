"""Application configuration."""

import os
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    telegram_bot_token: str
    admin_token: str
    telegram_allowed_user_ids: str | None = None
    media_strategy: Literal["supabase", "inline"] = "supabase"
    supabase_url: str | None = None
    supabase_service_key: str | None = None
    supabase_bucket: str = "contest-photos"
    compress_images: bool = True
    image_max_dimension: int = 1920
    image_jpeg_quality: int = 80
    catalog_capacity: int = 200
    max_nickname_length: int = 10
    session_timeout_seconds: float = 300
    session_sweep_interval_seconds: float = 60
    inactivity_purge_seconds: float | None = None
    test_mode: bool = False
    submissions_open: bool = True
    winners_locked: bool = False
    guest_name_prefix: str = "Guest "
    passthrough_url: str | None = None
    environment: str = _ENVIRONMENT
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_allowed_user_ids(raw: str | None) -> set[int] | None:
    """Parse allowed Telegram user IDs from env."""
    if raw is None:
        return None
    cleaned = raw.strip()
    if cleaned in {"", "*"}:
        return None
    ids: set[int] = set()
    for chunk in cleaned.split(","):
        value = chunk.strip()
        if not value:
            continue
        if value.isdigit():
            ids.add(int(value))
    return ids or None
