"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    off_base_url: str = "https://world.openfoodfacts.org"
    off_user_agent: str = "VegWise/1.0 (https://vegwise.app)"
    off_timeout_seconds: float = 10.0
    off_search_page_size: int = 50
    off_retry_delay_seconds: float = 1.0
    deepl_api_key: str | None = None
    deepl_base_url: str = "https://api-free.deepl.com/v2"
    rules_path: str | None = None
    default_suggestion_limit: int = 8
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_csv_list(raw: str | None) -> list[str]:
    """Parse a comma-separated list into trimmed lowercase items."""
    if raw is None:
        return []
    items: list[str] = []
    for chunk in raw.split(","):
        value = chunk.strip().lower()
        if value:
            items.append(value)
    return items
