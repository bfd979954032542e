"""Typed settings configuration - single source of truth."""

from functools import lru_cache
from typing import Literal

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Storage
    storage_backend: Literal["memory", "sql"] = "memory"
    database_url: str | None = None

    # Location provider (Google Places Text Search)
    google_maps_api_key: str = ""
    places_base_url: str = "https://places.googleapis.com/v1/places:searchText"

    # Trip plan generation (OpenAI)
    openai_api_key: SecretStr | None = None
    openai_model: str = "gpt-4o-mini"

    # Timeouts (milliseconds)
    location_timeout_ms: int = 4000
    generation_timeout_ms: int = 30000

    # Location search bounds
    search_limit_max: int = 10

    # Share tokens
    share_token_bytes: int = 16
    share_token_max_attempts: int = 5


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
