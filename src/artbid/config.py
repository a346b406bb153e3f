"""Configuration settings for ArtBid.

Values come from the environment (or a local ``.env`` file):

- ``STORAGE_BACKEND``: ``mongo`` for the shared MongoDB store, ``memory`` for a
  single-process store (demos and tests)
- ``MONGODB_URI`` / ``MONGODB_DATABASE``: MongoDB connection
- ``ADMIN_TOKEN``: bearer token for the admin endpoints; admin auth is disabled
  when it is empty
- ``ADMIT_MAX_ATTEMPTS`` / ``ADMIT_RETRY_BACKOFF_MS``: how often the ledger
  re-evaluates a bid when another process appended to the same painting first
"""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """ArtBid settings from environment."""

    # Storage
    storage_backend: Literal["mongo", "memory"] = "mongo"
    mongodb_uri: str = "mongodb://localhost:27017"
    mongodb_database: str = "artbid"

    # Admin
    admin_token: str = ""

    # Ledger admission
    admit_max_attempts: int = 5
    admit_retry_backoff_ms: int = 10

    # API server
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    cors_origins: list[str] = ["*"]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
