"""Runtime configuration, read from the environment and an optional ``.env``."""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings.

    Field names are the environment variable names.
    """

    # Storage; defaults to <repo>/data when unset.
    DATA_DIR: Path | None = None

    # Stripe
    STRIPE_SECRET_KEY: str = ""
    CURRENCY: str = "usd"

    # Retries for processor connection errors
    MAX_RETRIES: int = 3
    RETRY_DELAY: int = 1

    SERVICE_NAME: str = "asphalt-orders"
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True)


settings = Settings()
