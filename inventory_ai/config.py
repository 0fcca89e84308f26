from functools import lru_cache
from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # ==============================
    # Application
    # ==============================
    APP_NAME: str = "AI Inventory Manager"
    ENVIRONMENT: str = "local"
    SEED_DEMO_DATA: bool = True
    RECENT_SALES_LIMIT: int = 20

    # ==============================
    # Logging
    # ==============================
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    # ==============================
    # Gemini
    # ==============================
    GEMINI_API_KEY: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("GEMINI_API_KEY", "API_KEY"),
    )
    GEMINI_MODEL: str = "gemini-2.5-flash"
    GEMINI_API_URL: str = "https://generativelanguage.googleapis.com/v1beta"
    GEMINI_TIMEOUT_SECONDS: Optional[float] = None

    # ==============================
    # Persistence
    # ==============================
    PERSISTENCE_BACKEND: str = "mock"
    DATABASE_URL: str = "sqlite:///./inventory.db"
    COMMIT_DELAY_SECONDS: float = 0.3


@lru_cache
def get_settings() -> Settings:
    """Cached settings loader (once per process)."""
    return Settings()


__all__ = ["Settings", "get_settings"]
