"""
Configuration Management

Uses Pydantic Settings for environment-based configuration.
Loads from .env file automatically.

Backend settings (Supabase URL + anon key) are required at startup.
The OpenRouter key is only checked when a completion is attempted.
"""

from typing import Optional
from functools import lru_cache
from pydantic_settings import BaseSettings

from nichelab.errors import ConfigurationError


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # Supabase (Required at startup)
    SUPABASE_URL: str = ""
    SUPABASE_ANON_KEY: str = ""

    # Postgres behind Supabase; SQLite fallback when unset
    DATABASE_URL: Optional[str] = None

    # OpenRouter (Required only for AI features)
    OPENROUTER_API_KEY: Optional[str] = None
    OPENROUTER_MODEL: str = "openai/gpt-3.5-turbo"
    OPENROUTER_BASE_URL: str = "https://openrouter.ai/api/v1"

    # Attribution headers sent to OpenRouter
    APP_URL: str = "http://localhost:8000"
    APP_TITLE: str = "Niche Site Builder"

    # Application Settings
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # Timeouts
    API_TIMEOUT: int = 60

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"  # Ignore extra fields in .env file
        case_sensitive = False  # Allow both UPPERCASE and lowercase


@lru_cache
def get_settings() -> Settings:
    """Get or create cached settings instance."""
    return Settings()


def validate_backend_settings(settings: Optional[Settings] = None) -> Settings:
    """
    Fail fast when the persistence backend is not configured.

    Raises:
        ConfigurationError: SUPABASE_URL or SUPABASE_ANON_KEY is missing
    """
    settings = settings or get_settings()
    missing = [
        name for name in ("SUPABASE_URL", "SUPABASE_ANON_KEY")
        if not getattr(settings, name)
    ]
    if missing:
        raise ConfigurationError(
            f"Missing Supabase environment variables: {', '.join(missing)}. "
            "Please check your .env file.",
            details={"missing": missing},
        )
    return settings
