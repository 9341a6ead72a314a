"""Engine configuration using pydantic-settings."""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    env: Literal["development", "production", "test"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    # Qualitative model providers
    openrouter_api_key: str | None = None
    openai_api_key: str | None = None
    qualitative_model: str = "openai/gpt-4o-mini"  # OpenRouter naming

    # Qualitative stage guardrails
    qualitative_enabled: bool = True
    qualitative_timeout_seconds: float = 30.0
    qualitative_temperature: float = 0.2
    qualitative_max_tokens: int = 2000

    # Digest sent to the model (~4 characters per token)
    digest_token_budget: int = 2000
    digest_max_paragraphs: int = 8
    digest_max_list_items: int = 15

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.env == "production"

    @property
    def is_test(self) -> bool:
        """Check if running in test mode."""
        return self.env == "test"

    @property
    def qualitative_available(self) -> bool:
        """Check if the qualitative stage can run (enabled and has an API key)."""
        return self.qualitative_enabled and bool(self.openrouter_api_key or self.openai_api_key)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
