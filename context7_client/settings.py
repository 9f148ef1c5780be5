"""Client settings loaded from environment variables and .env file."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings for the Context7 request client."""

    model_config = SettingsConfigDict(
        env_prefix="CONTEXT7_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    base_url: str = "https://context7.com/api/v1"
    timeout: float = 15.0  # per attempt, seconds
    max_attempts: int = 4  # 1 initial + 3 retries
    retry_backoff: float = 0.5  # base delay, doubled per retry
    max_backoff: float = 30.0
    user_agent: str = "context7-client"
    log_level: str = "WARNING"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
