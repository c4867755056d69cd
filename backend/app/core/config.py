"""Application configuration managed via environment variables."""
from functools import lru_cache

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "Daily Growth Backend"
    debug: bool = False
    log_level: str = "INFO"
    database_url: str = "postgresql+psycopg2://postgres@localhost:5432/daily_growth"
    ai_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("OPENROUTER_API_KEY", "AI_API_KEY", "ai_api_key"),
    )
    ai_base_url: str = "https://openrouter.ai/api/v1"
    ai_model: str = "openai/gpt-3.5-turbo"
    ai_max_tokens: int = 1500
    ai_temperature: float = 0.7
    ai_timeout_seconds: float = 60.0
    opik_enabled: bool = False
    opik_api_key: str | None = None
    opik_project: str = "daily-growth"
    scheduler_enabled: bool = False
    scheduler_timezone: str = "UTC"
    daily_job_hour: int = 0
    daily_job_minute: int = 0
    jobs_run_on_startup: bool = False


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""
    return Settings()


settings = get_settings()
