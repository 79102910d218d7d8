"""Application configuration managed via environment variables."""
from functools import lru_cache

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore", populate_by_name=True
    )

    app_name: str = "Life Planner Backend"
    debug: bool = False
    log_level: str = "INFO"
    database_url: str = "postgresql+psycopg2://planner@localhost:5432/life_planner"
    auto_create_tables: bool = False
    default_timezone: str = "UTC"

    # Text-generation backends. A backend is enabled only when its key is set.
    deepseek_api_key: str | None = None
    deepseek_base_url: str = "https://api.deepseek.com/v1"
    deepseek_model: str = "deepseek-chat"
    huggingface_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("HUGGINGFACE_API_KEY", "HF_API_KEY"),
    )
    huggingface_model_url: str = (
        "https://api-inference.huggingface.co/models/mistralai/Mistral-7B-Instruct-v0.2"
    )
    llm_timeout_seconds: float = 60.0

    opik_enabled: bool = False
    opik_api_key: str | None = None
    opik_project: str = "life-planner"


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""
    return Settings()


settings = get_settings()
