from functools import lru_cache

from pydantic import AliasChoices, Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    app_name: str = Field(default="Vocabulary Domain Builder", alias="VOCAB_APP_NAME")
    database_url: str = Field(default="sqlite:///./vocabulary.db", alias="VOCAB_DATABASE_URL")
    log_level: str = Field(default="INFO", alias="VOCAB_LOG_LEVEL")

    generation_base_url: str = Field(
        default="http://localhost:8000",
        alias=AliasChoices("LLAMA_API_URL", "VOCAB_GENERATION_BASE_URL"),
    )
    generation_timeout_seconds: float = Field(default=60.0, alias="VOCAB_GENERATION_TIMEOUT_SECONDS")
    readiness_max_attempts: int = Field(default=10, alias="VOCAB_READINESS_MAX_ATTEMPTS")
    readiness_interval_ms: int = Field(default=1000, alias="VOCAB_READINESS_INTERVAL_MS")

    terms_per_list: int = Field(default=5, alias="VOCAB_TERMS_PER_LIST")
    terms_temperature: float = Field(default=0.3, alias="VOCAB_TERMS_TEMPERATURE")
    terms_max_tokens: int = Field(default=1024, alias="VOCAB_TERMS_MAX_TOKENS")
    story_temperature: float = Field(default=0.7, alias="VOCAB_STORY_TEMPERATURE")
    story_max_tokens: int = Field(default=150, alias="VOCAB_STORY_MAX_TOKENS")

    cors_origins: str | None = Field(
        default="http://localhost:5173,http://localhost:3000",
        alias=AliasChoices("CORS_ORIGINS", "VOCAB_CORS_ORIGINS"),
    )

    @computed_field(return_type=list[str])
    @property
    def cors_origin_list(self) -> list[str]:
        if not self.cors_origins:
            return []
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()
